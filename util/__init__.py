# util/__init__.py
# -------------------------------
# Small helpers shared by the relay (name normalization).
# -------------------------------
