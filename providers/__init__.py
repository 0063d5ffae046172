# providers/__init__.py
# -------------------------------
# External data integrations. Currently only SofaScore (sofascore.py).
# -------------------------------
