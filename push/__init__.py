# push/__init__.py
# -------------------------------
# Web Push support: the in-memory subscription registry (registry.py)
# and the broadcast fan-out over pywebpush (dispatcher.py).
# -------------------------------
