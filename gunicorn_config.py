# Gunicorn configuration file for the SofaScore relay
#
#   gunicorn -c gunicorn_config.py

import os

wsgi_app = "app:create_app()"

# Server socket
bind = f"0.0.0.0:{os.environ.get('PORT', '3000')}"
backlog = 2048

# Push subscriptions live in process memory, so run ONE worker process and
# get concurrency from threads. More workers would each hold their own registry.
workers = 1
worker_class = "gthread"
threads = int(os.environ.get("GUNICORN_THREADS", "8"))
timeout = 30
keepalive = 2

# Logging - stdout/stderr by default, override with GUNICORN_LOG_DIR
_log_dir = os.environ.get("GUNICORN_LOG_DIR")
accesslog = os.path.join(_log_dir, "access.log") if _log_dir else "-"
errorlog = os.path.join(_log_dir, "error.log") if _log_dir else "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s"'

# Process naming
proc_name = "sofascore_relay"

# Server mechanics
daemon = False
umask = 0
user = None
group = None
tmp_upload_dir = None
