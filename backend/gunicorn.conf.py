import os

# Bind & workers
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
threads = int(os.getenv("GUNICORN_THREADS", "4"))
wsgi_app = "catalog:create_app()"

# Per-request deadline: a worker stuck past it is killed and restarted.
# Database statements are bounded by the same value (statement_timeout).
timeout = int(os.getenv("REQUEST_TIMEOUT_SECONDS", "5")) + 1
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr (collected by Docker)
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

# Trust proxy headers
forwarded_allow_ips = "*"
proxy_protocol = False
