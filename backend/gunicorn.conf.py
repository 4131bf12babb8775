import os

# App
wsgi_app = "profilehub:create_app()"

# Bind & workers
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
# Without REDIS_URL revocations live in process memory: keep a single worker.
workers = int(os.getenv("WEB_CONCURRENCY", "4" if os.getenv("REDIS_URL") else "1"))
threads = int(os.getenv("GUNICORN_THREADS", "4"))
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr (collected by Docker)
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

# Honour proxy headers
forwarded_allow_ips = "*"
proxy_protocol = False
