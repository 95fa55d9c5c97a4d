import os

PROJECT_ROOT = os.getenv("PROJECT_ROOT", os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir)))

# Bind address; a unix socket path ("unix:/...") works for local Nginx proxying
bind = os.getenv("BIND", "0.0.0.0:8000")
# Change feed delivery is in-process, so live views need a single worker
workers = int(os.getenv("WEB_WORKERS", "1"))
# Time to gracefully stop workers on restart/shutdown
graceful_timeout = 5
# Use Gevent WebSocket worker to support Flask-SocketIO
worker_class = "geventwebsocket.gunicorn.workers.GeventWebSocketWorker"
# Change working directory to the project root before loading app
chdir = PROJECT_ROOT
# WSGI app module path for Gunicorn to load
wsgi_app = "partywatch.wsgi:app"

# Kill and restart workers that block beyond this many seconds
timeout = 120
# Error log file path; "-" logs to stderr
errorlog = os.getenv("GUNICORN_ERRORLOG", "-")
# Logging level for Gunicorn (defaults to INFO, can be overridden via LOG_LEVEL env var)
loglevel = os.getenv("LOG_LEVEL", "info").lower()
# Capture stdout/stderr of workers into Gunicorn logs
capture_output = True
