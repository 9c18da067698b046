"""
Gunicorn Configuration

Uvicorn workers each hold their own copy of the snapshot, loaded at startup.
"""

import multiprocessing
import os

# Server socket
bind = os.getenv("BIND", "0.0.0.0:8000")
backlog = 2048

# Worker processes
workers = int(os.getenv("WORKERS", min(multiprocessing.cpu_count(), 4)))
worker_class = "uvicorn.workers.UvicornWorker"
max_requests = 10000
max_requests_jitter = 1000
# Startup includes the snapshot load
timeout = int(float(os.getenv("SNAPSHOT_LOAD_TIMEOUT_SECONDS", 30))) + 90
keepalive = 5
graceful_timeout = 30

proc_name = "sales-analytics-api"

# Logging
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
accesslog = "-"


def when_ready(server):
    server.log.info("Sales analytics API ready")


def worker_abort(worker):
    worker.log.warning("Worker %s aborted", worker.pid)
