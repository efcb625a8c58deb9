"""
Gunicorn settings for the analytics API.

Requests are read-only and hold no worker state, so the worker count is the
only knob that matters for throughput. Set BIND and WORKERS to override.
"""

import multiprocessing
import os

bind = os.getenv("BIND", "0.0.0.0:8000")
worker_class = "uvicorn.workers.UvicornWorker"
workers = int(os.getenv("WORKERS", multiprocessing.cpu_count() + 1))

# Dashboards fan out several queries per request
timeout = int(os.getenv("WORKER_TIMEOUT", 60))
graceful_timeout = 30
keepalive = 5

# Recycle workers to bound memory growth
max_requests = 5000
max_requests_jitter = 500

proc_name = "marketplace-analytics-api"

# structlog owns application output on stdout; gunicorn keeps its own error log
errorlog = "-"
accesslog = None
loglevel = os.getenv("LOG_LEVEL", "info").lower()
