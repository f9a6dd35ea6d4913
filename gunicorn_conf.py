import multiprocessing
import os

wsgi_app = "app.main:app"
bind = f"0.0.0.0:{os.getenv('PORT', '8000')}"
workers = int(os.getenv("WEB_CONCURRENCY", min(multiprocessing.cpu_count() * 2 + 1, 2)))
worker_class = "uvicorn.workers.UvicornWorker"
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
# A cold slate fetches ~30 team schedules before the first response.
timeout = int(os.getenv("GUNICORN_TIMEOUT", "90"))
keepalive = int(os.getenv("GUNICORN_KEEPALIVE", "5"))
