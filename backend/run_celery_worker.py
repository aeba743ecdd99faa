#!/usr/bin/env python3
# backend/run_celery_worker.py
"""
Development Celery worker runner
For local development only
"""
import os
from pathlib import Path
import subprocess
import sys

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

if __name__ == "__main__":
    queues = os.getenv("CELERY_QUEUES") or "celery,payments"
    print(f"Starting Celery worker, consuming queues: {queues}")

    cmd = [
        sys.executable,
        "-m",
        "celery",
        "-A",
        "evenlyo.tasks.celery_app",
        "worker",
        "--loglevel=info",
        "--concurrency=2",
        "-Q",
        queues,
    ]
    subprocess.run(cmd)
