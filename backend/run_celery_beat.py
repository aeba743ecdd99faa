#!/usr/bin/env python3
# backend/run_celery_beat.py
"""
Development Celery beat runner
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
    print("Starting Celery beat (daily payment reminders)")
    cmd = [sys.executable, "-m", "celery", "-A", "evenlyo.tasks.celery_app", "beat", "--loglevel=info"]
    subprocess.run(cmd)
