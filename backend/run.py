#!/usr/bin/env python3
# backend/run.py
"""
Development API server runner
For local development only
"""
import os
from pathlib import Path
import sys

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

os.environ.setdefault("ENVIRONMENT", "development")

import uvicorn  # noqa: E402

if __name__ == "__main__":
    print("Starting Evenlyo API on http://localhost:8000 (docs at /docs)")
    uvicorn.run("evenlyo.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
