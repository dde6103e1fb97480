#!/usr/bin/env python3
"""
Run the backend locally.

Usage:
    python backend/run_local.py

Expects a MongoDB server at MONGODB_URI (default mongodb://localhost:27017).
- API Docs: http://localhost:8000/docs
- Health Check: http://localhost:8000/health
"""

import os

os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")


def main():
    print("=" * 60)
    print("  DocVault - Local Development Server")
    print("=" * 60)
    print()
    print("  API URL:      http://localhost:8000")
    print("  API Docs:     http://localhost:8000/docs")
    print("  Health Check: http://localhost:8000/health")
    print()
    print("  Press Ctrl+C to stop")
    print("=" * 60)

    import uvicorn
    uvicorn.run(
        "docvault.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )


if __name__ == "__main__":
    main()
