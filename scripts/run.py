#!/usr/bin/env python3
"""Run the time clock API with Uvicorn, optionally seeding the default facility first."""

import os

import uvicorn
from dotenv import load_dotenv

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _flag(name, default):
    return os.getenv(name, default).lower() in ("true", "1", "t")


def main():
    load_dotenv(os.path.join(PROJECT_ROOT, ".env"))

    host = os.getenv("APP_HOST", "127.0.0.1")
    port = int(os.getenv("APP_PORT", "8000"))
    reload = _flag("APP_RELOAD", "True")
    log_level = os.getenv("APP_LOG_LEVEL", "info")

    # Clock-in is refused until a facility exists; SEED_FACILITY installs one on first boot
    if _flag("SEED_FACILITY", "False"):
        from db.seed import seed_facility

        seed_facility()

    print(f"Starting time clock API on {host}:{port} (reload={reload}, log level={log_level})")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
        app_dir=PROJECT_ROOT,
        reload_dirs=[PROJECT_ROOT],
    )


if __name__ == "__main__":
    main()
