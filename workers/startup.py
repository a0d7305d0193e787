#!/usr/bin/env python
"""
Worker Startup Script

Starts the ARQ background worker that runs queued evaluations.

Usage:
    python -m workers.startup

Or with arq CLI:
    arq workers.settings.WorkerSettings
"""

import logging

from arq import run_worker

from config.logging_config import setup_logging
from config.settings import settings
from workers.settings import WorkerSettings


def main():
    """Start the ARQ worker."""
    setup_logging(settings.log_level)
    logging.getLogger("intellibid.workers").info("Starting ARQ worker...")

    run_worker(WorkerSettings)


if __name__ == "__main__":
    main()
