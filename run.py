#!/usr/bin/env python3
"""Convenience runner for the activity reports.

Usage:
    python run.py genres
    python run.py fitness
"""
import logging
import sys

from activity_reports.main import main

if __name__ == "__main__":
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    sys.exit(main())
