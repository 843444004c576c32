#!/usr/bin/env python3
"""
Main entry point for the match clock web API.

This script configures logging from the environment and launches the
Flask-based web server.
"""
import logging

from matchclock.ui.web_app import run_web_app
from matchclock.utils.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_web_app(
        host=settings.HOST,
        port=settings.PORT,
        data_file=settings.DATA_FILE,
        debug=settings.DEBUG,
    )
