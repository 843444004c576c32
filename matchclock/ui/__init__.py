"""
User interface package for the match clock application.

This package contains the Flask web API.
"""
from .web_app import create_app, run_web_app

__all__ = ["create_app", "run_web_app"]
