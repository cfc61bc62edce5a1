"""Mini README: Interactive interfaces for FinTrack.

Exports the FastAPI application factory that serves the tracker's JSON
API. The command line entry point lives in ``main_finance_tracker.py``.
"""

from .web_app import create_application

__all__ = ["create_application"]
