"""
Batch jobs run outside the HTTP server.
"""

from .reminder_scan import run_reminder_scan

__all__ = ["run_reminder_scan"]
