"""
CourseMaster client.

Catalog browsing, lesson navigation, quiz taking, assignment submission and admin
tools on top of the CourseMaster REST API. All grading, persistence and access
control stay on the server; this package keeps session-scoped state only.
"""

from .config.loader import load_settings

__all__ = ["load_settings"]
