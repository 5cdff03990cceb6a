"""
Activity metrics package.

Reporting counters derived from activity sets, independent of scoring.
"""

from .service import summarize_activity

__all__ = ["summarize_activity"]
