"""
Job runners for the leads feature.
"""

from .recency_refresh_job import RecencyRefreshSummary, run_lead_recency_refresh

__all__ = ["RecencyRefreshSummary", "run_lead_recency_refresh"]
