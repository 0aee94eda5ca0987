"""
app/services package marker.
"""

from app.services.metrics_service import calculate_dashboard_metrics
from app.services.record_loader import RecordLoadError, build_dashboard_data, load_dashboard_data
from app.services.session_registry import DashboardSession, SessionRegistry

__all__ = [
    "DashboardSession",
    "RecordLoadError",
    "SessionRegistry",
    "build_dashboard_data",
    "calculate_dashboard_metrics",
    "load_dashboard_data",
]
