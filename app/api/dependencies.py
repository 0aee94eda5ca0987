"""
app/api/dependencies.py

Shared FastAPI dependencies for session resolution.
"""

from __future__ import annotations

from fastapi import Header, HTTPException, Request, status

from app.domain.dashboard import DashboardData
from app.services.record_loader import RecordLoadError
from app.services.session_registry import DashboardSession, SessionRegistry

DEFAULT_SESSION_ID = "default"


def get_session_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def get_session_id(x_session_id: str = Header(default=DEFAULT_SESSION_ID)) -> str:
    """
    Read the caller's session id from ``X-Session-Id``; blank means default.
    """

    return x_session_id.strip() or DEFAULT_SESSION_ID


def get_dashboard_session(
    request: Request,
    x_session_id: str = Header(default=DEFAULT_SESSION_ID),
) -> DashboardSession:
    registry = get_session_registry(request)
    return registry.get_or_create(get_session_id(x_session_id))


def load_session_data(session: DashboardSession) -> DashboardData:
    """
    Return the session's records, mapping load failures to HTTP 503.
    """

    try:
        return session.data()
    except RecordLoadError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Dashboard data unavailable: {exc}",
        ) from exc
