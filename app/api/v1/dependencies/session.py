"""Browser session dependency: cookie -> ISession from the app's session store."""

from __future__ import annotations

from fastapi import HTTPException, Request, Response

from app.application.interfaces.session import ISession
from app.core.config import get_settings

# Organization the pending authorization flow acts on (callbacks carry no bearer token).
ORGANIZATION_SESSION_KEY = "organization_id"


async def get_session(request: Request, response: Response) -> ISession:
    """Open the caller's session, issuing a cookie when none was sent."""
    store = getattr(request.app.state, "session_store", None)
    if store is None or not store.is_available():
        raise HTTPException(status_code=503, detail="Session store unavailable")
    settings = get_settings()
    session_id = request.cookies.get(settings.session_cookie_name)
    session = store.open(session_id)
    if session.session_id != session_id:
        response.set_cookie(
            settings.session_cookie_name,
            session.session_id,
            max_age=settings.session_ttl_seconds,
            httponly=True,
            secure=settings.session_cookie_secure,
            samesite="lax",
        )
    return session
