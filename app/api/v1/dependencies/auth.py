"""Caller identity dependencies: bearer JWT -> (organization_id, CallerIdentity)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.domain.exceptions import Unauthenticated
from app.domain.value_objects import CallerIdentity
from app.infrastructure.security.jwt import caller_from_payload, verify_token
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class RequestContext:
    """Organization the request acts on and the caller acting."""

    organization_id: str
    caller: CallerIdentity


async def get_request_context(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> RequestContext:
    """Decode the bearer token; any failure is Unauthenticated."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()
    try:
        payload = verify_token(credentials.credentials)
        organization_id, caller = caller_from_payload(payload)
    except ValueError as e:
        logger.info("Rejected bearer token: %s", e)
        raise Unauthenticated("Invalid or expired token") from e
    return RequestContext(organization_id=organization_id, caller=caller)
