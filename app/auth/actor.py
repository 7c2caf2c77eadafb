"""
Operator identity for admin endpoints.

Callers sit behind the platform gateway, which authenticates the operator and
forwards their id in X-Actor-Id. The id is recorded on suppression entries
for auditing.
"""

from fastapi import HTTPException, Request

from app.config import get_settings

ACTOR_HEADER = "X-Actor-Id"
SYSTEM_ACTOR = "system"


def get_current_actor(request: Request) -> str:
    """FastAPI dependency returning the calling operator's id."""
    actor_id = request.headers.get(ACTOR_HEADER)
    if actor_id:
        return actor_id.strip()
    if get_settings().disable_auth or getattr(request.app.state, "testing", False):
        return SYSTEM_ACTOR
    raise HTTPException(status_code=401, detail="Missing actor identity")
