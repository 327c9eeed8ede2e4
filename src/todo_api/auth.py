from __future__ import annotations

import logging
from typing import Optional

from fastapi import Header, Request

from .errors import IdentityProviderError, InvalidToken, Unauthorized
from .services import get_services

logger = logging.getLogger(__name__)

_BEARER = "bearer "


def _extract_token(authorization: str, strip_bearer_prefix: bool) -> str:
    if strip_bearer_prefix and authorization[: len(_BEARER)].lower() == _BEARER:
        return authorization[len(_BEARER):].strip()
    return authorization


# PUBLIC_INTERFACE
def get_current_user_id(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> str:
    """
    FastAPI dependency guarding the todo routes.

    Behavior:
    - No Authorization header (or an empty one): 401 Unauthorized, the identity provider
      is not called.
    - Otherwise the header value is verified as an ID token. By default the raw value is
      used; with AUTH_STRIP_BEARER_PREFIX enabled a leading 'Bearer ' is removed first.
    - Verification failure of any kind: 401 Invalid token.
    - Success: the uid is stored on ``request.state.user_id`` and returned.

    Usage:
        @router.get("/todos")
        def list_todos(user_id: str = Depends(get_current_user_id)): ...
    """
    if not authorization:
        raise Unauthorized()

    token = _extract_token(authorization, getattr(request.app.state, "strip_bearer_prefix", False))
    if not token:
        raise Unauthorized()

    try:
        uid = get_services(request).admin_identity.verify_token(token)
    except IdentityProviderError as e:
        logger.info("Rejected token on %s %s: %s", request.method, request.url.path, e)
        raise InvalidToken() from e

    request.state.user_id = uid
    return uid
