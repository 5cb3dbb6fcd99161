"""Operator authentication for admin routes.

Admin access is a static token passed as the ``token`` query parameter
and compared verbatim with ``ADMIN_TOKEN``. There is no login session.
"""

from __future__ import annotations

import hmac
from functools import wraps
from typing import Callable, Optional

from flask import current_app, request

from core import get_logger
from core.exceptions import AuthorizationError

logger = get_logger(__name__)


def is_valid_admin_token(token: Optional[str], expected: str) -> bool:
    """Exact match, compared in constant time."""
    if not token or not expected:
        return False
    return hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8"))


def admin_token_required(view: Callable) -> Callable:
    """Reject the request with ``AuthorizationError`` unless the token matches."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        token = request.args.get("token") or request.form.get("token")
        if not is_valid_admin_token(token, current_app.config.get("ADMIN_TOKEN", "")):
            logger.warning(f"Admin access denied for {request.remote_addr} on {request.path}")
            raise AuthorizationError("Invalid admin token")
        return view(*args, **kwargs)
    return wrapper
