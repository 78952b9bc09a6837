"""
Event logger utility for authentication events.
"""
from datetime import datetime
from typing import Optional
from fastapi import Request
import sys
import logging
import os

logger = logging.getLogger("credential_platform.auth_events")


ALLOWED_EVENT_TYPES = {
    "register",
    "login_success",
    "login_failure",
    "logout",
    "token_rejected",
    "credentials_updated"
}


def configure_event_log(log_dir: Optional[str]) -> None:
    """
    Mirror auth events into ``<log_dir>/auth_events.log``.

    Continues with stdout logging only when the directory cannot be created.
    """
    if not log_dir:
        return
    path = os.path.join(log_dir, "auth_events.log")
    if any(getattr(h, "baseFilename", None) == os.path.abspath(path) for h in logger.handlers):
        return
    try:
        os.makedirs(log_dir, exist_ok=True)
        handler = logging.FileHandler(path)
    except OSError as e:
        print(f"WARNING: Could not set up file logging: {e}", file=sys.stderr)
        return
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s:%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


def client_ip(request: Request) -> Optional[str]:
    """Client address, falling back to the first X-Forwarded-For entry."""
    ip_address = None
    if request.client:
        ip_address = request.client.host

    # Check for X-Forwarded-For header (proxy/load balancer scenarios)
    if not ip_address and request.headers.get("x-forwarded-for"):
        # X-Forwarded-For can contain multiple IPs, take the first one
        ip_address = request.headers.get("x-forwarded-for").split(",")[0].strip()

    return ip_address


def log_auth_event(
    event_type: str,
    request: Request,
    username: Optional[str] = None,
    user_id: Optional[int] = None
) -> None:
    """
    Log an authentication event.

    Args:
        event_type: One of: register, login_success, login_failure, logout,
                    token_rejected, credentials_updated
        request: FastAPI Request object
        username: Identifier involved, when known
        user_id: User id involved, when known

    Raises:
        ValueError: If event_type is invalid
    """
    if event_type not in ALLOWED_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. Must be one of: {', '.join(sorted(ALLOWED_EVENT_TYPES))}"
        )

    level = logging.WARNING if event_type in ("login_failure", "token_rejected") else logging.INFO
    logger.log(
        level,
        "AUTH %s user_id=%s username=%s ip=%s user_agent=%s timestamp=%s",
        event_type, user_id, username, client_ip(request),
        request.headers.get("user-agent"), datetime.utcnow().isoformat()
    )
