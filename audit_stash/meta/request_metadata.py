"""
Request metadata for audit logs.

Every audit logged while serving a request should say who made
the change and from where. RequestMetadata listens for the
before_log hook of the audit log service and stamps each entry
with the client ip, the request target and the acting user.
"""

from typing import Any, Iterable

from fastapi import Header, Request

BEFORE_LOG = "audit.before_log"


def request_target(request: Request) -> str:
    """Path plus query string, the way the client sent it."""
    target = request.url.path
    if request.url.query:
        target = f"{target}?{request.url.query}"
    return target


class RequestMetadata:
    """
    Enriches audit log entries with the current request's info.

    Metadata an entry already carries is kept; the request
    fields only fill in keys that are missing.
    """

    def __init__(self, request: Request, user: Any = None):
        self.request = request
        self.user = user

    def implemented_events(self) -> dict[str, str]:
        return {BEFORE_LOG: "before_log"}

    def metadata(self) -> dict[str, Any]:
        client = self.request.client
        return {
            "ip": client.host if client else None,
            "url": request_target(self.request),
            "user": self.user,
        }

    def before_log(self, logs: Iterable) -> None:
        meta = self.metadata()
        for log in logs:
            log.meta = {**meta, **log.meta}


def get_request_metadata(
    request: Request,
    x_user_id: str | None = Header(default=None),
) -> RequestMetadata:
    """
    FastAPI dependency building a listener for this request.

    The acting user comes from the X-User-Id header set by the
    authenticating proxy in front of the service.
    """
    return RequestMetadata(request, x_user_id)
