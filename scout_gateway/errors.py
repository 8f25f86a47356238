"""Client-facing error taxonomy for the gateway routes."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi.responses import JSONResponse, PlainTextResponse, Response

NO_STORE = {"cache-control": "no-store"}


class GatewayError(Exception):
    """Base exception for every failure the gateway reports to the browser."""

    status_code = 500

    def __init__(
        self,
        message: str,
        issues: Optional[List[str]] = None,
        plain_text: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.issues = issues
        self.plain_text = plain_text

    def payload(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"ok": False, "error": self.message}
        if self.issues is not None:
            body["issues"] = list(self.issues)
        return body

    def to_response(self) -> Response:
        if self.plain_text:
            return PlainTextResponse(self.message, status_code=self.status_code, headers=NO_STORE)
        return JSONResponse(self.payload(), status_code=self.status_code, headers=NO_STORE)


class BadRequest(GatewayError):
    """Missing or malformed client input (400)."""
    status_code = 400


class Forbidden(GatewayError):
    """Security boundary violation (403)."""
    status_code = 403


class ServerMisconfigured(GatewayError):
    """Missing or invalid deployment configuration (500)."""
    status_code = 500


class BadGateway(GatewayError):
    """Upstream or network failure (502)."""
    status_code = 502
