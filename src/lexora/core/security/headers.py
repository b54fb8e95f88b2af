"""Security headers middleware (Helmet-style)."""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp


def build_content_security_policy(frontend_origin: str, allow_docs_assets: bool) -> str:
    """CSP allowing XHR back to the frontend origin.

    The docs UI needs inline scripts and CDN assets; production with docs
    disabled gets the strict variant.
    """
    script_src = "'self'"
    style_src = "'self'"
    img_src = "'self' data:"
    if allow_docs_assets:
        script_src += " 'unsafe-inline' cdn.jsdelivr.net"
        style_src += " 'unsafe-inline' cdn.jsdelivr.net"
        img_src += " cdn.jsdelivr.net"
    return (
        "default-src 'self'; "
        f"script-src {script_src}; "
        f"style-src {style_src}; "
        f"img-src {img_src}; "
        f"connect-src 'self' {frontend_origin}; "
        "frame-ancestors 'none'"
    )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds a fixed set of security headers to every response."""

    def __init__(
        self,
        app: ASGIApp,
        content_security_policy: str,
        strict_transport_security: str | None = "max-age=31536000; includeSubDomains",
    ):
        super().__init__(app)
        self.headers: dict[str, str] = {
            "Content-Security-Policy": content_security_policy,
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Referrer-Policy": "strict-origin-when-cross-origin",
        }
        if strict_transport_security:
            self.headers["Strict-Transport-Security"] = strict_transport_security

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for header, value in self.headers.items():
            response.headers[header] = value
        return response
