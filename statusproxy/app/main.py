from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response

from .config import Settings, load_settings
from .fetcher import UpstreamFetcher
from .proxy import StatusProxy
from .ui import HTML as INDEX_HTML

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
}


def create_app(settings: Optional[Settings] = None, proxy: Optional[StatusProxy] = None) -> FastAPI:
    settings = settings or load_settings()
    proxy = proxy or StatusProxy(UpstreamFetcher(settings), settings)

    app = FastAPI(title="Status Proxy", version=settings.SERVICE_VERSION)
    app.state.settings = settings
    app.state.proxy = proxy

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        if request.url.path.startswith("/api/"):
            response.headers.update(SECURITY_HEADERS)
        return response

    @app.get("/", response_class=HTMLResponse)
    def index():
        return HTMLResponse(INDEX_HTML)

    @app.get("/api/status", response_class=JSONResponse)
    async def api_status():
        """Upstream status document with CORS and cache headers"""
        body, headers, status = await proxy.handle_status_request()
        return JSONResponse(body, status_code=status, headers=headers)

    @app.options("/api/status")
    def api_status_preflight():
        _, headers, status = proxy.handle_options()
        return Response(status_code=status, headers=headers)

    @app.get("/api/health", response_class=JSONResponse)
    def health():
        body, headers, status = proxy.handle_health()
        return JSONResponse(body, status_code=status, headers=headers)

    return app
