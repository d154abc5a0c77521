"""
police_records/api/frontend.py

How non-API requests are answered. Exactly one strategy is installed,
after every API route, so the catch-alls below never shadow /api paths.

  production   Serve the prebuilt bundle; unknown paths get index.html
               (single-page-application fallback).
  development  Proxy to the frontend dev server, which compiles assets on
               the fly.
"""

from pathlib import Path

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, JSONResponse, Response

from police_records.core.constants import API_PREFIX
from police_records.core.logger import get_logger

logger = get_logger(__name__)

# Hop-by-hop and length headers must not be copied between connections.
_SKIP_HEADERS = {
    "connection", "keep-alive", "transfer-encoding", "upgrade",
    "content-length", "content-encoding", "host",
}

_PROXY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _is_api_path(path: str) -> bool:
    api = API_PREFIX.strip("/")
    path = path.strip("/")
    return path == api or path.startswith(f"{api}/")


def _not_found() -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "Not found."})


def mount_static_bundle(app: FastAPI, dist_dir: str | Path) -> None:
    """Serve files from ``dist_dir`` with index.html as the fallback."""
    root = Path(dist_dir).resolve()
    index = root / "index.html"
    if index.is_file():
        logger.info("Serving frontend bundle from: %s", root)
    else:
        logger.warning("Frontend bundle not found at %s. Build the client first.", root)

    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_bundle(full_path: str) -> Response:
        if _is_api_path(full_path):
            return _not_found()
        if full_path:
            # resolve() + is_relative_to() keeps requests inside the bundle
            candidate = (root / full_path).resolve()
            if candidate.is_relative_to(root) and candidate.is_file():
                return FileResponse(candidate)
        if not index.is_file():
            return _not_found()
        return FileResponse(index)


def mount_dev_proxy(app: FastAPI, dev_server_url: str) -> None:
    """Forward non-API requests to the frontend dev server."""
    client = httpx.AsyncClient(base_url=dev_server_url, timeout=30.0)
    app.state.dev_proxy_client = client
    logger.info("Proxying frontend requests to dev server at %s", dev_server_url)

    @app.api_route("/{full_path:path}", methods=_PROXY_METHODS, include_in_schema=False)
    async def proxy_dev_server(full_path: str, request: Request) -> Response:
        if _is_api_path(full_path):
            return _not_found()

        headers = {k: v for k, v in request.headers.items() if k.lower() not in _SKIP_HEADERS}
        try:
            upstream = await client.request(
                request.method,
                f"/{full_path}",
                params=request.query_params.multi_items(),
                headers=headers,
                content=await request.body(),
            )
        except httpx.HTTPError as exc:
            logger.warning("Dev server unreachable for /%s: %s", full_path, exc)
            return JSONResponse(
                status_code=502,
                content={"error": "Frontend dev server is not reachable."},
            )

        return Response(
            content=upstream.content,
            status_code=upstream.status_code,
            headers={k: v for k, v in upstream.headers.items() if k.lower() not in _SKIP_HEADERS},
        )
