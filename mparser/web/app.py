"""FastAPI application serving the message parser."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse, Response
from starlette.requests import ClientDisconnect

from .. import __version__
from ..config import get_parser_config, get_server_config, load_config
from ..parser import Parser, create_http_client

log = logging.getLogger(__name__)

ERROR_MESSAGE = "An error occured"
JSON_MEDIA_TYPE = "application/json; charset=utf-8"


async def _read_body(request: Request, limit: int) -> bytes | None:
    """Read the request body, or None once it is known to exceed limit."""
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        log.warning("Rejected body declared as %s bytes (limit %d)", declared, limit)
        return None

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            log.warning("Rejected body over %d bytes", limit)
            return None
    return bytes(body)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    config = load_config()
    parser_config = get_parser_config(config)
    server_config = get_server_config(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # One pooled client for every request; closed on shutdown
        client = create_http_client(parser_config)
        app.state.parser = Parser.from_config(client, parser_config, logging.getLogger("mparser.messageHandler"))
        try:
            yield
        finally:
            client.close()

    app = FastAPI(
        title="mparser",
        description="Extracts mentions, emoticons and link titles from chat messages",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.max_body_bytes = server_config.max_body_bytes

    @app.post("/")
    async def parse_message(request: Request):
        """Parse the raw request body as a chat message."""
        try:
            body = await _read_body(request, app.state.max_body_bytes)
        except ClientDisconnect:
            log.warning("Unable to read body")
            return PlainTextResponse(ERROR_MESSAGE, status_code=400)

        if body is None:
            return PlainTextResponse(ERROR_MESSAGE, status_code=400)

        text = body.decode("utf-8", errors="replace")
        info = await run_in_threadpool(request.app.state.parser.parse, text)
        return Response(content=info.to_json(), media_type=JSON_MEDIA_TYPE)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
