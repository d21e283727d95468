"""HTTP server command."""

import ssl
import subprocess
import sys

import rich_click as click
from pydantic import ValidationError
from rich.markup import escape

from ..config import get_server_config
from ._console import console


def _check_key_pair(cert_path: str | None, key_path: str | None) -> str | None:
    """Return an error message if the TLS key pair cannot be loaded."""
    if not cert_path or not key_path:
        return "SSL_CERT_PATH and SSL_KEY_PATH must both be set"
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    try:
        context.load_cert_chain(cert_path, key_path)
    except (OSError, ssl.SSLError) as e:
        return str(e)
    return None


@click.command()
@click.option("--host", "-h", default=None, help="Host to bind to (default: LISTEN_HOST or config)")
@click.option("--port", "-p", type=int, default=None, help="Port to bind to (default: LISTEN_PORT or config)")
@click.option("--reload/--no-reload", default=False, help="Auto-reload on code changes")
def serve(host: str | None, port: int | None, reload: bool):
    """Start the HTTP parser service."""
    try:
        server = get_server_config()
    except ValidationError as e:
        console.print(f"[red]Invalid server configuration. Error: {escape(str(e))}[/red]")
        sys.exit(1)
    host = host or server.host
    port = port or server.port

    cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        "mparser.web:create_app",
        "--factory",
        "--host",
        host,
        "--port",
        str(port),
    ]
    if reload:
        cmd.append("--reload")

    scheme = "http"
    if server.ssl_on:
        error = _check_key_pair(server.ssl_cert_path, server.ssl_key_path)
        if error:
            console.print(f"[red]Unable to load key pair. Error: {escape(error)}[/red]")
            sys.exit(1)
        cmd.extend(["--ssl-certfile", server.ssl_cert_path, "--ssl-keyfile", server.ssl_key_path])
        scheme = "https"

    console.print(f"Listening on {scheme}://{host}:{port}")
    console.print("Press Ctrl+C to stop")

    try:
        subprocess.run(cmd, check=True)
    except subprocess.CalledProcessError as e:
        sys.exit(e.returncode)
    except KeyboardInterrupt:
        pass
