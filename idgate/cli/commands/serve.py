"""Run the HTTP server in the foreground."""

import os
import sys
from pathlib import Path

import cyclopts
import logfire
import uvicorn

from idgate.cli.console import get_console

app = cyclopts.App(name="serve", help="Run the idgate server")


@app.default
def serve(
    host: str = "127.0.0.1",
    port: int = 8000,
    config: Path | None = None,
    reload: bool = False,
) -> None:
    """Start the server.

    Args:
        host: Host to bind to.
        port: Port to listen on.
        config: YAML config file, exported as IDGATE_CONFIG_FILE.
        reload: Restart on code changes (development only).
    """
    console = get_console()

    if config is not None:
        if not config.exists():
            console.error(f"Config file not found: {config}")
            sys.exit(1)
        os.environ["IDGATE_CONFIG_FILE"] = str(config.resolve())

    # Must run before the app module is imported so instrumentation attaches
    logfire.configure(send_to_logfire="if-token-present")

    console.success(f"Serving on http://{host}:{port}")
    uvicorn.run(
        "idgate.application.api.rest.app:app",
        host=host,
        port=port,
        reload=reload,
        access_log=True,
    )
