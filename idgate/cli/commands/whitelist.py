"""Whitelist administration over the server's REST API."""

import os
import sys
from typing import Any

import cyclopts
import httpx

from idgate.cli.console import get_console

app = cyclopts.App(name="whitelist", help="Manage whitelisted emails")


def get_server_url() -> str:
    """Get server URL from environment."""
    return os.environ.get("IDGATE_SERVER", "http://localhost:8000").rstrip("/")


def _headers() -> dict[str, str]:
    token = os.environ.get("IDGATE_TOKEN")
    return {"Authorization": f"Bearer {token}"} if token else {}


def _request(method: str, json: dict[str, Any] | None = None) -> dict[str, Any]:
    """Call the whitelist endpoint, exiting with a readable message on failure."""
    console = get_console()
    server_url = get_server_url()
    try:
        response = httpx.request(
            method, f"{server_url}/api/v1/whitelist", json=json, headers=_headers()
        )
        response.raise_for_status()
        return response.json()
    except httpx.ConnectError:
        console.error(
            f"Could not connect to server at {server_url}",
            hint="Is the server running? Start it with: idgate serve",
        )
        sys.exit(1)
    except httpx.HTTPStatusError as e:
        hint = None
        if e.response.status_code in (401, 403):
            hint = "Set IDGATE_TOKEN to an admin access token"
        console.error(f"{e.response.status_code} - {e.response.text}", hint=hint)
        sys.exit(1)


@app.command(name="list")
def list_emails() -> None:
    """List whitelisted emails."""
    console = get_console()
    data = _request("GET")
    entries = data.get("emails", [])
    if not entries:
        console.warning("Whitelist is empty")
        return
    console.table(entries, [("email", "Email"), ("createdAt", "Added")], title="Whitelist")


@app.command
def add(*emails: str) -> None:
    """Add emails to the whitelist.

    Args:
        emails: Addresses to add; comma separated values are split.
    """
    console = get_console()
    data = _request("POST", {"emails": list(emails)})
    for email in data.get("added", []):
        console.success(f"Added {email}")
    for email in data.get("skipped", []):
        console.warning(f"Skipped {email} (invalid or already present)")


@app.command
def remove(*emails: str) -> None:
    """Remove emails from the whitelist.

    Args:
        emails: Addresses to remove; comma separated values are split.
    """
    console = get_console()
    data = _request("DELETE", {"emails": list(emails)})
    for email in data.get("removed", []):
        console.success(f"Removed {email}")
    for email in data.get("notFound", []):
        console.warning(f"Not found: {email}")
