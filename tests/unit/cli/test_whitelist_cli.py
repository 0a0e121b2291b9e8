"""Tests for the whitelist CLI commands."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from idgate.cli.commands import whitelist


def _response(method: str, status: int, payload: dict) -> httpx.Response:
    request = httpx.Request(method, "http://localhost:8000/api/v1/whitelist")
    return httpx.Response(status, json=payload, request=request)


class TestWhitelistCommands:
    def test_add_sends_emails_with_token(self, monkeypatch: pytest.MonkeyPatch, capsys):
        monkeypatch.setenv("IDGATE_TOKEN", "jwt-1")
        monkeypatch.setenv("IDGATE_SERVER", "http://gateway.test/")
        send = MagicMock(return_value=_response("POST", 200, {"added": ["a@x.com"], "skipped": []}))

        with patch.object(whitelist.httpx, "request", send):
            whitelist.add("a@x.com")

        send.assert_called_once_with(
            "POST",
            "http://gateway.test/api/v1/whitelist",
            json={"emails": ["a@x.com"]},
            headers={"Authorization": "Bearer jwt-1"},
        )
        assert "Added a@x.com" in capsys.readouterr().out

    def test_remove_reports_not_found(self, monkeypatch: pytest.MonkeyPatch, capsys):
        monkeypatch.delenv("IDGATE_TOKEN", raising=False)
        send = MagicMock(
            return_value=_response("DELETE", 200, {"removed": [], "notFound": ["b@x.com"]})
        )

        with patch.object(whitelist.httpx, "request", send):
            whitelist.remove("b@x.com")

        assert send.call_args.kwargs["headers"] == {}
        assert "Not found: b@x.com" in capsys.readouterr().out

    def test_forbidden_exits_with_hint(self, monkeypatch: pytest.MonkeyPatch):
        send = MagicMock(return_value=_response("GET", 403, {"code": "access_denied"}))

        with patch.object(whitelist.httpx, "request", send), pytest.raises(SystemExit) as exc:
            whitelist.list_emails()
        assert exc.value.code == 1

    def test_unreachable_server_exits(self):
        send = MagicMock(side_effect=httpx.ConnectError("refused"))

        with patch.object(whitelist.httpx, "request", send), pytest.raises(SystemExit):
            whitelist.list_emails()
