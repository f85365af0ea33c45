"""Connection management for the anonchat CLI.

Resolves the backend URL (flag -> env -> default) and runs one request
coroutine per command, turning httpx failures into problem JSON and exit
codes.
"""

from __future__ import annotations

import asyncio
import sys
import typing as t

import httpx

from anonchat.cli.output import (
    EXIT_CLIENT_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_SERVER_ERROR,
    _problem_json,
    die,
)
from anonchat.config import get_config
from anonchat.connection import ChatClient

T = t.TypeVar("T")


def resolve_url(url: str | None) -> str:
    """Resolve the backend URL from the ``--url`` flag or the configuration.

    Parameters
    ----------
    url
        Explicit URL from ``--url``. ``None`` falls back to
        ``ANONCHAT_BACKEND_URL`` or the local development default.
    """
    if url:
        return url.rstrip("/")
    return get_config().backend_url


def get_client(url: str | None) -> ChatClient:
    """Create a ChatClient for the resolved backend URL."""
    return ChatClient(base_url=resolve_url(url), timeout=get_config().request_timeout)


def run_request(url: str | None, func: t.Callable[[ChatClient], t.Awaitable[T]]) -> T:
    """Run ``func`` against a fresh client with structured error handling.

    Raises
    ------
    SystemExit
        On unreachable backends, error statuses and malformed responses.
    """

    async def _main() -> T:
        async with get_client(url) as client:
            return await func(client)

    try:
        return asyncio.run(_main())
    except httpx.HTTPStatusError as exc:
        resp = exc.response
        content_type = resp.headers.get("content-type", "")
        if "problem+json" in content_type or "application/json" in content_type:
            # Pass through the backend's own error body
            sys.stderr.write(resp.text + "\n")
        else:
            sys.stderr.write(
                _problem_json(
                    resp.reason_phrase or "Error", resp.text[:500], resp.status_code
                )
                + "\n"
            )
        exit_code = EXIT_CLIENT_ERROR if resp.status_code < 500 else EXIT_SERVER_ERROR
        raise SystemExit(exit_code)
    except httpx.RequestError as exc:
        die("Connection Error", str(exc), 503, EXIT_CONNECTION_ERROR)
    except ValueError as exc:
        die("Invalid Response", str(exc), 502, EXIT_SERVER_ERROR)
