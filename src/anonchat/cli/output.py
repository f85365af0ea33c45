"""Output helpers for the anonchat CLI.

All JSON output goes to stdout. Errors go to stderr as RFC 9457 problem JSON.
"""

from __future__ import annotations

import json
import sys
from typing import Any, NoReturn

from pydantic import BaseModel, TypeAdapter

# Exit codes
EXIT_OK = 0
EXIT_CLIENT_ERROR = 1
EXIT_SERVER_ERROR = 2
EXIT_CONNECTION_ERROR = 3


def _problem_json(title: str, detail: str, status: int) -> str:
    """Format an RFC 9457 problem JSON string."""
    return json.dumps(
        {
            "type": "about:blank",
            "title": title,
            "status": status,
            "detail": detail,
        }
    )


def die(title: str, detail: str, status: int, exit_code: int) -> NoReturn:
    """Print a problem JSON error to stderr and exit."""
    sys.stderr.write(_problem_json(title, detail, status) + "\n")
    raise SystemExit(exit_code)


def json_print(data: Any) -> None:
    """Print JSON to stdout.

    Parameters
    ----------
    data
        Data to serialize. Pydantic models (and lists of them) are serialized
        through pydantic, other types via ``json.dumps()``.
    """
    if isinstance(data, BaseModel):
        sys.stdout.write(data.model_dump_json(indent=2) + "\n")
    elif isinstance(data, list) and any(isinstance(d, BaseModel) for d in data):
        sys.stdout.write(TypeAdapter(list[Any]).dump_json(data, indent=2).decode() + "\n")
    elif isinstance(data, str):
        sys.stdout.write(data + "\n")
    else:
        sys.stdout.write(json.dumps(data, indent=2, default=str) + "\n")
