"""Response formatting bridge -- maps :class:`httpx.Response` to the output system.

After an API call completes, :func:`format_api_response` writes the status
line to stderr and routes the body through
:meth:`~jscsession.output.OutputManager.format_response`.
"""

from __future__ import annotations

from typing import Any

import httpx

from jscsession.output import format_response, info


def format_api_response(response: httpx.Response) -> None:
    """Format and print an API response using the global output system.

    Args:
        response: The :class:`httpx.Response` to format and display.
    """
    info(f"HTTP {response.status_code} {response.reason_phrase or ''}")

    content_type = response.headers.get("content-type", "application/json")
    data = extract_response_data(response)
    if data is not None:
        format_response(data, content_type)


def extract_response_data(response: httpx.Response) -> Any:
    """Extract the body from an HTTP response.

    Returns the decoded JSON when possible, the raw text otherwise, and
    ``None`` for an empty body.
    """
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
