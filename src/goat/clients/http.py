"""Shared async HTTP plumbing for provider clients: one timeout retry, compact error bodies."""

from __future__ import annotations

import asyncio
import re
from typing import Any

import httpx

RETRY_BACKOFF_S = 0.1
BODY_EXCERPT_LIMIT = 500


class UpstreamError(Exception):
    """Base error for failed calls to a third-party API."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MissingCredentialsError(UpstreamError):
    """Raised when the provider key or token is not configured."""


async def send_request(
    method: str,
    url: str,
    *,
    headers: dict[str, str],
    timeout_s: float,
    payload: dict[str, Any] | None = None,
    provider: str,
    error_cls: type[UpstreamError] = UpstreamError,
) -> httpx.Response:
    """Send one GET/POST, retrying a timeout once and raising ``error_cls`` otherwise."""
    for attempt in range(2):
        try:
            timeout = httpx.Timeout(timeout_s)
            async with httpx.AsyncClient(timeout=timeout) as client:
                if method == "GET":
                    response = await client.get(url, headers=headers)
                else:
                    response = await client.post(url, headers=headers, json=payload)
            response.raise_for_status()
            return response
        except httpx.TimeoutException as exc:
            if attempt == 0:
                await asyncio.sleep(RETRY_BACKOFF_S)
                continue
            raise error_cls(f"{provider} timeout after retry") from exc
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            body_excerpt = extract_response_excerpt(exc.response.text, limit=BODY_EXCERPT_LIMIT)
            raise error_cls(
                f"{provider} request failed (status={status_code}, body={body_excerpt!r})",
                status_code=status_code,
                body=body_excerpt,
            ) from exc
        except httpx.HTTPError as exc:
            raise error_cls(f"{provider} request failed: {exc}") from exc

    raise error_cls(f"{provider} request failed unexpectedly")


def response_json(response: httpx.Response, *, provider: str, error_cls: type[UpstreamError]) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        body_excerpt = extract_response_excerpt(response.text, limit=BODY_EXCERPT_LIMIT)
        raise error_cls(
            f"Invalid response from {provider}",
            status_code=response.status_code,
            body=body_excerpt,
        ) from exc


def extract_response_excerpt(raw_text: str, *, limit: int) -> str:
    """Normalize body text and keep only a short excerpt for safe diagnostics."""
    compact = re.sub(r"\s+", " ", raw_text).strip()
    if not compact:
        return "<empty>"
    return compact[:limit]
