"""fal.ai image generation client (synchronous endpoint and queue polling)."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from goat.clients.config import DEFAULT_FAL_BASE_URL, DEFAULT_FAL_QUEUE_URL
from goat.clients.http import MissingCredentialsError, UpstreamError, response_json, send_request

logger = logging.getLogger(__name__)

DEFAULT_FAL_MODEL = "fal-ai/flux/schnell"


class FalError(UpstreamError):
    """Base fal client error."""


class FalMissingAPIKeyError(FalError, MissingCredentialsError):
    """Raised when FAL_KEY is not configured."""


class FalNoImagesError(FalError):
    """Raised when a successful response carries no images; keeps the decoded result."""

    def __init__(self, message: str, *, result: Any = None) -> None:
        super().__init__(message)
        self.result = result


@dataclass(slots=True, frozen=True)
class FalImage:
    url: str
    width: int | None = None
    height: int | None = None
    content_type: str | None = None

    @classmethod
    def from_api(cls, raw: Any) -> FalImage:
        if isinstance(raw, str):
            return cls(url=raw)
        if not isinstance(raw, dict) or not isinstance(raw.get("url"), str):
            raise FalError(f"Unexpected image entry in fal response: {raw!r}")
        return cls(
            url=raw["url"],
            width=raw.get("width"),
            height=raw.get("height"),
            content_type=raw.get("content_type"),
        )

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"url": self.url}
        if self.width is not None:
            payload["width"] = self.width
        if self.height is not None:
            payload["height"] = self.height
        if self.content_type is not None:
            payload["content_type"] = self.content_type
        return payload


class FalClient:
    """Thin async wrapper over ``fal.run`` and ``queue.fal.run``."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = DEFAULT_FAL_BASE_URL,
        queue_url: str = DEFAULT_FAL_QUEUE_URL,
        timeout_s: float = 60.0,
        poll_interval_s: float = 1.0,
        max_attempts: int = 60,
    ) -> None:
        self._api_key = api_key.strip()
        self._base_url = base_url.rstrip("/")
        self._queue_url = queue_url.rstrip("/")
        self._timeout_s = timeout_s
        self._poll_interval_s = poll_interval_s
        self._max_attempts = max_attempts

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            raise FalMissingAPIKeyError("Fal API key not configured")
        return {"Content-Type": "application/json", "Authorization": f"Key {self._api_key}"}

    async def generate(
        self,
        prompt: str,
        *,
        model: str = DEFAULT_FAL_MODEL,
        width: int = 512,
        height: int = 512,
        num_images: int = 1,
    ) -> list[FalImage]:
        """Generate images through the synchronous endpoint."""
        headers = self._headers()
        logger.info("fal_generate model=%s prompt=%r", model, prompt[:100])
        response = await send_request(
            "POST",
            f"{self._base_url}/{model}",
            headers=headers,
            payload=_request_body(prompt, width, height, num_images),
            timeout_s=self._timeout_s,
            provider="Fal API",
            error_cls=FalError,
        )
        logger.info("fal_response status=%d", response.status_code)
        result = response_json(response, provider="Fal API", error_cls=FalError)
        images = extract_images(result)
        if images is None:
            logger.error("fal_unexpected_response keys=%s", sorted(result) if isinstance(result, dict) else None)
            raise FalNoImagesError("No images in response", result=result)
        return images

    async def generate_queued(
        self,
        prompt: str,
        *,
        model: str = DEFAULT_FAL_MODEL,
        width: int = 1024,
        height: int = 1024,
        num_images: int = 1,
    ) -> list[FalImage]:
        """Submit to the queue endpoint and poll until the request completes."""
        headers = self._headers()
        submit = await send_request(
            "POST",
            f"{self._queue_url}/{model}",
            headers=headers,
            payload=_request_body(prompt, width, height, num_images),
            timeout_s=self._timeout_s,
            provider="Fal API",
            error_cls=FalError,
        )
        result = response_json(submit, provider="Fal API", error_cls=FalError)
        images = extract_images(result)
        if images is not None:
            return images

        request_id = result.get("request_id") if isinstance(result, dict) else None
        if not request_id:
            raise FalError("No request_id or images in response")

        request_url = f"{self._queue_url}/{model}/requests/{request_id}"
        for attempt in range(self._max_attempts):
            await asyncio.sleep(self._poll_interval_s)
            status_response = await send_request(
                "GET",
                f"{request_url}/status",
                headers=headers,
                timeout_s=self._timeout_s,
                provider="Fal API",
                error_cls=FalError,
            )
            status = response_json(status_response, provider="Fal API", error_cls=FalError)
            state = status.get("status") if isinstance(status, dict) else None
            logger.debug("fal_poll request_id=%s attempt=%d status=%s", request_id, attempt, state)
            if state == "COMPLETED":
                final = await send_request(
                    "GET",
                    request_url,
                    headers=headers,
                    timeout_s=self._timeout_s,
                    provider="Fal API",
                    error_cls=FalError,
                )
                final_images = extract_images(
                    response_json(final, provider="Fal API", error_cls=FalError)
                )
                return final_images or []
            if state == "FAILED":
                raise FalError(f"Image generation failed: {status.get('error')}")

        raise FalError("Image generation timed out")


def extract_images(result: Any) -> list[FalImage] | None:
    """Images from a fal result: ``images`` objects or an ``output`` list of URLs."""
    if not isinstance(result, dict):
        return None
    images = result.get("images")
    if isinstance(images, list) and images:
        return [FalImage.from_api(image) for image in images]
    output = result.get("output")
    if isinstance(output, list) and output:
        return [FalImage.from_api(url) for url in output]
    return None


def _request_body(prompt: str, width: int, height: int, num_images: int) -> dict[str, Any]:
    return {
        "prompt": prompt,
        "image_size": {"width": width, "height": height},
        "num_images": num_images,
    }
