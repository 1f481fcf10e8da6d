"""
Gemini REST wrapper.

Talks to the non-streaming ``generateContent`` and the streaming
``streamGenerateContent`` endpoints and turns every HTTP failure into one of
the ProviderError variants, so callers never inspect raw responses.
"""

from typing import AsyncIterator, Optional

import httpx
import structlog

from ..config import get_settings
from ..exceptions import ProviderConnectionError, provider_error_for_status
from ..utils.string_utils import truncate_text
from .tier_router import ModelRoute

logger = structlog.get_logger(__name__)


class GeminiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        if client is None:
            timeout = timeout if timeout is not None else settings.gemini_request_timeout_seconds
            client = httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self._client = client

    def _url(self, route: ModelRoute, method: str) -> str:
        return f"{self.base_url}/{route.model}:{method}"

    @staticmethod
    def _params(route: ModelRoute) -> dict:
        if not route.api_key:
            raise ValueError(f"Gemini API key not configured for model {route.model}")
        return {"key": route.api_key}

    async def generate(self, route: ModelRoute, payload: dict) -> str:
        """
        Call ``generateContent`` once and return the raw response body.

        Raises:
            TransientProviderError: on HTTP 429/503
            OtherProviderError: on any other non-2xx status
            ProviderConnectionError: on network failure or timeout
        """
        try:
            response = await self._client.post(
                self._url(route, "generateContent"),
                params=self._params(route),
                json=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            raise ProviderConnectionError(f"Gemini request failed: {e}") from e

        if response.is_error:
            body = response.text
            logger.warning(
                "gemini_http_error",
                model=route.model,
                status=response.status_code,
                body_preview=truncate_text(body, 200),
            )
            raise provider_error_for_status(
                response.status_code,
                f"Gemini API returned HTTP {response.status_code}",
                body,
            )

        return response.text

    async def stream_generate(self, route: ModelRoute, payload: dict) -> AsyncIterator[bytes]:
        """
        Call ``streamGenerateContent`` and yield raw body chunks as they arrive.

        The body is a single JSON array of partial results; no framing is
        applied here.
        """
        try:
            async with self._client.stream(
                "POST",
                self._url(route, "streamGenerateContent"),
                params=self._params(route),
                json=payload,
                headers={"Content-Type": "application/json"},
            ) as response:
                logger.info("gemini_stream_opened", model=route.model, status=response.status_code)

                if response.is_error:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    logger.warning(
                        "gemini_stream_http_error",
                        model=route.model,
                        status=response.status_code,
                        body_preview=truncate_text(body, 200),
                    )
                    raise provider_error_for_status(
                        response.status_code,
                        f"Gemini API Streaming Error: {response.status_code}",
                        body,
                    )

                async for chunk in response.aiter_bytes():
                    yield chunk
        except httpx.HTTPError as e:
            raise ProviderConnectionError(f"Gemini stream failed: {e}") from e

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()
