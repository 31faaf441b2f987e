"""Gemini ``generateContent`` transport.

Talks to the Generative Language REST API with httpx. The API key is sent in
a request header (``x-goog-api-key`` by default), never in the query string,
so it does not end up in proxy or access logs.

Also holds the request-body builder and the response parser, which are
specific to the Gemini wire format.
"""

import re
from typing import Any

import httpx

from genai_orchestrator.config import settings
from genai_orchestrator.entities import AIResponse, RequestConfig
from genai_orchestrator.errors import ProviderError
from genai_orchestrator.models import resolve_api_model

_DATA_URI_PREFIX = re.compile(r"^data:image/\w+;base64,")

_MIME_PREFIXES = (
    ("data:image/png", "image/png"),
    ("data:image/jpeg", "image/jpeg"),
    ("data:image/jpg", "image/jpeg"),
    ("data:image/webp", "image/webp"),
    ("data:image/gif", "image/gif"),
)


def detect_mime_type(image: str) -> str:
    """Detect the MIME type of a base64 image from its data-URI prefix.

    Bare base64 without a prefix is assumed to be PNG.
    """
    for prefix, mime_type in _MIME_PREFIXES:
        if image.startswith(prefix):
            return mime_type
    return "image/png"


def strip_data_uri(image: str) -> str:
    """Remove a ``data:image/...;base64,`` prefix, if present."""
    return _DATA_URI_PREFIX.sub("", image, count=1)


def build_payload(prompt: str, images: list[str], config: RequestConfig) -> dict[str, Any]:
    """Build a ``generateContent`` request body.

    Args:
        prompt: The text prompt
        images: Base64 images, with or without data-URI prefixes
        config: Per-call configuration

    Returns:
        The JSON-serialisable request body
    """
    parts: list[dict[str, Any]] = [{"text": prompt}]
    for image in images:
        parts.append(
            {
                "inlineData": {
                    "mimeType": detect_mime_type(image),
                    "data": strip_data_uri(image),
                }
            }
        )

    payload: dict[str, Any] = {
        "contents": [{"parts": parts}],
        "generationConfig": {
            "temperature": config.temperature,
            "maxOutputTokens": config.max_output_tokens,
            "responseModalities": list(config.response_modalities),
        },
    }

    if config.system_instruction:
        payload["systemInstruction"] = {"parts": [{"text": config.system_instruction}]}

    return payload


def parse_response(data: dict[str, Any]) -> AIResponse:
    """Parse a ``generateContent`` response into an AIResponse.

    Concatenates the text parts of the first candidate and keeps the first
    inline image as a data URI.

    Raises:
        ProviderError: If the payload has no usable candidate. The message
            mentions "blocked" when the provider reports a safety block, so
            the classifier maps it to CONTENT_BLOCKED.
    """
    block_reason = (data.get("promptFeedback") or {}).get("blockReason")
    if block_reason:
        raise ProviderError(f"Prompt blocked by provider: {block_reason}")

    candidates = data.get("candidates") or []
    candidate = candidates[0] if candidates else None
    parts = ((candidate or {}).get("content") or {}).get("parts")

    if not candidate or not parts:
        finish_reason = (candidate or {}).get("finishReason")
        if finish_reason == "SAFETY":
            raise ProviderError("Response blocked by safety filters")
        raise ProviderError("No content returned from AI model")

    texts: list[str] = []
    image: str | None = None
    for part in parts:
        if part.get("text"):
            texts.append(part["text"])
        inline = part.get("inlineData") or {}
        if image is None and inline.get("data"):
            mime_type = inline.get("mimeType", "image/png")
            image = f"data:{mime_type};base64,{inline['data']}"

    return AIResponse(
        text="".join(texts) if texts else None,
        image=image,
        finish_reason=candidate.get("finishReason"),
    )


class GeminiClient:
    """httpx implementation of the GenerationProvider protocol.

    This class satisfies the GenerationProvider protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        client = GeminiClient.create()
        data = await client.generate("gemini-2.5-flash-image", payload, api_key)
        await client.close()
        ```
    """

    def __init__(
        self,
        base_url: str | None = None,
        auth_header: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Gemini client.

        Args:
            base_url: API base URL. Defaults to settings.gemini_base_url.
            auth_header: Header carrying the API key. Defaults to settings.
            timeout: Request timeout in seconds. Defaults to settings.
            transport: Custom httpx transport (e.g. ``httpx.MockTransport`` in tests).
        """
        self._base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self._auth_header = auth_header or settings.gemini_auth_header
        self._timeout = timeout or settings.request_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def create(
        cls,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "GeminiClient":
        """Factory method to create GeminiClient with defaults from settings."""
        return cls(base_url=base_url, transport=transport)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
                transport=self._transport,
            )
        return self._client

    def endpoint(self, model: str) -> str:
        """Return the generateContent URL for a model id."""
        return f"{self._base_url}/models/{resolve_api_model(model)}:generateContent"

    def _auth_headers(self, api_key: str) -> dict[str, str]:
        if self._auth_header.lower() == "authorization":
            return {"Authorization": f"Bearer {api_key}"}
        return {self._auth_header: api_key}

    async def generate(
        self,
        model: str,
        payload: dict[str, Any],
        api_key: str,
    ) -> dict[str, Any]:
        """Send one generateContent request.

        Raises:
            ProviderError: On a non-2xx status, carrying the provider's
                ``error.message`` when the body has one
            httpx.HTTPError: On transport failures
        """
        headers = {"Content-Type": "application/json", **self._auth_headers(api_key)}
        response = await self.client.post(self.endpoint(model), json=payload, headers=headers)

        if response.is_error:
            raise ProviderError(_error_message(response), status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"Invalid JSON from provider: {e}") from e

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return f"HTTP {response.status_code}"
