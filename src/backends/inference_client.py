"""Chat-completions client for the generative / vision inference backend.

Single boundary for all outbound model calls. Speaks the OpenAI-compatible
``/chat/completions`` shape (OpenRouter by default) and turns every failure
into one of three classes:

- CredentialError       key missing or rejected (401/403)
- QuotaExhaustedError   no credits / quota left (402, or a quota message)
- TransientModelError   everything else, including timeouts

Usage:
    client = InferenceClient(config)
    response = client.complete(ChatRequest(model="openai/gpt-4o", messages=[...]))
    print(response.content)
"""

import logging
from typing import Any, Literal, Optional, Union

import httpx
from pydantic import BaseModel, Field, ValidationError

from src.design_engine.errors import CredentialError, QuotaExhaustedError, TransientModelError
from src.utils.config import EngineConfig

logger = logging.getLogger(__name__)

_QUOTA_MARKERS = ("insufficient credits", "insufficient_quota", "quota exceeded", "payment required")


# ---------------------------------------------------------------------------
# Request / response shapes
# ---------------------------------------------------------------------------

class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: Union[str, list[dict[str, Any]]]


class ChatRequest(BaseModel):
    """One call to one named model."""

    model: str
    messages: list[ChatMessage]
    max_tokens: int = 4000
    temperature: float = 0.7
    json_response: bool = Field(default=False, description="Ask for response_format=json_object")

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [m.model_dump() for m in self.messages],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        if self.json_response:
            payload["response_format"] = {"type": "json_object"}
        return payload


class ChatResponse(BaseModel):
    """The subset of the completions envelope the engine reads."""

    model: str
    choices: list[dict[str, Any]] = Field(default_factory=list)

    @property
    def content(self) -> str:
        """Text of the first choice, or '' when the backend sent none."""
        if not self.choices:
            return ""
        choice = self.choices[0]
        message = choice.get("message")
        if not isinstance(message, dict):
            return ""
        content = message.get("content")
        return content if isinstance(content, str) else ""


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------

def classify_backend_error(status: Optional[int], message: Optional[str], model: str) -> Exception:
    """Map an HTTP status / error message to the engine's backend error classes."""
    message = str(message or "")
    lowered = message.lower()
    summary = f"Backend error for {model}: {status} - {message[:300]}"

    if status in (401, 403) or "invalid api key" in lowered or "no auth credentials" in lowered:
        return CredentialError(f"Backend rejected credentials for {model}", model=model, details=summary)
    if status == 402 or any(marker in lowered for marker in _QUOTA_MARKERS):
        return QuotaExhaustedError(
            "Backend credits or quota exhausted. Add credits, or upload a text-based "
            "document (PDF, DOCX, TXT) instead of an image so fewer vision calls are needed.",
            model=model,
            details=summary,
        )
    return TransientModelError(summary, model=model)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class InferenceClient:
    """Synchronous chat-completions client with a per-call timeout."""

    def __init__(self, config: EngineConfig, transport: Optional[httpx.BaseTransport] = None):
        self.config = config
        self._http = httpx.Client(
            base_url=config.base_url,
            timeout=config.request_timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "InferenceClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _headers(self) -> dict[str, str]:
        if not self.config.api_key:
            raise CredentialError(
                "Missing OPENROUTER_API_KEY; set it in the environment",
            )
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.config.site_url,
            "X-Title": self.config.app_title,
        }

    def complete(self, request: ChatRequest) -> ChatResponse:
        """Send one request to one model.

        Raises:
            CredentialError, QuotaExhaustedError: fatal for the calling stage.
            TransientModelError: the caller may move on to its next model.
        """
        headers = self._headers()
        try:
            response = self._http.post("/chat/completions", json=request.to_payload(), headers=headers)
        except httpx.TimeoutException as e:
            raise TransientModelError(
                f"Timed out after {self.config.request_timeout}s calling {request.model}",
                model=request.model,
                details=str(e),
            ) from e
        except httpx.HTTPError as e:
            raise TransientModelError(f"Transport error calling {request.model}", model=request.model, details=str(e)) from e

        if response.status_code >= 400:
            raise classify_backend_error(response.status_code, response.text, request.model)

        try:
            envelope = response.json()
        except ValueError as e:
            raise TransientModelError(
                f"Non-JSON envelope from {request.model}", model=request.model, details=response.text[:300]
            ) from e

        if not isinstance(envelope, dict):
            raise TransientModelError(f"Unexpected envelope from {request.model}", model=request.model)

        # Some gateways report upstream failures inside a 200 envelope
        error = envelope.get("error")
        if error:
            code = error.get("code") if isinstance(error, dict) else None
            message = str(error.get("message") or "") if isinstance(error, dict) else str(error)
            raise classify_backend_error(code if isinstance(code, int) else None, message, request.model)

        try:
            return ChatResponse(model=envelope.get("model") or request.model, choices=envelope.get("choices") or [])
        except ValidationError as e:
            raise TransientModelError(
                f"Malformed choices from {request.model}", model=request.model, details=f"{e.error_count()} validation errors"
            ) from e
