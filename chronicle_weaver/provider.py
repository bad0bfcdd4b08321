"""Content provider client: text and image generation for the session core.

The orchestrator and character builder depend on the ContentProvider
protocol only:

    async def generate_scene(request) -> SceneDraft
    async def generate_image(prompt, aspect_ratio) -> InlineImage | None
    async def generate_character_profile(prompt, image=None) -> CharacterProfile
    async def generate_short_text(prompt, max_length, image=None) -> str

The response envelope is validated against GenerateContentResponse and
structured payloads against SceneDraft / CharacterProfile before they are
returned, so callers either get a validated payload or an exception:

    TransportError      network failure, timeout, unexpected HTTP status
    SchemaError         malformed JSON or a missing/mistyped field
    ProviderQuotaError  HTTP 401/403/429: credentials, billing or rate limit

generate_image() returns None rather than raising when the response has no
inline image part.

Two implementations are provided:

    GeminiProvider  async HTTP client for the Generative Language REST API
    EchoProvider    deterministic offline content; lets the app run
                    without credentials

Tests use StubProvider (defined in tests/helpers.py) instead.
"""

from __future__ import annotations

import logging
from typing import Protocol, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from chronicle_weaver.models import (
    CharacterProfile,
    InlineImage,
    ProviderTurn,
    Record,
    SceneDraft,
    SceneRequest,
)
from chronicle_weaver.prompts import CHARACTER_SCHEMA, SCENE_SCHEMA

logger = logging.getLogger(__name__)

_M = TypeVar("_M", bound=BaseModel)


# ---------------------------------------------------------------------------
# Protocol: every provider implementation must match these signatures
# ---------------------------------------------------------------------------

class ContentProvider(Protocol):
    async def generate_scene(self, request: SceneRequest) -> SceneDraft: ...

    async def generate_image(self, prompt: str, aspect_ratio: str) -> InlineImage | None: ...

    async def generate_character_profile(
        self, prompt: str, image: InlineImage | None = None
    ) -> CharacterProfile: ...

    async def generate_short_text(
        self, prompt: str, max_length: int, image: InlineImage | None = None
    ) -> str: ...


# ---------------------------------------------------------------------------
# GeminiProvider: connects to the real backend
# ---------------------------------------------------------------------------

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"

# Statuses that need new credentials or billing, not a retry.
QUOTA_STATUSES = frozenset({401, 403, 429})


class ResponsePart(Record):
    text: str | None = None
    thought: bool | None = None
    inline_data: InlineImage | None = None


class ResponseContent(Record):
    parts: list[ResponsePart] | None = None


class Candidate(Record):
    content: ResponseContent | None = None


class GenerateContentResponse(Record):
    """The subset of the ``generateContent`` response envelope that is read."""

    candidates: list[Candidate] | None = None

    def parts(self) -> list[ResponsePart]:
        if not self.candidates:
            return []
        content = self.candidates[0].content
        if content is None:
            return []
        return content.parts or []

    def text(self) -> str:
        return "".join(p.text for p in self.parts() if p.text is not None and not p.thought)


class GeminiProvider:
    """Async HTTP client for the Generative Language ``generateContent`` endpoint.

    POST {base_url}/v1beta/models/{model}:generateContent
    Request:  {"contents": [...], "systemInstruction": ..., "generationConfig": ...}
    Response: {"candidates": [{"content": {"parts": [{"text": ...} | {"inlineData": ...}]}}]}

    Args:
        api_key:     Sent as the x-goog-api-key header; omitted when empty.
        base_url:    API root. Defaults to the public endpoint.
        text_model:  Scenes and character profiles.
        fast_model:  Short free-text calls (names, stories) without an image.
        image_model: Illustrations and portraits.
        timeout:     HTTP timeout in seconds. Defaults to 120.
    """

    def __init__(
        self,
        api_key: str = "",
        base_url: str = DEFAULT_BASE_URL,
        text_model: str = "gemini-3-pro-preview",
        fast_model: str = "gemini-3-flash-preview",
        image_model: str = "gemini-2.5-flash-image",
        timeout: float = 120.0,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._text_model = text_model
        self._fast_model = fast_model
        self._image_model = image_model
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["x-goog-api-key"] = self._api_key
        return headers

    def _url(self, model: str) -> str:
        return f"{self._base_url}/v1beta/models/{model}:generateContent"

    async def _post(self, stage: str, model: str, body: dict) -> GenerateContentResponse:
        url = self._url(model)
        logger.debug("provider call stage=%s model=%s", stage, model)

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers())
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise TransportError(f"Cannot connect to content provider at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status in QUOTA_STATUSES:
                raise ProviderQuotaError(
                    f"Content provider rejected the request (HTTP {status})"
                ) from e
            raise TransportError(f"Content provider returned HTTP {status}") from e
        except httpx.TimeoutException as e:
            raise TransportError(f"Content provider timed out after {self._timeout}s") from e
        except httpx.RequestError as e:
            raise TransportError(f"Request to content provider failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise SchemaError("Content provider returned a non-JSON body") from e
        try:
            envelope = GenerateContentResponse.model_validate(data)
        except ValidationError as e:
            raise SchemaError(
                f"Unexpected response format from content provider ({stage}): {e}"
            ) from e
        logger.debug("provider response stage=%s", stage)
        return envelope

    # -- request helpers ---------------------------------------------------

    @staticmethod
    def _contents(turns: list[ProviderTurn]) -> list[dict]:
        """Turns as API contents; consecutive same-role turns share one entry."""
        contents: list[dict] = []
        for turn in turns:
            part = {"text": turn.text}
            if contents and contents[-1]["role"] == turn.role:
                contents[-1]["parts"].append(part)
            else:
                contents.append({"role": turn.role, "parts": [part]})
        return contents

    @staticmethod
    def _user_content(prompt: str, image: InlineImage | None = None) -> list[dict]:
        parts: list[dict] = []
        if image is not None:
            parts.append({"inlineData": {"mimeType": image.mime_type, "data": image.data}})
        parts.append({"text": prompt})
        return [{"role": "user", "parts": parts}]

    # -- response helpers --------------------------------------------------

    @staticmethod
    def _validate(model: type[_M], text: str, stage: str) -> _M:
        try:
            return model.model_validate_json(text or "{}")
        except ValidationError as e:
            raise SchemaError(f"Content provider returned an invalid {stage} payload: {e}") from e

    # -- ContentProvider ---------------------------------------------------

    async def generate_scene(self, request: SceneRequest) -> SceneDraft:
        body = {
            "systemInstruction": {"parts": [{"text": request.system_instruction}]},
            "contents": self._contents(request.turns),
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": SCENE_SCHEMA,
            },
        }
        data = await self._post("scene", self._text_model, body)
        return self._validate(SceneDraft, data.text(), "scene")

    async def generate_image(self, prompt: str, aspect_ratio: str) -> InlineImage | None:
        body = {
            "contents": self._user_content(prompt),
            "generationConfig": {
                "responseModalities": ["IMAGE"],
                "imageConfig": {"aspectRatio": aspect_ratio},
            },
        }
        data = await self._post("image", self._image_model, body)
        for part in data.parts():
            if part.inline_data is not None and part.inline_data.data:
                return part.inline_data
        return None

    async def generate_character_profile(
        self, prompt: str, image: InlineImage | None = None
    ) -> CharacterProfile:
        body = {
            "contents": self._user_content(prompt, image),
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": CHARACTER_SCHEMA,
            },
        }
        data = await self._post("character", self._text_model, body)
        return self._validate(CharacterProfile, data.text(), "character")

    async def generate_short_text(
        self, prompt: str, max_length: int, image: InlineImage | None = None
    ) -> str:
        # Image input needs the stronger multimodal model.
        model = self._text_model if image is not None else self._fast_model
        body = {
            "contents": self._user_content(prompt, image),
            "generationConfig": {
                "temperature": 0.9,
                "topK": 64,
                "topP": 0.95,
                "maxOutputTokens": max_length,
            },
        }
        data = await self._post("short_text", model, body)
        return data.text().strip()


# ---------------------------------------------------------------------------
# EchoProvider: deterministic offline content
# ---------------------------------------------------------------------------

class EchoProvider:
    """Builds scenes from the player's last action. No network calls.

    Lets you click through the whole session flow (start, turns, save, load)
    without credentials. Images are never produced, so every scene and
    portrait gets a placeholder; short text is always empty, so the fixed
    fallback names and story are used.
    """

    CHOICES = ["Press onward", "Look around", "Rest a while"]

    async def generate_scene(self, request: SceneRequest) -> SceneDraft:
        action = request.turns[-1].text if request.turns else ""
        logger.debug("EchoProvider scene turns=%d", len(request.turns))
        return SceneDraft(
            scene_description=f"{action}\n\nThe world holds its breath, waiting for your next move.",
            image_prompt="A quiet crossroads at dusk",
            suggested_choices=list(self.CHOICES),
            is_ending=False,
        )

    async def generate_image(self, prompt: str, aspect_ratio: str) -> InlineImage | None:
        return None

    async def generate_character_profile(
        self, prompt: str, image: InlineImage | None = None
    ) -> CharacterProfile:
        return CharacterProfile(
            name="Echo",
            appearance_description="A traveller whose voice returns from every canyon wall.",
            strength=3,
            dexterity=3,
            intelligence=2,
            charisma=2,
        )

    async def generate_short_text(
        self, prompt: str, max_length: int, image: InlineImage | None = None
    ) -> str:
        return ""


# ---------------------------------------------------------------------------
# Errors: raised by providers for all connection and protocol failures
# ---------------------------------------------------------------------------

class ProviderError(RuntimeError):
    """Raised when the content provider cannot be reached or returns an error."""


class TransportError(ProviderError):
    """Network failure, timeout, or an unexpected HTTP status."""


class SchemaError(ProviderError):
    """The response body was not valid JSON or did not match the expected shape."""


class ProviderQuotaError(ProviderError):
    """Authorization, billing or rate-limit rejection. Retrying will not help."""
