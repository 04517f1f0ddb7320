from __future__ import annotations

import base64
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Sequence

import httpx

from assessment.data_models import ImageInput
from assessment.errors import UpstreamError, ValidationError

logger = logging.getLogger(__name__)


class Provider(str, Enum):
    CLAUDE = "Claude"
    GPT4 = "GPT-4"
    GEMINI = "Gemini"
    GROK = "Grok"

    @classmethod
    def parse(cls, name: str) -> "Provider":
        try:
            return cls(name)
        except ValueError:
            raise ValidationError(f"Unknown provider: {name}") from None


@dataclass(frozen=True)
class CompletionRequest:
    system: str
    prompt: str
    model: str
    max_tokens: int
    images: Sequence[ImageInput] = field(default_factory=tuple)


@dataclass(frozen=True)
class ProviderSpec:
    """How one vendor differs: where to POST, how to authenticate, body and reply shape."""

    default_model: str
    url: Callable[[str], str]
    headers: Callable[[str], dict[str, str]]
    body: Callable[[CompletionRequest], dict[str, Any]]
    extract: Callable[[dict[str, Any]], str]


def _b64(image: ImageInput) -> str:
    return base64.b64encode(image.data).decode("ascii")


# ── Anthropic Messages API ──────────────────────────────────────────

def _anthropic_body(req: CompletionRequest) -> dict[str, Any]:
    content: list[dict[str, Any]] = [
        {"type": "image", "source": {"type": "base64", "media_type": img.media_type, "data": _b64(img)}}
        for img in req.images
    ]
    content.append({"type": "text", "text": req.prompt})
    return {
        "model": req.model,
        "max_tokens": req.max_tokens,
        "system": req.system,
        "messages": [{"role": "user", "content": content}],
    }


def _anthropic_extract(data: dict[str, Any]) -> str:
    return "".join(block["text"] for block in data["content"] if block.get("type") == "text")


# ── OpenAI-compatible chat completions (OpenAI, xAI) ────────────────

def _chat_body(req: CompletionRequest) -> dict[str, Any]:
    user_content: Any = req.prompt
    if req.images:
        user_content = [{"type": "text", "text": req.prompt}] + [
            {"type": "image_url", "image_url": {"url": f"data:{img.media_type};base64,{_b64(img)}"}}
            for img in req.images
        ]
    return {
        "model": req.model,
        "messages": [
            {"role": "system", "content": req.system},
            {"role": "user", "content": user_content},
        ],
        "max_tokens": req.max_tokens,
    }


def _chat_extract(data: dict[str, Any]) -> str:
    return data["choices"][0]["message"]["content"] or ""


# ── Google Gemini generateContent ───────────────────────────────────

def _gemini_body(req: CompletionRequest) -> dict[str, Any]:
    parts: list[dict[str, Any]] = [
        {"inline_data": {"mime_type": img.media_type, "data": _b64(img)}} for img in req.images
    ]
    parts.append({"text": req.prompt})
    return {
        "system_instruction": {"parts": [{"text": req.system}]},
        "contents": [{"parts": parts}],
        "generationConfig": {"maxOutputTokens": req.max_tokens},
    }


def _gemini_extract(data: dict[str, Any]) -> str:
    return "".join(part.get("text", "") for part in data["candidates"][0]["content"]["parts"])


PROVIDERS: dict[Provider, ProviderSpec] = {
    Provider.CLAUDE: ProviderSpec(
        default_model="claude-sonnet-4-5-20250929",
        url=lambda model: "https://api.anthropic.com/v1/messages",
        headers=lambda key: {"x-api-key": key, "anthropic-version": "2023-06-01"},
        body=_anthropic_body,
        extract=_anthropic_extract,
    ),
    Provider.GPT4: ProviderSpec(
        default_model="gpt-4o",
        url=lambda model: "https://api.openai.com/v1/chat/completions",
        headers=lambda key: {"Authorization": f"Bearer {key}"},
        body=_chat_body,
        extract=_chat_extract,
    ),
    Provider.GEMINI: ProviderSpec(
        default_model="gemini-2.0-flash",
        url=lambda model: f"https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
        headers=lambda key: {"x-goog-api-key": key},
        body=_gemini_body,
        extract=_gemini_extract,
    ),
    Provider.GROK: ProviderSpec(
        default_model="grok-3",
        url=lambda model: "https://api.x.ai/v1/chat/completions",
        headers=lambda key: {"Authorization": f"Bearer {key}"},
        body=_chat_body,
        extract=_chat_extract,
    ),
}


class ProviderClient:
    """Single POST per call against whichever vendor is named. No retries."""

    def __init__(self, timeout: float = 120.0, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.timeout = timeout
        self.transport = transport

    async def complete(
        self,
        provider: Provider | str,
        *,
        api_key: str,
        system: str,
        prompt: str,
        images: Sequence[ImageInput] = (),
        model: str | None = None,
        max_tokens: int = 2048,
    ) -> str:
        vendor = provider if isinstance(provider, Provider) else Provider.parse(provider)
        if not api_key:
            raise UpstreamError(f"{vendor.value} API key not configured")

        spec = PROVIDERS[vendor]
        req = CompletionRequest(
            system=system,
            prompt=prompt,
            model=model or spec.default_model,
            max_tokens=max_tokens,
            images=tuple(images),
        )

        t0 = time.monotonic()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(
                    spec.url(req.model),
                    json=spec.body(req),
                    headers={"Content-Type": "application/json", **spec.headers(api_key)},
                )
        except httpx.HTTPError as exc:
            logger.warning("%s request failed: %s", vendor.value, exc)
            raise UpstreamError(f"{vendor.value} API request failed: {exc}") from exc

        if resp.status_code >= 400:
            logger.warning("%s API error %s", vendor.value, resp.status_code)
            raise UpstreamError(f"{vendor.value} API error: {resp.status_code} {resp.text[:500]}")

        try:
            text = spec.extract(resp.json())
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise UpstreamError(f"{vendor.value} API returned an unexpected response shape") from exc

        logger.info(
            "%s completion finished",
            vendor.value,
            extra={"extra_data": {"model": req.model, "images": len(req.images), "seconds": round(time.monotonic() - t0, 3)}},
        )
        return text
