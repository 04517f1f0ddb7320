from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import httpx
from pydantic import ValidationError as SchemaError

from assessment.errors import ParseError, ValidationError
from marketing.extraction import ReplyParseError, parse_ai_response
from marketing.models import BrandProfile, Concept, ConceptBrief, ContentPiece, ImportedBrand, VideoScript
from marketing.platforms import find_platform
from marketing.prompts import (
    BRAND_ANALYST_SYSTEM_PROMPT,
    GENERATE_SYSTEM_PROMPT,
    VIDEO_SYSTEM_PROMPT,
    build_brand_import_prompt,
    build_content_set_prompt,
    build_creative_director_prompt,
    build_generate_prompt,
    build_ideation_prompt,
    build_ideation_request_prompt,
    build_repurpose_prompt,
    build_video_prompt,
)
from marketing.website import SiteSnapshot, normalize_url
from webapi.llm import Provider, ProviderClient

logger = logging.getLogger(__name__)

FETCH_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; DamageAssessment/1.0)",
    "Accept": "text/html,application/xhtml+xml",
}


class ContentStudio:
    """Marketing copy generation on top of the provider client."""

    def __init__(
        self,
        llm: ProviderClient,
        server_keys: dict[str, str] | None = None,
        fetch_timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.llm = llm
        self.server_keys = server_keys or {}
        self.fetch_timeout = fetch_timeout
        self.transport = transport

    def _resolve(self, provider: str, api_key: str | None) -> tuple[Provider, str]:
        vendor = Provider.parse(provider)
        key = api_key or self.server_keys.get(vendor.value, "")
        if not key:
            raise ValidationError("API key is required. Add it in Settings.")
        return vendor, key

    async def _ask(self, provider: str, api_key: str | None, system: str, prompt: str, max_tokens: int) -> Any:
        vendor, key = self._resolve(provider, api_key)
        raw = await self.llm.complete(vendor, api_key=key, system=system, prompt=prompt, max_tokens=max_tokens)
        try:
            return parse_ai_response(raw)
        except ReplyParseError as exc:
            logger.error("Unparseable %s reply", vendor.value, extra={"extra_data": {"raw": raw[:2000]}})
            raise ParseError(str(exc)) from exc

    @staticmethod
    def _platforms(platform_ids: Sequence[str]) -> list[str]:
        if not platform_ids:
            raise ValidationError("Select at least one platform.")
        resolved = {pid: find_platform(pid) for pid in platform_ids}
        unknown = [pid for pid, spec in resolved.items() if spec is None]
        if unknown:
            raise ValidationError(f"Unknown platform(s): {', '.join(unknown)}")
        return [spec.id for spec in resolved.values()]

    @staticmethod
    def _pieces(payload: Any) -> list[ContentPiece]:
        items = payload.get("pieces") if isinstance(payload, dict) else payload
        if not isinstance(items, list):
            raise ParseError("AI response did not contain content pieces")
        try:
            return [ContentPiece.model_validate(item) for item in items]
        except SchemaError as exc:
            raise ParseError("AI response content pieces were malformed") from exc

    async def generate(
        self,
        *,
        provider: str,
        api_key: str | None,
        topic: str,
        channel: str,
        content_type: str,
        tone: str,
        framework: str,
        keywords: str = "",
    ) -> ContentPiece:
        if not topic:
            raise ValidationError("Topic is required.")
        prompt = build_generate_prompt(
            topic=topic, channel=channel, content_type=content_type,
            tone=tone, framework=framework, keywords=keywords,
        )
        payload = await self._ask(provider, api_key, GENERATE_SYSTEM_PROMPT, prompt, max_tokens=1024)
        if not isinstance(payload, dict):
            raise ParseError("AI response was not a JSON object")
        try:
            return ContentPiece.model_validate({"platform": channel, "contentType": content_type, **payload})
        except SchemaError as exc:
            raise ParseError("AI response content was malformed") from exc

    async def ideate(
        self,
        *,
        provider: str,
        api_key: str | None,
        brand: Optional[BrandProfile],
        context: str = "",
        news_context: Optional[str] = None,
        preference_context: str = "",
    ) -> list[Concept]:
        if brand is None:
            raise ValidationError("No brand selected. Create a brand first.")
        payload = await self._ask(
            provider, api_key,
            build_ideation_prompt(brand, preference_context),
            build_ideation_request_prompt(context, news_context),
            max_tokens=2048,
        )
        items = payload.get("concepts") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise ParseError("AI response did not contain concepts")
        try:
            return [Concept.model_validate(item) for item in items]
        except SchemaError as exc:
            raise ParseError("AI response concepts were malformed") from exc

    async def content_set(
        self,
        *,
        provider: str,
        api_key: str | None,
        brand: Optional[BrandProfile],
        concept: Optional[ConceptBrief],
        platform_ids: Sequence[str],
        preference_context: str = "",
    ) -> list[ContentPiece]:
        if brand is None:
            raise ValidationError("No brand selected.")
        if concept is None or not concept.title:
            raise ValidationError("Concept is required.")
        platforms = self._platforms(platform_ids)
        payload = await self._ask(
            provider, api_key,
            build_creative_director_prompt(brand, preference_context),
            build_content_set_prompt(concept, platforms),
            max_tokens=4096,
        )
        return self._pieces(payload)

    async def repurpose(
        self,
        *,
        provider: str,
        api_key: str | None,
        brand: Optional[BrandProfile],
        source_content: str,
        platform_ids: Sequence[str],
        preference_context: str = "",
    ) -> list[ContentPiece]:
        if brand is None:
            raise ValidationError("No brand selected.")
        if not source_content.strip():
            raise ValidationError("Source content is required.")
        platforms = self._platforms(platform_ids)
        payload = await self._ask(
            provider, api_key,
            build_creative_director_prompt(brand, preference_context),
            build_repurpose_prompt(source_content, platforms),
            max_tokens=4096,
        )
        return self._pieces(payload)

    async def video_script(
        self,
        *,
        provider: str,
        api_key: str | None,
        topic: str,
        video_type: str = "Short-form",
        platform: str = "TikTok",
        style: str = "Engaging",
        key_message: str = "",
    ) -> VideoScript:
        if not topic:
            raise ValidationError("Topic is required.")
        prompt = build_video_prompt(
            topic=topic, video_type=video_type, style=style, platform=platform, key_message=key_message,
        )
        payload = await self._ask(provider, api_key, VIDEO_SYSTEM_PROMPT, prompt, max_tokens=1500)
        if not isinstance(payload, dict):
            raise ParseError("AI response was not a JSON object")
        try:
            return VideoScript.model_validate(payload)
        except SchemaError as exc:
            raise ParseError("AI response video script was malformed") from exc

    async def fetch_site(self, url: str) -> SiteSnapshot:
        try:
            target = normalize_url(url)
        except ValueError:
            raise ValidationError(f'Invalid URL: "{url}". Try something like https://yourwebsite.com') from None
        try:
            async with httpx.AsyncClient(
                timeout=self.fetch_timeout, transport=self.transport, follow_redirects=True
            ) as client:
                resp = await client.get(target, headers=FETCH_HEADERS)
        except httpx.HTTPError as exc:
            logger.warning("Brand site fetch failed for %s: %s", target, exc)
            raise ValidationError(f"Could not fetch website: {exc}") from exc
        if resp.status_code >= 400:
            raise ValidationError(f"Could not fetch website: HTTP {resp.status_code}")
        return SiteSnapshot.from_html(resp.text, target)

    async def import_brand(
        self,
        *,
        provider: str,
        api_key: str | None,
        url: str,
    ) -> tuple[ImportedBrand, list[str]]:
        if not url or not url.strip():
            raise ValidationError("Missing required fields")
        self._resolve(provider, api_key)
        site = await self.fetch_site(url)
        logger.info(
            "Fetched brand site %s",
            site.url,
            extra={"extra_data": {"chars": len(site.text), "logos": len(site.logo_candidates)}},
        )
        payload = await self._ask(
            provider, api_key, BRAND_ANALYST_SYSTEM_PROMPT, build_brand_import_prompt(site), max_tokens=2048,
        )
        if not isinstance(payload, dict):
            raise ParseError("AI response was not a JSON object")
        try:
            brand = ImportedBrand.model_validate(payload)
        except SchemaError as exc:
            raise ParseError("AI response brand profile was malformed") from exc
        return brand.model_copy(update={"website": brand.website or site.url}), site.logo_candidates
