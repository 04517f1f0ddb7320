from __future__ import annotations

from typing import Iterable, Optional

from marketing.models import BrandProfile, ConceptBrief
from marketing.platforms import PLATFORMS, get_platform, platform_prompt
from marketing.website import SiteSnapshot

GENERATE_SYSTEM_PROMPT = (
    "You are an award-winning marketing agency creative director. You create exceptional, "
    "high-converting marketing content that drives engagement and results. You always respond in valid JSON format."
)

_RAW_JSON_ONLY = (
    "Respond with ONLY raw valid JSON (no markdown, no code blocks, no backticks, no explanation, "
    "just the JSON object):"
)

_PIECE_SCHEMA = """{
  "pieces": [
    {
      "platform": "platform_id",
      "contentType": "the format (Post, Reel Script, Thread, Article, etc.)",
      "headline": "platform-appropriate headline or hook line",
      "body": "the full content body, using \\n for line breaks. Platform-native formatting.",
      "hashtags": ["relevant", "hashtags"],
      "cta": "platform-appropriate call to action",
      "imagePrompt": "detailed image/visual description to accompany this content"
    }
  ]
}"""


def _or_unspecified(value: str) -> str:
    return value or "Not specified"


def build_brand_brief(brand: BrandProfile) -> str:
    return "\n".join([
        f"=== BRAND INTELLIGENCE: {brand.name} ===",
        "",
        f"COMPANY: {brand.name}",
        f"WEBSITE: {brand.website or 'N/A'}",
        f'TAGLINE: "{brand.tagline}"',
        f"INDUSTRY: {brand.guidelines or 'General'}",
        "",
        f"=== WHAT {brand.name.upper()} IS ===",
        brand.description,
        "",
        "=== PRODUCTS & SERVICES ===",
        _or_unspecified(brand.products),
        "",
        "=== TARGET AUDIENCE ===",
        brand.target_audience,
        "",
        "=== BRAND VOICE & TONE ===",
        f"Voice: {brand.voice}",
        f"Tone: {brand.tone}",
        "",
        "=== VALUES & MISSION ===",
        f"Mission: {_or_unspecified(brand.mission)}",
        f"Values: {_or_unspecified(brand.values)}",
        "",
        "=== UNIQUE SELLING POINTS ===",
        _or_unspecified(brand.usps),
        "",
        "=== PRICING ===",
        _or_unspecified(brand.pricing),
        "",
        "=== CONTENT THEMES THAT WORK ===",
        _or_unspecified(brand.content_themes),
        "",
        "=== ACTIVE CHANNELS ===",
        ", ".join(brand.channels) or "Not specified",
    ]).strip()


def build_creative_director_prompt(brand: BrandProfile, preference_context: str = "") -> str:
    return f"""You are the creative director of an award-winning marketing agency. You are {brand.name}'s dedicated agency. You know this brand inside out.

You don't just create content. You find angles, spot cultural moments, and connect what's happening in the world with what {brand.name} does.

{build_brand_brief(brand)}

{preference_context}

YOUR CREATIVE STANDARDS:
- Never generic. Every piece must feel like it was made specifically for {brand.name}
- Hook-first thinking: if the first line doesn't stop someone, nothing else matters
- Platform-native: Instagram content looks and feels different from LinkedIn. Always.
- Emotionally intelligent: speak to real human feelings, not marketing buzzwords

You always respond in valid JSON format."""


def build_ideation_prompt(brand: BrandProfile, preference_context: str = "") -> str:
    return f"""You are the head of strategy at an award-winning creative agency. Your job is to generate brilliant content concepts for {brand.name}.

You think in angles, not topics. You find the unexpected connection between what's happening in the world and what {brand.name} stands for.

{build_brand_brief(brand)}

{preference_context}

YOUR APPROACH:
- Think like a journalist: what's the story? What's the hook?
- Find the tension: what problem does this solve? What misconception does this challenge?
- Every concept must have a clear angle, not just a topic
- Think about what would make someone share this with a friend

You always respond in valid JSON format."""


def build_generate_prompt(
    *, topic: str, channel: str, content_type: str, tone: str, framework: str, keywords: str = "",
) -> str:
    keyword_line = f"Keywords to include: {keywords}" if keywords else ""
    return f"""Create a {content_type} for {channel} about "{topic}".

Tone: {tone}
Framework: {framework}
{keyword_line}

Respond with ONLY valid JSON in this exact format:
{{
  "headline": "A compelling headline",
  "body": "The main content body (use \\n for line breaks)",
  "hashtags": ["#hashtag1", "#hashtag2", "#hashtag3", "#hashtag4", "#hashtag5"],
  "cta": "A strong call to action",
  "imagePrompt": "A detailed image generation prompt for a visual to accompany this content"
}}"""


def build_content_set_prompt(concept: ConceptBrief, platform_ids: Iterable[str]) -> str:
    ids = [pid for pid in platform_ids if pid in PLATFORMS]
    specs = "\n\n".join(platform_prompt(pid) for pid in ids)
    return f"""Create a complete content set based on this creative concept:

CONCEPT: "{concept.title}"
HOOK: "{concept.hook}"
ANGLE: "{concept.angle}"

Generate ONE piece of content for EACH of these platforms. Each piece must carry the same core message but be completely native to its platform, not the same text reformatted.

{specs}

Respond with ONLY valid JSON in this exact format:
{_PIECE_SCHEMA}

Generate exactly {len(ids)} pieces, one per platform."""


def build_ideation_request_prompt(context: str = "", news_context: Optional[str] = None) -> str:
    sections = [
        "Generate 4 creative content concepts. Each concept should be a unique angle: "
        "a specific creative direction with a hook that makes someone stop scrolling."
    ]
    if news_context:
        sections.append(
            f"CURRENT NEWS & TRENDS TO CONSIDER:\n{news_context}\n\n"
            "Find creative angles that connect these current events/trends to the brand. "
            "At least 1-2 concepts should feel timely and relevant."
        )
    if context:
        sections.append(f"ADDITIONAL CONTEXT: {context}")
    sections.append(f"""{_RAW_JSON_ONLY}
{{
  "concepts": [
    {{
      "title": "The concept name, specific and evocative",
      "hook": "The opening line or hook that would grab attention",
      "angle": "The specific creative angle and why it will resonate",
      "reasoning": "Why this concept works for the brand right now",
      "newsReference": "Reference to a current news story or trend if applicable, or null",
      "trendReference": "Reference to a social media trend or format if applicable, or null",
      "suggestedPlatforms": ["platform_ids"]
    }}
  ]
}}""")
    return "\n\n".join(sections)


def build_repurpose_prompt(source_content: str, platform_ids: Iterable[str]) -> str:
    lines = []
    for pid in platform_ids:
        spec = get_platform(pid)
        if spec is None:
            continue
        lines.append(
            f"{spec.name} ({spec.id}): {spec.content_format} | Tone: {spec.tone_guidance} "
            f"| Max: {spec.max_chars} chars, {spec.hashtag_limit} hashtags"
        )
    targets = "\n".join(lines)
    return f"""Repurpose the following content into platform-native versions. Don't just reformat; reimagine each piece for its platform.

SOURCE CONTENT:
{source_content}

TARGET PLATFORMS:
{targets}

{_RAW_JSON_ONLY}
{_PIECE_SCHEMA}

RULES:
- Each piece must feel like it was ORIGINALLY written for that platform
- Maintain the core message but change everything else"""


VIDEO_SYSTEM_PROMPT = (
    "You are an award-winning video marketing director who creates viral video scripts. You understand "
    "platform-specific best practices for TikTok, Instagram Reels, YouTube, and more. You always respond in valid JSON format."
)


def build_video_prompt(topic: str, video_type: str, style: str, platform: str, key_message: str = "") -> str:
    sections = [f'Create a {video_type} video script in "{style}" style for {platform} about "{topic}".']
    if key_message:
        sections.append(f"Key message: {key_message}")
    sections.append("""Respond with ONLY valid JSON in this exact format:
{
  "title": "Video title",
  "hook": "Opening hook to grab attention in the first 2 seconds",
  "scenes": [
    {
      "sceneNumber": 1,
      "visual": "Description of what appears on screen",
      "narration": "What is said / voiceover text",
      "duration": "5s"
    }
  ],
  "cta": "Call to action at the end",
  "music": "Music/audio recommendation",
  "totalDuration": "Total estimated duration"
}

Create 4-6 scenes. Make the hook irresistible. Make every scene visual and specific.""")
    return "\n\n".join(sections)


BRAND_ANALYST_SYSTEM_PROMPT = (
    "You are a brand strategist who specializes in competitive intelligence and brand analysis. Given the raw "
    "text content from a company's website, you extract and synthesize a comprehensive brand profile. You are "
    "thorough, perceptive, and great at reading between the lines to understand a brand's positioning, voice, and audience."
)


def build_brand_import_prompt(site: SiteSnapshot) -> str:
    logos = "\n".join(site.logo_candidates) or "None found"
    colors = ", ".join(site.colors)
    return f"""Analyze this website and extract a comprehensive brand profile.

WEBSITE URL: {site.url}
PAGE TITLE: {site.title}
OG TITLE: {site.og_title}
META DESCRIPTION: {site.meta_description}

WEBSITE TEXT CONTENT:
{site.text}

LOGO CANDIDATES (URLs found on the page):
{logos}

COLORS FOUND ON SITE:
{colors or "None detected"}

Based on this information, create a complete brand profile. Respond with ONLY valid JSON:
{{
  "name": "Company/brand name",
  "tagline": "Their tagline or slogan if found, or a suggested one",
  "logo": "Best logo URL from the candidates (prefer og:image or images with 'logo' in the path; empty string if none look right)",
  "description": "2-3 sentence description of what this company does",
  "products": "Their main products or services",
  "targetAudience": "Who they're targeting based on messaging and content",
  "voice": "Their brand voice (e.g., confident, friendly, authoritative, playful)",
  "tone": "Their communication tone (e.g., professional yet warm, casual and direct)",
  "values": "Core values evident from their messaging",
  "usps": "Unique selling points: what makes them different",
  "mission": "Their mission statement or inferred mission",
  "pricing": "Any pricing information found, or 'Not specified on website'",
  "contentThemes": "Key themes they focus on in their content (comma-separated)",
  "colors": ["#hex1", "#hex2"]
}}

For the colors array: use the actual brand colors found on the site. If the detected colors ({colors}) look like real brand colors, use those. Otherwise infer from the design.

Be specific and thorough. Don't make up information that isn't supported by the website content."""
