from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PlatformSpec:
    id: str
    name: str
    max_chars: int
    hashtag_limit: int
    best_practices: str
    content_format: str
    tone_guidance: str
    video_format: Optional[str] = None


PLATFORMS: dict[str, PlatformSpec] = {
    spec.id: spec
    for spec in (
        PlatformSpec(
            id="instagram",
            name="Instagram",
            max_chars=2200,
            hashtag_limit=30,
            best_practices="Lead with a strong hook in the first line. Use line breaks for readability. Mix branded and niche hashtags. End with a clear CTA. Carousel posts get 3x more engagement than single images.",
            content_format="Caption with line breaks, hashtag block at end. First line is the hook; it must stop the scroll. Use emojis sparingly but strategically. Include a CTA before hashtags.",
            tone_guidance="Conversational, authentic, visually descriptive. Speak as a person, not a brand. Use storytelling.",
            video_format="9:16 vertical, 15-90 seconds for Reels",
        ),
        PlatformSpec(
            id="tiktok",
            name="TikTok",
            max_chars=4000,
            hashtag_limit=10,
            best_practices="Hook in first 2 seconds or lose them. Pattern interrupts work. Trending sounds boost reach. Raw and authentic beats polished. POV and storytime formats dominate.",
            content_format="Short, punchy caption. Hook-first. Use trending format references. Keep hashtags minimal but strategic. Caption supports the video, doesn't replace it.",
            tone_guidance="Raw, real, unfiltered. Speak like a person talking to a friend. Humor and relatability win. Never sound corporate.",
            video_format="9:16 vertical, 15-60 seconds optimal, hook in first 2 seconds",
        ),
        PlatformSpec(
            id="linkedin",
            name="LinkedIn",
            max_chars=3000,
            hashtag_limit=5,
            best_practices="Open with a bold statement or contrarian take. Use single-line paragraphs for readability. Tell stories with professional lessons. Share data and insights. Document, don't just promote.",
            content_format="Text post with single-line paragraphs. Strong opening line (this appears before 'see more'). Personal stories with business lessons. End with a question to drive comments.",
            tone_guidance="Thought leadership meets authenticity. Professional but human. Share lessons, not lectures. First-person perspective.",
            video_format="16:9 horizontal or 1:1 square, 1-3 minutes",
        ),
        PlatformSpec(
            id="twitter",
            name="X (Twitter)",
            max_chars=280,
            hashtag_limit=3,
            best_practices="Threads get more reach than single tweets. Hot takes drive engagement. Reply to trending topics. Be concise and punchy.",
            content_format="Single tweet (280 chars) or thread. Thread format: hook tweet, 3-5 value tweets, CTA tweet. Each tweet must stand alone but build toward the point.",
            tone_guidance="Sharp, witty, opinionated. Brevity is everything. Hot takes backed by experience. Casual but smart.",
            video_format="16:9 or 1:1, under 2 minutes 20 seconds",
        ),
        PlatformSpec(
            id="facebook",
            name="Facebook",
            max_chars=63206,
            hashtag_limit=5,
            best_practices="Questions and polls drive engagement. Share relatable stories. Link posts get less reach, so use native content. Video gets priority in feed.",
            content_format="Conversational post. Ask questions. Use short paragraphs. Include a visual when possible. Minimal hashtags.",
            tone_guidance="Friendly, community-oriented, relatable. Like talking to neighbors. More emotional and personal than LinkedIn.",
            video_format="16:9, 1:1, or 9:16. 1-3 minutes optimal.",
        ),
        PlatformSpec(
            id="youtube",
            name="YouTube",
            max_chars=5000,
            hashtag_limit=15,
            best_practices="Title and thumbnail are 80% of the battle. Hook viewers in first 10 seconds. Pattern: hook, value, CTA. Use chapters for longer content.",
            content_format="Video description: hook summary, timestamps/chapters, links, hashtags. Title must be clickable but honest. Description supports SEO.",
            tone_guidance="Energetic, educational, or entertaining depending on format. Tutorials: clear and helpful. Shorts: TikTok energy.",
            video_format="Shorts: 9:16 under 60s. Long form: 16:9, 8-15 minutes optimal",
        ),
        PlatformSpec(
            id="email",
            name="Email",
            max_chars=10000,
            hashtag_limit=0,
            best_practices="Subject line is everything; make it curiosity-driven or benefit-led. Keep body scannable. One clear CTA per email.",
            content_format="Subject line (50 chars max for mobile). Preview text. Opening hook. Value/story body. Single clear CTA. PS line for secondary offer.",
            tone_guidance="Personal, direct, like writing to one person. Conversational. The best emails feel like a friend giving advice.",
        ),
        PlatformSpec(
            id="blog",
            name="Blog",
            max_chars=50000,
            hashtag_limit=0,
            best_practices="SEO-optimized title and headers. Answer a specific question. Include internal and external links. Use subheadings every 200-300 words.",
            content_format="Title (H1), intro hook, subheadings (H2/H3), body paragraphs, conclusion with CTA. Include meta description. Aim for 1000-2000 words.",
            tone_guidance="Authoritative yet accessible. Educational. Show expertise without jargon. Use examples and data.",
        ),
    )
}


def get_platform(platform_id: str) -> PlatformSpec | None:
    return PLATFORMS.get(platform_id)


def find_platform(name_or_id: str) -> PlatformSpec | None:
    lowered = name_or_id.lower()
    for spec in PLATFORMS.values():
        if spec.id == lowered or spec.name.lower() == lowered:
            return spec
    return None


def platform_prompt(platform_id: str) -> str:
    spec = PLATFORMS.get(platform_id)
    if spec is None:
        return ""
    lines = [
        f"### {spec.name} ({spec.id})",
        f"- Character limit: {spec.max_chars}",
        f"- Hashtag limit: {spec.hashtag_limit}",
        f"- Format: {spec.content_format}",
        f"- Tone: {spec.tone_guidance}",
        f"- Best practices: {spec.best_practices}",
    ]
    if spec.video_format:
        lines.append(f"- Video format: {spec.video_format}")
    return "\n".join(lines)
