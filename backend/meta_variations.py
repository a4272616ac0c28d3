"""Meta title/description generation, validation and ranking.

Two modes:

* single mode clamps one provider-suggested bundle to the length windows;
* variations mode validates every provider candidate against the windows,
  scores and ranks them, and backfills from a deterministic generator so
  there are always at least three titles and three descriptions.

The provider is never trusted: any failure or unparsable output falls back
to text derived from the original title, excerpt and content.
"""

import logging
import re

import config
from extractor import parse_markup
from keywords import clean_keywords, contains_any, count_keyword_hits, extract_top_words, keyword_density
from models import MetaTags, MetaVariation, MetaVariationSet
from text_provider import TextGenerationProvider, extract_json, get_text_provider

logger = logging.getLogger(__name__)

TITLE_WINDOW = (50, 60)
DESCRIPTION_WINDOW = (150, 160)
OVERSIZE_PENALTY = 10
UNDERSIZE_PENALTY = 15
MIN_VARIATIONS = 3
MAX_KEYWORDS = 5

OG_TITLE_LIMIT = 60
OG_DESCRIPTION_LIMIT = 200
TWITTER_TITLE_LIMIT = 70
TWITTER_DESCRIPTION_LIMIT = 200

POWER_WORDS = ("best", "top", "guide", "ultimate", "essential", "proven", "amazing", "complete")
CTA_WORDS = (
    "learn",
    "discover",
    "get",
    "find",
    "start",
    "try",
    "explore",
    "read",
    "see",
    "shop",
    "buy",
    "download",
    "join",
    "sign up",
    "subscribe",
    "master",
    "unlock",
    "book",
    "claim",
)
BENEFIT_WORDS = (
    "free",
    "easy",
    "fast",
    "quick",
    "proven",
    "save",
    "improve",
    "boost",
    "better",
    "ultimate",
    "complete",
    "essential",
    "guaranteed",
    "results",
    "simple",
    "expert",
)

SINGLE_PROMPT = """Generate SEO-optimized meta tags for the following article:

Title: {title}
Category: {category}
Keywords: {keywords}

Content Preview:
{preview}...

Return ONLY this JSON structure:
{{
  "metaTitle": "SEO-optimized title (50-60 characters)",
  "metaDescription": "Compelling description (150-160 characters)",
  "metaKeywords": ["keyword1", "keyword2", "keyword3"],
  "ogTitle": "Open Graph title",
  "ogDescription": "Open Graph description",
  "twitterTitle": "Twitter card title",
  "twitterDescription": "Twitter card description",
  "focusKeyword": "primary keyword"
}}"""

VARIATIONS_PROMPT = """Write search snippet candidates for the following article.

Title: {title}
Category: {category}
Keywords: {keywords}
Excerpt: {excerpt}

Content Preview:
{preview}...

Rules:
- 5 title candidates, each 50-60 characters, using the keywords naturally.
- 5 description candidates, each 150-160 characters, with a call to action and a clear benefit.
- Up to 5 meta keywords and one focus keyword.
- Up to 5 short recommendations for improving the article's search snippet.

Return ONLY this JSON structure:
{{
  "titles": ["string"],
  "descriptions": ["string"],
  "metaKeywords": ["string"],
  "focusKeyword": "string",
  "recommendations": ["string"]
}}"""


def _collapse(value: object) -> str:
    return " ".join(str(value or "").split())


def plain_text(value: object) -> str:
    """Collapse whitespace and strip any markup from article text."""
    text = str(value or "")
    if "<" in text and ">" in text:
        text = parse_markup(text).get_text(" ")
    return _collapse(text)


def clamp_text(value: object, limit: int) -> str:
    """Collapse whitespace and cut to `limit` characters with an ellipsis."""
    text = _collapse(value)
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def _cut_at_word(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    cut = text[:limit]
    space = cut.rfind(" ")
    return cut[:space].rstrip(" ,;:-") if space > limit // 2 else cut


def _length_tier(length: int, window: tuple[int, int], margin: int, points: tuple[int, int, int, int]) -> int:
    best, near_short, near_long, other = points
    low, high = window
    if low <= length <= high:
        return best
    if low - margin <= length < low:
        return near_short
    if high < length <= high + margin:
        return near_long
    return other


def score_title(text: str, keywords: list[str]) -> tuple[int, int]:
    """Return (score, keyword hit count) for a title candidate."""
    score = _length_tier(len(text), TITLE_WINDOW, 5, (40, 30, 25, 10))

    hits = count_keyword_hits(text, keywords)
    if hits >= 2:
        score += 40
    elif hits == 1:
        score += 25
    else:
        score += 5

    if re.search(r"\d", text):
        score += 10
    if contains_any(text, POWER_WORDS):
        score += 10
    return min(score, 100), hits


def score_description(text: str, keywords: list[str]) -> tuple[int, float]:
    """Return (score, keyword density) for a description candidate."""
    score = _length_tier(len(text), DESCRIPTION_WINDOW, 10, (30, 22, 18, 8))

    density = keyword_density(text, keywords)
    if 0.02 <= density <= 0.04:
        score += 30
    elif density > 0:
        score += 15

    if contains_any(text, CTA_WORDS):
        score += 20
    if contains_any(text, BENEFIT_WORDS):
        score += 20
    return min(score, 100), round(density, 4)


def validate_variation(text: object, kind: str, keywords: list[str]) -> MetaVariation:
    """
    Check one candidate against its window. Text is measured as given, apart
    from outer whitespace. Oversized text is truncated and
    penalised, undersized text is kept but penalised; both are marked invalid.
    """
    window = TITLE_WINDOW if kind == "title" else DESCRIPTION_WINDOW
    low, high = window
    text = str(text or "").strip()
    original_length = len(text)
    warning = None
    penalty = 0

    if original_length > high:
        text = text[: high - 3] + "..."
        warning = f"Truncated from {original_length} characters"
        penalty = OVERSIZE_PENALTY
    elif original_length < low:
        warning = f"{kind.capitalize()} too short ({original_length} characters, minimum {low})"
        penalty = UNDERSIZE_PENALTY

    variation: MetaVariation = {
        "text": text,
        "length": len(text),
        "score": 0,
        "valid": warning is None,
    }
    if kind == "title":
        score, hits = score_title(text, keywords)
        variation["keyword_count"] = hits
    else:
        score, density = score_description(text, keywords)
        variation["keyword_density"] = density
    variation["score"] = max(0, min(100, score - penalty))
    if warning:
        variation["warning"] = warning
    return variation


def rank_variations(variations: list[MetaVariation]) -> list[MetaVariation]:
    return sorted(variations, key=lambda v: v["score"], reverse=True)


def normalize_candidates(raw: object) -> list[str]:
    """Accept a list of strings or {"text": ...} objects; drop anything else."""
    if not isinstance(raw, list):
        return []
    out: list[str] = []
    for item in raw:
        if isinstance(item, dict):
            item = item.get("text")
        if isinstance(item, str) and item.strip():
            out.append(item.strip())
    return out


def fallback_variations(
    title: str,
    content: str,
    excerpt: str = "",
    keyword: str = "",
) -> tuple[list[str], list[str]]:
    """
    Derive three titles and three descriptions from the article itself.
    Pure string work; never calls the provider and never raises.
    """
    clean_title = _collapse(title) or "Untitled"
    summary = plain_text(excerpt) or plain_text(content) or clean_title
    body = plain_text(content) or summary
    keyword = _collapse(keyword)
    label = keyword.title() if keyword else ""

    short_title = _cut_at_word(clean_title, TITLE_WINDOW[1])
    titles = [
        short_title,
        f"{short_title} | {label} Guide" if label else f"{short_title} | Complete Guide",
        f"{label}: {short_title}" if label else f"Guide: {short_title}",
    ]

    lead = f"Learn about {keyword}: " if keyword else "Learn more: "
    descriptions = [
        _cut_at_word(summary, DESCRIPTION_WINDOW[1]),
        _cut_at_word(lead + summary, DESCRIPTION_WINDOW[1]),
        _cut_at_word(f"{clean_title}. {body}", DESCRIPTION_WINDOW[1]),
    ]
    return titles, descriptions


def _build_variations(candidates: list[str], backfill: list[str], kind: str, keywords: list[str]) -> list[MetaVariation]:
    texts = list(candidates)
    if len(texts) < MIN_VARIATIONS:
        for text in backfill:
            if len(texts) >= MIN_VARIATIONS:
                break
            if text not in texts:
                texts.append(text)
        index = 0
        while len(texts) < MIN_VARIATIONS:
            texts.append(backfill[index % len(backfill)])
            index += 1
    return rank_variations([validate_variation(text, kind, keywords) for text in texts])


def _pick(data: dict, *keys: str) -> object:
    for key in keys:
        if key in data and data[key] not in (None, "", []):
            return data[key]
    return None


def _snippet_recommendations(titles: list[MetaVariation], descriptions: list[MetaVariation]) -> list[str]:
    tips: list[str] = []
    if not any(v["valid"] for v in titles):
        tips.append("No title candidate fits 50-60 characters; edit the top pick before publishing.")
    if not any(v["valid"] for v in descriptions):
        tips.append("No description candidate fits 150-160 characters; expand or trim the top pick.")
    if titles and titles[0].get("keyword_count", 0) == 0:
        tips.append("Work the focus keyword into the title.")
    if descriptions and descriptions[0].get("keyword_density", 0) == 0:
        tips.append("Mention the focus keyword in the meta description.")
    if not tips:
        tips.append("Top candidates fit their length windows; A/B test the top two titles.")
    return tips


def _call_provider(provider: TextGenerationProvider, prompt: str, max_tokens: int) -> dict | None:
    try:
        raw = provider.generate(prompt, max_tokens=max_tokens, temperature=config.META_TEMPERATURE)
    except Exception as e:
        logger.warning("Text provider %s failed, using fallback: %s", getattr(provider, "name", "?"), e)
        return None
    parsed = extract_json(raw)
    if parsed is None:
        logger.warning("Text provider returned unparsable output, using fallback")
    return parsed


def generate_meta_variations(
    title: str,
    content: str,
    excerpt: str = "",
    keywords: list[str] | None = None,
    category: str | None = None,
    provider: TextGenerationProvider | None = None,
) -> MetaVariationSet:
    """Ranked title/description candidates plus social tags for one article."""
    if not _collapse(title):
        raise ValueError("title is required to generate meta variations")

    keywords = clean_keywords(keywords)
    provider = provider or get_text_provider()
    logger.info("Generating meta variations for %r", _collapse(title)[:80])

    prompt = VARIATIONS_PROMPT.format(
        title=_collapse(title),
        category=category or "General",
        keywords=", ".join(keywords) or "Not provided",
        excerpt=plain_text(excerpt) or "Not provided",
        preview=plain_text(content)[:500],
    )
    parsed = _call_provider(provider, prompt, config.VARIATION_MAX_TOKENS) or {}

    title_candidates = normalize_candidates(_pick(parsed, "titles", "titleVariations", "title_variations"))
    description_candidates = normalize_candidates(
        _pick(parsed, "descriptions", "descriptionVariations", "description_variations")
    )
    provider_keywords = clean_keywords(_pick(parsed, "metaKeywords", "meta_keywords", "keywords"))

    meta_keywords = keywords or provider_keywords or extract_top_words(plain_text(content), MAX_KEYWORDS)
    meta_keywords = meta_keywords[:MAX_KEYWORDS]
    scoring_keywords = keywords or provider_keywords or meta_keywords
    focus = _pick(parsed, "focusKeyword", "focus_keyword")
    focus_keyword = _collapse(focus) if isinstance(focus, str) else ""
    focus_keyword = focus_keyword or (meta_keywords[0] if meta_keywords else "general")

    backfill_titles, backfill_descriptions = fallback_variations(
        title, content, excerpt, meta_keywords[0] if meta_keywords else ""
    )
    title_variations = _build_variations(title_candidates, backfill_titles, "title", scoring_keywords)
    description_variations = _build_variations(
        description_candidates, backfill_descriptions, "description", scoring_keywords
    )

    raw_recommendations = _pick(parsed, "recommendations")
    recommendations: list[str] = []
    if isinstance(raw_recommendations, list):
        recommendations = [_collapse(item) for item in raw_recommendations if isinstance(item, str) and item.strip()][:5]
    if not recommendations:
        recommendations = _snippet_recommendations(title_variations, description_variations)

    top_title = title_variations[0]["text"]
    top_description = description_variations[0]["text"]
    return {
        "title_variations": title_variations,
        "description_variations": description_variations,
        "meta_keywords": meta_keywords,
        "focus_keyword": focus_keyword,
        "og_title": top_title,
        "og_description": top_description,
        "twitter_title": top_title[:TWITTER_TITLE_LIMIT],
        "twitter_description": top_description[:TWITTER_DESCRIPTION_LIMIT],
        "recommendations": recommendations,
        "generated": bool(title_candidates or description_candidates),
    }


def _fallback_meta_tags(title: str, content: str, excerpt: str, keywords: list[str]) -> MetaTags:
    clean_title = _collapse(title) or "Untitled"
    summary = plain_text(excerpt) or plain_text(content) or "No description"
    return {
        "meta_title": clamp_text(clean_title, TITLE_WINDOW[1]),
        "meta_description": clamp_text(summary, DESCRIPTION_WINDOW[1]),
        "meta_keywords": keywords[:MAX_KEYWORDS],
        "og_title": clamp_text(clean_title, OG_TITLE_LIMIT),
        "og_description": clamp_text(summary, OG_DESCRIPTION_LIMIT),
        "twitter_title": clamp_text(clean_title, TWITTER_TITLE_LIMIT),
        "twitter_description": clamp_text(summary, TWITTER_DESCRIPTION_LIMIT),
        "focus_keyword": keywords[0] if keywords else "general",
    }


def generate_single_meta_tags(
    title: str,
    content: str,
    excerpt: str = "",
    keywords: list[str] | None = None,
    category: str | None = None,
    provider: TextGenerationProvider | None = None,
) -> MetaTags:
    """One clamped meta tag bundle. Never raises."""
    keywords = clean_keywords(keywords)
    fallback = _fallback_meta_tags(title, content, excerpt, keywords)
    if not _collapse(title) or not plain_text(content):
        logger.warning("Missing title or content, returning default meta tags")
        return fallback

    provider = provider or get_text_provider()
    prompt = SINGLE_PROMPT.format(
        title=_collapse(title),
        category=category or "General",
        keywords=", ".join(keywords),
        preview=plain_text(content)[:500],
    )
    parsed = _call_provider(provider, prompt, config.META_MAX_TOKENS)
    if not parsed:
        return fallback

    def text_field(limit: int, default: str, *keys: str) -> str:
        value = _pick(parsed, *keys)
        return clamp_text(value if isinstance(value, str) and value.strip() else default, limit)

    meta_title = text_field(TITLE_WINDOW[1], fallback["meta_title"], "metaTitle", "meta_title")
    meta_description = text_field(
        DESCRIPTION_WINDOW[1], fallback["meta_description"], "metaDescription", "meta_description"
    )
    meta_keywords = clean_keywords(_pick(parsed, "metaKeywords", "meta_keywords")) or keywords
    focus = _pick(parsed, "focusKeyword", "focus_keyword")
    return {
        "meta_title": meta_title,
        "meta_description": meta_description,
        "meta_keywords": meta_keywords[:MAX_KEYWORDS],
        "og_title": text_field(OG_TITLE_LIMIT, meta_title, "ogTitle", "og_title"),
        "og_description": text_field(OG_DESCRIPTION_LIMIT, meta_description, "ogDescription", "og_description"),
        "twitter_title": text_field(TWITTER_TITLE_LIMIT, meta_title, "twitterTitle", "twitter_title"),
        "twitter_description": text_field(
            TWITTER_DESCRIPTION_LIMIT, meta_description, "twitterDescription", "twitter_description"
        ),
        "focus_keyword": _collapse(focus) if isinstance(focus, str) and focus.strip() else fallback["focus_keyword"],
    }


def generate_meta_tags(
    title: str,
    content: str,
    excerpt: str = "",
    keywords: list[str] | None = None,
    category: str | None = None,
    generate_variations: bool = False,
    provider: TextGenerationProvider | None = None,
) -> MetaTags | MetaVariationSet:
    if generate_variations:
        return generate_meta_variations(title, content, excerpt, keywords, category, provider)
    return generate_single_meta_tags(title, content, excerpt, keywords, category, provider)
