"""Article-level SEO analysis, keyword suggestions and slugs.

The per-part scores here are fractions (0-1). They are converted to the
0-100 scale once, in `analyze_content` and `optimize_content`, before a
letter grade is assigned.
"""

import logging
import re

import config
from keywords import clean_keywords, contains_any, count_occurrences, extract_top_words
from meta_variations import (
    DESCRIPTION_WINDOW,
    POWER_WORDS,
    TITLE_WINDOW,
    generate_single_meta_tags,
    plain_text,
)
from models import KeywordSuggestions, MetaTags, SlugResult
from scoring import grade, round_half_up
from text_provider import TextGenerationProvider, extract_json, get_text_provider

logger = logging.getLogger(__name__)

KEYWORD_PROMPT = """Analyze the following article and suggest {limit} highly relevant SEO keywords and phrases:

Title: {title}
Category: {category}

Content:
{content}...

Return ONLY this JSON structure:
{{
  "keywords": ["keyword1", "keyword2", "keyword3"],
  "longTailKeywords": ["long tail phrase 1", "long tail phrase 2"],
  "relatedTopics": ["topic1", "topic2"]
}}"""

MAX_SUGGESTED_KEYWORDS = 5


def _word_count(text: str) -> int:
    return len(text.split())


def analyze_title(title: str) -> dict:
    title = str(title or "").strip()
    length = len(title)
    has_numbers = bool(re.search(r"\d", title))
    has_power_words = contains_any(title, POWER_WORDS)
    is_optimal = 30 <= length <= 70

    score = 0.5
    if is_optimal:
        score += 0.3
    if has_numbers:
        score += 0.1
    if has_power_words:
        score += 0.1
    return {
        "length": length,
        "word_count": _word_count(title),
        "is_optimal_length": is_optimal,
        "has_numbers": has_numbers,
        "has_power_words": has_power_words,
        "score": round(min(score, 1.0), 2),
    }


def analyze_body(content: str) -> dict:
    raw = str(content or "")
    text = plain_text(raw)
    words = _word_count(text)
    paragraphs = [p for p in re.split(r"\n\s*\n", raw) if p.strip()]
    has_headings = bool(re.search(r"^#{1,6}\s", raw, re.MULTILINE) or re.search(r"<h[1-6][\s>]", raw, re.I))
    has_lists = bool(re.search(r"^\s*(?:[-*]|\d+\.)\s", raw, re.MULTILINE) or re.search(r"<[ou]l[\s>]", raw, re.I))

    score = 0.4
    if words >= 300:
        score += 0.3
    if has_headings:
        score += 0.15
    if has_lists:
        score += 0.15
    return {
        "word_count": words,
        "char_count": len(text),
        "paragraph_count": len(paragraphs),
        "has_headings": has_headings,
        "has_lists": has_lists,
        "is_optimal_length": 300 <= words <= 2500,
        "score": round(min(score, 1.0), 2),
    }


def analyze_excerpt(excerpt: str) -> dict:
    excerpt = str(excerpt or "").strip()
    length = len(excerpt)
    is_optimal = 120 <= length <= 160
    if excerpt and is_optimal:
        score = 1.0
    elif excerpt:
        score = 0.5
    else:
        score = 0.0
    return {
        "length": length,
        "word_count": _word_count(excerpt),
        "is_optimal_length": is_optimal,
        "exists": bool(excerpt),
        "score": score,
    }


def analyze_keyword_usage(content: str, keywords: list[str]) -> dict:
    text = plain_text(content)
    words = _word_count(text)
    usage = []
    for keyword in keywords:
        occurrences = count_occurrences(text, keyword)
        density = occurrences / words if words else 0.0
        usage.append(
            {
                "keyword": keyword,
                "occurrences": occurrences,
                "density": round(density, 4),
                "is_optimal": 0.01 <= density <= 0.03,
            }
        )
    average = sum(item["density"] for item in usage) / len(usage) if usage else 0.0
    return {"keywords": usage, "average_density": round(average, 4)}


def analyze_readability(content: str) -> dict:
    text = plain_text(content)
    sentences = [s for s in re.split(r"[.!?]+", text) if s.strip()]
    words = _word_count(text)
    average = words / len(sentences) if sentences else 0.0
    readable = 15 <= average <= 20
    return {
        "avg_words_per_sentence": round(average, 1),
        "is_readable": readable,
        "score": 1.0 if readable else 0.7,
    }


def analyze_content(
    title: str,
    content: str,
    excerpt: str = "",
    keywords: list[str] | None = None,
) -> dict:
    """Score an article's title, body, excerpt, keyword use and readability."""
    keywords = clean_keywords(keywords)
    analysis = {
        "title": analyze_title(title),
        "content": analyze_body(content),
        "excerpt": analyze_excerpt(excerpt),
        "keywords": analyze_keyword_usage(content, keywords),
        "readability": analyze_readability(content),
    }
    fraction = (
        analysis["title"]["score"] * 0.25
        + analysis["content"]["score"] * 0.3
        + analysis["excerpt"]["score"] * 0.15
        + analysis["readability"]["score"] * 0.3
    )
    analysis["overall_score"] = round_half_up(fraction * 100)
    analysis["grade"] = grade(analysis["overall_score"])
    return analysis


def generate_recommendations(analysis: dict) -> list[dict]:
    recommendations = []

    if not analysis["title"]["is_optimal_length"]:
        recommendations.append(
            {"category": "title", "priority": "high", "message": "Optimize title length to 30-70 characters"}
        )
    if not analysis["title"]["has_numbers"] and not analysis["title"]["has_power_words"]:
        recommendations.append(
            {"category": "title", "priority": "medium", "message": "Consider adding numbers or power words to title"}
        )

    if not analysis["content"]["is_optimal_length"]:
        recommendations.append(
            {
                "category": "content",
                "priority": "high",
                "message": f"Adjust content length to 300-2500 words (current: {analysis['content']['word_count']})",
            }
        )
    if not analysis["content"]["has_headings"]:
        recommendations.append(
            {"category": "content", "priority": "medium", "message": "Add headings to improve content structure"}
        )

    if not analysis["excerpt"]["exists"]:
        recommendations.append(
            {"category": "excerpt", "priority": "high", "message": "Add an excerpt (120-160 characters)"}
        )

    if not analysis["keywords"]["keywords"]:
        recommendations.append(
            {"category": "keywords", "priority": "high", "message": "Add target keywords for better SEO"}
        )

    return recommendations


def _string_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if isinstance(item, str) and item.strip()]


def suggest_keywords(
    title: str,
    content: str,
    category: str | None = None,
    provider: TextGenerationProvider | None = None,
) -> KeywordSuggestions:
    """Ask the provider for keywords; fall back to the most frequent content words."""
    text = plain_text(content)
    fallback: KeywordSuggestions = {
        "keywords": extract_top_words(text, MAX_SUGGESTED_KEYWORDS),
        "long_tail_keywords": [],
        "related_topics": [],
    }
    if not text:
        return fallback

    provider = provider or get_text_provider()
    prompt = KEYWORD_PROMPT.format(
        limit=MAX_SUGGESTED_KEYWORDS,
        title=str(title or "").strip(),
        category=category or "General",
        content=text[:1000],
    )
    try:
        raw = provider.generate(prompt, max_tokens=config.KEYWORD_MAX_TOKENS, temperature=config.META_TEMPERATURE)
    except Exception as e:
        logger.warning("Keyword suggestion failed, using top content words: %s", e)
        return fallback

    parsed = extract_json(raw)
    keywords = clean_keywords(_string_list((parsed or {}).get("keywords")))
    if not keywords:
        return fallback
    return {
        "keywords": keywords,
        "long_tail_keywords": _string_list(parsed.get("longTailKeywords") or parsed.get("long_tail_keywords")),
        "related_topics": _string_list(parsed.get("relatedTopics") or parsed.get("related_topics")),
    }


def generate_slug(title: str) -> SlugResult:
    """URL slug for `title`. An empty title is a caller error."""
    if not str(title or "").strip():
        raise ValueError("Title is required for slug generation")

    slug = str(title).lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug[:100].strip("-")
    return {"slug": slug, "length": len(slug), "is_optimal": 3 <= len(slug) <= 75}


def calculate_seo_score(analysis: dict, meta_tags: MetaTags) -> int:
    """70% article analysis plus up to 30 points for well-formed meta tags."""
    score = analysis["overall_score"] * 0.7
    if TITLE_WINDOW[0] <= len(meta_tags["meta_title"]) <= TITLE_WINDOW[1]:
        score += 10
    if DESCRIPTION_WINDOW[0] <= len(meta_tags["meta_description"]) <= DESCRIPTION_WINDOW[1]:
        score += 10
    if len(meta_tags["meta_keywords"]) >= 3:
        score += 10
    return max(0, min(100, round_half_up(score)))


def optimize_content(
    title: str,
    content: str,
    excerpt: str = "",
    keywords: list[str] | None = None,
    category: str | None = None,
    provider: TextGenerationProvider | None = None,
) -> dict:
    """Analysis, meta tags, keyword suggestions, slug and recommendations in one bundle."""
    # Raises on a missing title before any analysis or provider call
    slug = generate_slug(title)["slug"]
    keywords = clean_keywords(keywords)
    logger.info("Optimizing content: %r", str(title or "")[:80])
    provider = provider or get_text_provider()

    analysis = analyze_content(title, content, excerpt, keywords)
    meta_tags = generate_single_meta_tags(title, content, excerpt, keywords, category, provider)

    suggested = list(keywords)
    if len(keywords) < 3:
        suggestions = suggest_keywords(title, content, category, provider)
        suggested = clean_keywords(keywords + suggestions["keywords"][:MAX_SUGGESTED_KEYWORDS])

    score = calculate_seo_score(analysis, meta_tags)
    return {
        "analysis": analysis,
        "meta_tags": meta_tags,
        "suggested_keywords": suggested,
        "slug": slug,
        "recommendations": generate_recommendations(analysis),
        "seo_score": score,
        "grade": grade(score),
    }
