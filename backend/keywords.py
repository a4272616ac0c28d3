"""Keyword helpers shared by the meta tag and content analysis code."""

import re
from collections import Counter

STOP_WORDS = {
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "from", "as", "is", "was", "are", "were", "be", "been", "have",
    "has", "had", "do", "does", "did", "will", "would", "could", "should", "may",
    "might", "must", "can", "this", "that", "about", "their", "there", "these",
    "those", "which", "while", "where", "when", "your", "what",
}


def _collapse(value: object) -> str:
    return " ".join(str(value or "").split())


def clean_keywords(keywords: object) -> list[str]:
    """Normalise a keyword list (or comma-separated string); drops blanks and case-duplicates."""
    if isinstance(keywords, str):
        keywords = keywords.split(",")
    if not isinstance(keywords, list):
        return []
    out: list[str] = []
    seen: set[str] = set()
    for kw in keywords:
        text = _collapse(kw)
        if text and text.lower() not in seen:
            out.append(text)
            seen.add(text.lower())
    return out


def phrase_pattern(phrase: str) -> re.Pattern:
    return re.compile(r"(?<!\w)" + re.escape(phrase.lower()) + r"(?!\w)")


def contains_any(text: str, phrases) -> bool:
    lowered = text.lower()
    return any(phrase_pattern(phrase).search(lowered) for phrase in phrases)


def count_occurrences(text: str, keyword: str) -> int:
    if not keyword.strip():
        return 0
    return len(phrase_pattern(keyword).findall(text.lower()))


def count_keyword_hits(text: str, keywords: list[str]) -> int:
    return sum(count_occurrences(text, kw) for kw in keywords)


def keyword_density(text: str, keywords: list[str]) -> float:
    words = text.split()
    if not words:
        return 0.0
    return count_keyword_hits(text, keywords) / len(words)


def extract_top_words(content: str, limit: int = 5) -> list[str]:
    """Most frequent words longer than four letters, stop words excluded."""
    words = [
        word
        for word in re.split(r"\W+", str(content or "").lower())
        if len(word) > 4 and word not in STOP_WORDS and not word.isdigit()
    ]
    # Counter keeps first-seen order for equal counts
    return [word for word, _ in Counter(words).most_common(limit)]
