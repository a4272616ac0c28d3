"""Data models and types used across the backend.

Database table definitions are in database.py.
Request/response schemas for the API live in schemas.py.
"""

from typing import Literal, TypedDict

Severity = Literal["critical", "high", "medium", "low", "info"]

COMPONENT_NAMES = (
    "meta",
    "content",
    "technical",
    "mobile",
    "performance",
    "security",
    "accessibility",
)


class ImageFact(TypedDict):
    src: str
    alt: str
    has_alt: bool


class LinkFact(TypedDict):
    href: str
    text: str


class Headings(TypedDict):
    h1: list[str]
    h2: list[str]


class ContentFacts(TypedDict):
    """Structured view of a page, derived purely from its markup."""

    title: str
    description: str
    keywords: list[str]
    headings: Headings
    images: list[ImageFact]
    links: list[LinkFact]
    word_count: int


class Issue(TypedDict):
    severity: Severity
    message: str


class RankedIssue(Issue):
    component: str


class ComponentScore(TypedDict):
    """Output of a single analyzer."""

    score: int
    issues: list[Issue]
    passed: list[str]


class ComponentScores(TypedDict):
    meta: ComponentScore
    content: ComponentScore
    technical: ComponentScore
    mobile: ComponentScore
    performance: ComponentScore
    security: ComponentScore
    accessibility: ComponentScore


class ComprehensiveAuditResult(TypedDict):
    url: str
    timestamp: str
    overall_score: int
    scores: ComponentScores
    recommendations: list[RankedIssue]
    grade: str


class _MetaVariationBase(TypedDict):
    text: str
    length: int
    score: int
    valid: bool


class MetaVariation(_MetaVariationBase, total=False):
    """One candidate title or description."""

    warning: str
    keyword_count: int
    keyword_density: float


class MetaTags(TypedDict):
    """Single-variation meta tag bundle."""

    meta_title: str
    meta_description: str
    meta_keywords: list[str]
    og_title: str
    og_description: str
    twitter_title: str
    twitter_description: str
    focus_keyword: str


class MetaVariationSet(TypedDict):
    """Ranked candidate bundle returned in variations mode."""

    title_variations: list[MetaVariation]
    description_variations: list[MetaVariation]
    meta_keywords: list[str]
    focus_keyword: str
    og_title: str
    og_description: str
    twitter_title: str
    twitter_description: str
    recommendations: list[str]
    generated: bool


class KeywordSuggestions(TypedDict):
    keywords: list[str]
    long_tail_keywords: list[str]
    related_topics: list[str]


class SlugResult(TypedDict):
    slug: str
    length: int
    is_optimal: bool
