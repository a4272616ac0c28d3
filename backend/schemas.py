"""Pydantic schemas for API request/response."""

import re

from pydantic import BaseModel, Field, field_validator


def _normalize_list(value: object) -> list[str]:
    if value is None:
        return []

    if isinstance(value, str):
        raw_items = re.split(r"[\n,]", value)
    elif isinstance(value, list):
        raw_items = value
    else:
        return []

    cleaned: list[str] = []
    for item in raw_items:
        text = str(item or "").strip()
        if text:
            cleaned.append(text)

    return cleaned[:15]


class AuditRequest(BaseModel):
    """Request body for POST /audits. Markup is fetched from `url` when omitted."""

    url: str
    markup: str | None = None

    @field_validator("url", mode="before")
    @classmethod
    def normalize_url(cls, value: object) -> str:
        return str(value or "").strip()


class IssueItem(BaseModel):
    severity: str
    message: str


class RankedIssueItem(IssueItem):
    component: str


class ComponentScoreItem(BaseModel):
    score: int = Field(ge=0, le=100)
    issues: list[IssueItem]
    passed: list[str]


class ComponentScoresItem(BaseModel):
    meta: ComponentScoreItem
    content: ComponentScoreItem
    technical: ComponentScoreItem
    mobile: ComponentScoreItem
    performance: ComponentScoreItem
    security: ComponentScoreItem
    accessibility: ComponentScoreItem


class AuditResult(BaseModel):
    """Full seven-component audit."""

    url: str
    timestamp: str
    overall_score: int = Field(ge=0, le=100)
    scores: ComponentScoresItem
    recommendations: list[RankedIssueItem]
    grade: str


class AuditResponse(BaseModel):
    """Stored audit returned by POST /audits and GET /audits/{id}."""

    id: int
    url: str
    created_at: str
    result: AuditResult


class AuditHistoryItem(BaseModel):
    """Summary row for history list."""

    id: int
    url: str
    overall_score: int
    grade: str
    created_at: str


class ArticleRequest(BaseModel):
    """Article context shared by the meta tag and content endpoints."""

    title: str
    content: str = ""
    excerpt: str = ""
    keywords: list[str] = Field(default_factory=list)
    category: str | None = None

    @field_validator("title", "content", "excerpt", mode="before")
    @classmethod
    def normalize_text_fields(cls, value: object) -> str:
        return str(value or "").strip()

    @field_validator("keywords", mode="before")
    @classmethod
    def normalize_list_fields(cls, value: object) -> list[str]:
        return _normalize_list(value)


class MetaTagsRequest(ArticleRequest):
    generate_variations: bool = False


class MetaTagsResponse(BaseModel):
    meta_title: str
    meta_description: str
    meta_keywords: list[str]
    og_title: str
    og_description: str
    twitter_title: str
    twitter_description: str
    focus_keyword: str


class MetaVariationItem(BaseModel):
    text: str
    length: int
    score: int = Field(ge=0, le=100)
    valid: bool
    warning: str | None = None
    keyword_count: int | None = None
    keyword_density: float | None = None


class MetaVariationSetResponse(BaseModel):
    title_variations: list[MetaVariationItem]
    description_variations: list[MetaVariationItem]
    meta_keywords: list[str]
    focus_keyword: str
    og_title: str
    og_description: str
    twitter_title: str
    twitter_description: str
    recommendations: list[str]
    generated: bool


class KeywordRequest(BaseModel):
    title: str = ""
    content: str
    category: str | None = None


class KeywordSuggestionsResponse(BaseModel):
    keywords: list[str]
    long_tail_keywords: list[str]
    related_topics: list[str]


class SlugRequest(BaseModel):
    title: str


class SlugResponse(BaseModel):
    slug: str
    length: int
    is_optimal: bool


class ContentAnalysisResponse(BaseModel):
    title: dict
    content: dict
    excerpt: dict
    keywords: dict
    readability: dict
    overall_score: int
    grade: str


class RecommendationItem(BaseModel):
    category: str
    priority: str
    message: str


class OptimizeResponse(BaseModel):
    analysis: ContentAnalysisResponse
    meta_tags: MetaTagsResponse
    suggested_keywords: list[str]
    slug: str
    recommendations: list[RecommendationItem]
    seo_score: int
    grade: str
