"""SEO audit API – FastAPI app exposing the audit and meta tag engines."""

import logging
from functools import lru_cache
from urllib.parse import urlparse

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

import config
from audit_engine import perform_comprehensive_audit
from content_optimizer import analyze_content, generate_slug, optimize_content, suggest_keywords
from database import AuditRepository, create_repository
from extractor import fetch_markup
from meta_variations import generate_meta_tags
from schemas import (
    ArticleRequest,
    AuditHistoryItem,
    AuditRequest,
    AuditResponse,
    ContentAnalysisResponse,
    KeywordRequest,
    KeywordSuggestionsResponse,
    MetaTagsRequest,
    MetaTagsResponse,
    MetaVariationSetResponse,
    OptimizeResponse,
    SlugRequest,
    SlugResponse,
)
from text_provider import TextGenerationProvider, get_text_provider

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("seo_audit_api")

app = FastAPI(
    title="SEO Audit API",
    description="Seven-component SEO audits and scored meta tag variations",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_repository() -> AuditRepository:
    return create_repository()


def get_provider() -> TextGenerationProvider:
    return get_text_provider()


def _is_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


@app.post("/audits", response_model=AuditResponse)
def create_audit(body: AuditRequest, repository: AuditRepository = Depends(get_repository)) -> AuditResponse:
    """
    Pipeline: fetch markup if not posted -> run the seven analyzers -> store -> return the audit.
    """
    markup = body.markup
    if markup is None:
        # Only a fetch needs a reachable URL; posted markup is audited as given
        if not _is_http_url(body.url):
            raise HTTPException(status_code=400, detail="URL must be a valid HTTP or HTTPS URL to fetch the page")
        logger.info("No markup posted for %s, fetching page", body.url)
        markup = fetch_markup(body.url)
    result = perform_comprehensive_audit(body.url, markup)
    audit_id = repository.save(body.url, result)

    stored = repository.get(audit_id)
    if stored is None:
        raise HTTPException(status_code=500, detail="Audit could not be stored")
    return AuditResponse(**stored)


@app.get("/audits/{audit_id}", response_model=AuditResponse)
def get_audit(audit_id: int, repository: AuditRepository = Depends(get_repository)) -> AuditResponse:
    """Return a stored audit."""
    stored = repository.get(audit_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="Audit not found")
    return AuditResponse(**stored)


@app.get("/audits", response_model=list[AuditHistoryItem])
def list_audits(limit: int = 20, repository: AuditRepository = Depends(get_repository)) -> list[AuditHistoryItem]:
    """Return recent audits for the history page."""
    return [AuditHistoryItem(**row) for row in repository.list_recent(limit=limit)]


@app.post("/meta-tags", response_model=MetaVariationSetResponse | MetaTagsResponse)
def create_meta_tags(
    body: MetaTagsRequest,
    provider: TextGenerationProvider = Depends(get_provider),
) -> MetaVariationSetResponse | MetaTagsResponse:
    """Single clamped meta tag bundle, or ranked variations when generate_variations is set."""
    try:
        result = generate_meta_tags(
            title=body.title,
            content=body.content,
            excerpt=body.excerpt,
            keywords=body.keywords,
            category=body.category,
            generate_variations=body.generate_variations,
            provider=provider,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if body.generate_variations:
        return MetaVariationSetResponse(**result)
    return MetaTagsResponse(**result)


@app.post("/content/analyze", response_model=ContentAnalysisResponse)
def analyze_article(body: ArticleRequest) -> ContentAnalysisResponse:
    return ContentAnalysisResponse(**analyze_content(body.title, body.content, body.excerpt, body.keywords))


@app.post("/content/optimize", response_model=OptimizeResponse)
def optimize_article(
    body: ArticleRequest,
    provider: TextGenerationProvider = Depends(get_provider),
) -> OptimizeResponse:
    try:
        result = optimize_content(
            title=body.title,
            content=body.content,
            excerpt=body.excerpt,
            keywords=body.keywords,
            category=body.category,
            provider=provider,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return OptimizeResponse(**result)


@app.post("/keywords/suggest", response_model=KeywordSuggestionsResponse)
def suggest_article_keywords(
    body: KeywordRequest,
    provider: TextGenerationProvider = Depends(get_provider),
) -> KeywordSuggestionsResponse:
    return KeywordSuggestionsResponse(**suggest_keywords(body.title, body.content, body.category, provider))


@app.post("/slug", response_model=SlugResponse)
def create_slug(body: SlugRequest) -> SlugResponse:
    try:
        return SlugResponse(**generate_slug(body.title))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/health")
def health() -> dict:
    """Health check for deployment."""
    return {"status": "ok"}
