"""Comprehensive seven-component audit.

Pipeline: extract facts -> run the analyzers concurrently -> aggregate the
weighted score -> collate severity-ranked recommendations.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Mapping

from bs4 import BeautifulSoup

import config
from analyzers import ANALYZERS
from extractor import ContentExtractor, extract_content, parse_markup
from models import ComponentScore, ComprehensiveAuditResult, ContentFacts
from scoring import aggregate_scores, collate_recommendations, grade

logger = logging.getLogger(__name__)

# Called as analyzer(markup, facts, url, soup=tree)
Analyzer = Callable[..., ComponentScore]


def degraded_score(name: str, error: BaseException) -> ComponentScore:
    return {
        "score": 0,
        "issues": [{"severity": "info", "message": f"{name} analysis failed: {error}"}],
        "passed": [],
    }


def _run_isolated(
    name: str, analyzer: Analyzer, markup: str, facts: ContentFacts, url: str, soup: BeautifulSoup
) -> ComponentScore:
    try:
        result = analyzer(markup, facts, url, soup=soup)
        return {
            "score": max(0, min(100, int(result["score"]))),
            "issues": list(result["issues"]),
            "passed": list(result["passed"]),
        }
    except Exception as e:
        logger.exception("Analyzer %s failed for %s", name, url)
        return degraded_score(name, e)


def run_analyzers(
    markup: str,
    facts: ContentFacts,
    url: str,
    analyzers: Mapping[str, Analyzer] | None = None,
    max_workers: int | None = None,
    soup: BeautifulSoup | None = None,
) -> dict[str, ComponentScore]:
    """
    Fan the analyzers out over a thread pool and wait for all of them.
    `analyzers` overrides entries of the default registry by component name.
    The markup is parsed once unless `soup` is given; every analyzer reads
    the same tree.
    """
    if soup is None:
        soup = parse_markup(markup)
    selected = dict(ANALYZERS)
    selected.update(analyzers or {})
    workers = max(1, min(len(selected), max_workers or config.AUDIT_MAX_WORKERS))

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            name: executor.submit(_run_isolated, name, analyzer, markup, facts, url, soup)
            for name, analyzer in selected.items()
        }
        # Result order follows the registry, not completion order
        return {name: future.result() for name, future in futures.items()}


def perform_comprehensive_audit(
    url: str,
    markup: str | None,
    now: datetime | None = None,
    extractor: ContentExtractor | None = None,
    analyzers: Mapping[str, Analyzer] | None = None,
) -> ComprehensiveAuditResult:
    """
    Score `markup` served at `url` across all seven components.
    Always returns a complete result; analyzer failures degrade to a zero score.
    """
    url = str(url or "").strip()
    markup = markup or ""
    logger.info("Starting comprehensive audit for %s (%d bytes of markup)", url, len(markup))

    facts = extract_content(markup, extractor)
    components = run_analyzers(markup, facts, url, analyzers)
    overall = aggregate_scores(components)

    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    result: ComprehensiveAuditResult = {
        "url": url,
        "timestamp": timestamp,
        "overall_score": overall,
        "scores": {
            "meta": components["meta"],
            "content": components["content"],
            "technical": components["technical"],
            "mobile": components["mobile"],
            "performance": components["performance"],
            "security": components["security"],
            "accessibility": components["accessibility"],
        },
        "recommendations": collate_recommendations(components),
        "grade": grade(overall),
    }
    logger.info("Audit for %s finished: score=%d grade=%s", url, overall, result["grade"])
    return result
