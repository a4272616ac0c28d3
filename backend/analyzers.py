"""The seven component analyzers.

Each analyzer is a pure function
`(markup, facts, url, soup=None) -> ComponentScore` scored out of 100. The
audit engine parses the markup once and passes the read-only tree as `soup`;
called alone, an analyzer parses `markup` itself. Checks award full points at
the best threshold, a fixed reduced amount at an intermediate threshold and
little or nothing otherwise. Every failed or partial check appends an Issue;
every full check appends a line to `passed`.
"""

import re
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from extractor import parse_markup
from models import ComponentScore, ContentFacts, Issue, Severity

LANDMARK_TAGS = ("main", "nav", "header", "footer", "aside", "section", "article")
ARIA_ATTRIBUTES = ("aria-label", "aria-labelledby", "aria-describedby")
UNLABELLED_INPUT_TYPES = {"hidden", "submit", "button", "reset", "image"}
SUBRESOURCE_TAGS = {
    "img": "src",
    "script": "src",
    "iframe": "src",
    "source": "src",
    "audio": "src",
    "video": "src",
    "embed": "src",
}

_FIXED_WIDTH_PATTERN = re.compile(r"(?<![-\w])width\s*:\s*(\d+)px", re.IGNORECASE)
_ZOOM_DISABLED_PATTERN = re.compile(r"user-scalable\s*=\s*(no|0)|maximum-scale\s*=\s*1(\.0+)?\b", re.IGNORECASE)


class _Checks:
    """Accumulates points, issues and passed checks for one analyzer."""

    def __init__(self, start: int = 0) -> None:
        self.points = start
        self.issues: list[Issue] = []
        self.passed: list[str] = []

    def ok(self, points: int, message: str) -> None:
        self.points += points
        self.passed.append(message)

    def partial(self, points: int, severity: Severity, message: str) -> None:
        self.points += points
        self.issues.append({"severity": severity, "message": message})

    def fail(self, severity: Severity, message: str) -> None:
        self.partial(0, severity, message)

    def result(self) -> ComponentScore:
        return {
            "score": max(0, min(100, int(self.points))),
            "issues": self.issues,
            "passed": self.passed,
        }


def _is_https(url: str) -> bool:
    try:
        return urlparse(url or "").scheme.lower() == "https"
    except ValueError:
        return False


def _host(url: str) -> str:
    try:
        return (urlparse(url or "").netloc or "").lower()
    except ValueError:
        return ""


def _rel_values(tag) -> list[str]:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return [str(value).lower() for value in rel]


def _percent(part: int, total: int) -> float:
    return (part / total) * 100 if total else 100.0


def _alt_coverage(facts: ContentFacts) -> tuple[int, int]:
    images = facts["images"]
    return sum(1 for image in images if image["has_alt"]), len(images)


def _is_internal_link(href: str, page_url: str) -> bool:
    href = href.strip()
    if not href or href.startswith("#"):
        return False
    if href.lower().startswith(("mailto:", "tel:", "javascript:", "data:")):
        return False
    if href.startswith("//"):
        return _host("https:" + href) == _host(page_url)
    parsed = urlparse(href)
    if parsed.scheme in ("http", "https"):
        return bool(parsed.netloc) and parsed.netloc.lower() == _host(page_url)
    return not parsed.scheme


def _asset_urls(soup: BeautifulSoup) -> list[str]:
    urls = [str(tag.get("src")) for tag in soup.find_all("script", src=True)]
    for link in soup.find_all("link", href=True):
        if "stylesheet" in _rel_values(link):
            urls.append(str(link.get("href")))
    return urls


def _document(markup: str, soup: BeautifulSoup | None) -> BeautifulSoup:
    # A shared tree is read concurrently by every analyzer and must not be mutated
    return soup if soup is not None else parse_markup(markup)


def _viewport_content(soup: BeautifulSoup) -> str | None:
    for tag in soup.find_all("meta"):
        if str(tag.get("name") or "").strip().lower() == "viewport":
            return str(tag.get("content") or "")
    return None


def analyze_meta_tags(
    markup: str, facts: ContentFacts, url: str = "", soup: BeautifulSoup | None = None
) -> ComponentScore:
    soup = _document(markup, soup)
    checks = _Checks()

    title = facts["title"]
    if not title:
        checks.fail("critical", "Missing page title")
    elif 30 <= len(title) <= 60:
        checks.ok(25, f"Title length is optimal ({len(title)} characters)")
    else:
        checks.partial(10, "medium", f"Title is {len(title)} characters; aim for 30-60 characters")

    description = facts["description"]
    if not description:
        checks.fail("critical", "Missing meta description")
    elif 120 <= len(description) <= 160:
        checks.ok(25, f"Meta description length is optimal ({len(description)} characters)")
    else:
        checks.partial(
            10,
            "medium",
            f"Meta description is {len(description)} characters; aim for 120-160 characters",
        )

    h1_count = len(facts["headings"]["h1"])
    if h1_count == 1:
        checks.ok(20, "Page has exactly one H1 heading")
    elif h1_count == 0:
        checks.fail("high", "Missing H1 heading")
    else:
        checks.partial(10, "medium", f"Found {h1_count} H1 headings; use exactly one")

    og_missing = []
    for prop in ("og:title", "og:description", "og:image"):
        tag = soup.find("meta", attrs={"property": prop})
        if tag is None or not str(tag.get("content") or "").strip():
            og_missing.append(prop)
    if not og_missing:
        checks.ok(15, "Open Graph title, description and image are present")
    elif len(og_missing) < 3:
        checks.partial(7, "low", f"Incomplete Open Graph tags (missing: {', '.join(og_missing)})")
    else:
        checks.fail("medium", "Missing Open Graph tags for social sharing")

    canonical = None
    for link in soup.find_all("link", href=True):
        if "canonical" in _rel_values(link):
            canonical = link
            break
    if canonical is not None:
        checks.ok(15, "Canonical link is present")
    else:
        checks.fail("medium", "Missing canonical link")

    return checks.result()


def analyze_content_quality(
    markup: str, facts: ContentFacts, url: str = "", soup: BeautifulSoup | None = None
) -> ComponentScore:
    soup = _document(markup, soup)
    checks = _Checks()

    words = facts["word_count"]
    if 300 <= words <= 2500:
        checks.ok(30, f"Word count is in the optimal range ({words} words)")
    elif 200 <= words < 300:
        checks.partial(15, "medium", f"Content is a little thin ({words} words); aim for at least 300")
    elif words > 2500:
        checks.partial(20, "low", f"Content is very long ({words} words); consider splitting it up")
    else:
        checks.fail("high", f"Thin content ({words} words); aim for 300-2500 words")

    h2_count = len(facts["headings"]["h2"])
    if 2 <= h2_count <= 10:
        checks.ok(25, f"Good subheading structure ({h2_count} H2 headings)")
    elif h2_count == 0:
        checks.fail("medium", "No H2 subheadings; break content into sections")
    else:
        checks.partial(12, "low", f"Found {h2_count} H2 headings; 2-10 is recommended")

    with_alt, total_images = _alt_coverage(facts)
    coverage = _percent(with_alt, total_images)
    if total_images == 0:
        checks.ok(20, "No images to check for alt text")
    elif coverage == 100:
        checks.ok(20, "All images have alt text")
    elif coverage >= 80:
        checks.partial(12, "medium", f"{total_images - with_alt} of {total_images} images are missing alt text")
    else:
        checks.partial(5, "high", f"{total_images - with_alt} of {total_images} images are missing alt text")

    internal = sum(1 for link in facts["links"] if _is_internal_link(link["href"], url))
    if internal >= 3:
        checks.ok(15, f"Good internal linking ({internal} internal links)")
    elif internal > 0:
        checks.partial(8, "low", f"Only {internal} internal links; add at least 3")
    else:
        checks.fail("medium", "No internal links found")

    if soup.find(["ul", "ol"]) is not None:
        checks.ok(10, "Content uses list markup")
    else:
        checks.fail("low", "Consider using lists to make content easier to scan")

    return checks.result()


def analyze_technical_seo(
    markup: str, facts: ContentFacts, url: str = "", soup: BeautifulSoup | None = None
) -> ComponentScore:
    soup = _document(markup, soup)
    checks = _Checks()

    if _is_https(url):
        checks.ok(25, "URL uses HTTPS")
    else:
        checks.fail("critical", "Page is not served over HTTPS")

    noindex = False
    for tag in soup.find_all("meta"):
        name = str(tag.get("name") or "").strip().lower()
        if name in ("robots", "googlebot") and "noindex" in str(tag.get("content") or "").lower():
            noindex = True
            break
    if noindex:
        checks.fail("high", "Robots meta tag blocks indexing (noindex)")
    else:
        checks.ok(15, "Page is indexable")

    json_ld = [
        tag
        for tag in soup.find_all("script")
        if str(tag.get("type") or "").strip().lower() == "application/ld+json" and tag.get_text(strip=True)
    ]
    if json_ld:
        checks.ok(20, "JSON-LD structured data is present")
    else:
        checks.fail("medium", "No JSON-LD structured data found")

    checks.partial(10, "info", "Make sure an XML sitemap including this page is submitted to search engines")

    parsed = urlparse(url or "")
    if not parsed.query and len(url or "") < 100:
        checks.ok(15, "URL is short and free of query parameters")
    elif parsed.query:
        checks.partial(7, "low", "URL contains query parameters; prefer clean, descriptive paths")
    else:
        checks.partial(7, "low", f"URL is {len(url)} characters; keep it under 100")

    resources = len(_asset_urls(soup)) + len(soup.find_all("iframe", src=True))
    if resources <= 15:
        checks.ok(10, f"Reasonable number of external resources ({resources})")
    elif resources <= 30:
        checks.partial(5, "low", f"Page references {resources} scripts, stylesheets and frames")
    else:
        checks.fail("medium", f"Page references {resources} scripts, stylesheets and frames; consider bundling")

    return checks.result()


def analyze_mobile(
    markup: str, facts: ContentFacts, url: str = "", soup: BeautifulSoup | None = None
) -> ComponentScore:
    soup = _document(markup, soup)
    checks = _Checks()

    viewport = _viewport_content(soup)
    if viewport is None:
        checks.fail("critical", "Missing viewport meta tag")
    elif "width=device-width" in viewport.replace(" ", "").lower():
        checks.ok(40, "Viewport is set to width=device-width")
    else:
        checks.partial(20, "high", "Viewport meta tag does not set width=device-width")

    images = soup.find_all("img")
    responsive = sum(
        1
        for img in images
        if img.get("srcset") is not None or img.get("sizes") is not None or img.find_parent("picture") is not None
    )
    coverage = _percent(responsive, len(images))
    if not images:
        checks.ok(20, "No images that need responsive variants")
    elif coverage >= 80:
        checks.ok(20, "Images provide responsive variants (srcset/sizes)")
    elif coverage >= 30:
        checks.partial(10, "low", f"Only {responsive} of {len(images)} images use srcset or sizes")
    else:
        checks.fail("medium", "Images do not provide responsive variants (srcset/sizes)")

    problems = []
    if viewport is not None and _ZOOM_DISABLED_PATTERN.search(viewport):
        problems.append("viewport disables pinch zoom")
    for tag in soup.find_all(style=True):
        widths = [int(w) for w in _FIXED_WIDTH_PATTERN.findall(str(tag.get("style")))]
        if any(w > 480 for w in widths):
            problems.append("elements use fixed pixel widths wider than small screens")
            break
    if not problems:
        checks.ok(20, "No touch or zoom blockers found")
    else:
        points = 10 if len(problems) == 1 else 0
        checks.partial(points, "medium", f"Touch usability: {'; '.join(problems)}")

    has_media_query = any("@media" in style.get_text() for style in soup.find_all("style"))
    if not has_media_query:
        has_media_query = any("(" in str(link.get("media") or "") for link in soup.find_all("link"))
    if has_media_query:
        checks.ok(20, "Responsive CSS media queries found")
    else:
        checks.fail("low", "No CSS media queries found in the page; confirm stylesheets are responsive")

    return checks.result()


def analyze_performance(
    markup: str, facts: ContentFacts, url: str = "", soup: BeautifulSoup | None = None
) -> ComponentScore:
    soup = _document(markup, soup)
    checks = _Checks(start=40)

    images = soup.find_all("img")
    lazy = sum(1 for img in images if str(img.get("loading") or "").lower() == "lazy")
    coverage = _percent(lazy, len(images))
    if not images:
        checks.ok(30, "No images to lazy-load")
    elif coverage >= 80:
        checks.ok(30, "Images use lazy loading")
    elif coverage >= 50:
        checks.partial(15, "low", f"Only {lazy} of {len(images)} images use loading=\"lazy\"")
    else:
        checks.fail("medium", "Images are not lazy-loaded; add loading=\"lazy\" below the fold")

    hints = any(
        value in ("dns-prefetch", "preconnect") for link in soup.find_all("link") for value in _rel_values(link)
    )
    if hints:
        checks.ok(15, "Resource hints (dns-prefetch/preconnect) are used")
    else:
        checks.fail("low", "Add dns-prefetch or preconnect hints for third-party origins")

    assets = [asset.split("?", 1)[0].split("#", 1)[0] for asset in _asset_urls(soup)]
    minified = sum(1 for asset in assets if ".min." in asset.lower())
    if not assets:
        checks.ok(15, "No script or stylesheet references to minify")
    elif minified == len(assets):
        checks.ok(15, "Script and stylesheet references are minified")
    elif minified > 0:
        checks.partial(8, "low", f"{len(assets) - minified} of {len(assets)} scripts/stylesheets are not minified")
    else:
        checks.fail("low", "Scripts and stylesheets do not appear to be minified")

    checks.fail("info", "Static checks only; run Lighthouse or PageSpeed Insights for real performance data")
    return checks.result()


def analyze_security(
    markup: str, facts: ContentFacts, url: str = "", soup: BeautifulSoup | None = None
) -> ComponentScore:
    soup = _document(markup, soup)
    checks = _Checks()

    https = _is_https(url)
    if https:
        checks.ok(40, "Page is served over HTTPS")
    else:
        checks.fail("critical", "Page is not served over HTTPS")

    if https:
        insecure = [
            str(tag.get(attr))
            for name, attr in SUBRESOURCE_TAGS.items()
            for tag in soup.find_all(name, attrs={attr: True})
            if str(tag.get(attr)).strip().lower().startswith("http://")
        ]
        insecure.extend(
            str(link.get("href"))
            for link in soup.find_all("link", href=True)
            if str(link.get("href")).strip().lower().startswith("http://")
            and not {"canonical", "alternate"} & set(_rel_values(link))
        )
        if insecure:
            checks.fail("high", f"{len(insecure)} resources are loaded over HTTP (mixed content)")
        else:
            checks.ok(20, "No mixed content found")
    else:
        checks.fail("info", "Mixed content check skipped because the page itself is not served over HTTPS")

    checks.partial(
        5,
        "info",
        "Verify security headers (Content-Security-Policy, Strict-Transport-Security, X-Frame-Options)",
    )

    new_tab_links = [a for a in soup.find_all("a") if str(a.get("target") or "").lower() == "_blank"]
    safe = sum(1 for a in new_tab_links if {"noopener", "noreferrer"} & set(_rel_values(a)))
    coverage = _percent(safe, len(new_tab_links))
    if coverage == 100:
        checks.ok(10, "Links opening new tabs use rel=\"noopener\"")
    elif coverage >= 50:
        checks.partial(5, "low", f"{len(new_tab_links) - safe} links with target=\"_blank\" lack rel=\"noopener\"")
    else:
        checks.fail("medium", "Links with target=\"_blank\" should use rel=\"noopener\"")

    insecure_forms = [
        form for form in soup.find_all("form") if str(form.get("action") or "").strip().lower().startswith("http://")
    ]
    if insecure_forms:
        checks.fail("high", f"{len(insecure_forms)} forms submit over insecure HTTP")
    else:
        checks.ok(10, "Forms do not submit over HTTP")

    return checks.result()


def _is_labelled(field, label_targets: set[str]) -> bool:
    if any(field.get(attr) for attr in ("aria-label", "aria-labelledby")):
        return True
    field_id = str(field.get("id") or "")
    if field_id and field_id in label_targets:
        return True
    return field.find_parent("label") is not None


def analyze_accessibility(
    markup: str, facts: ContentFacts, url: str = "", soup: BeautifulSoup | None = None
) -> ComponentScore:
    soup = _document(markup, soup)
    checks = _Checks()

    with_alt, total_images = _alt_coverage(facts)
    coverage = _percent(with_alt, total_images)
    if total_images == 0 or coverage == 100:
        checks.ok(25, "All images have alt text")
    elif coverage >= 80:
        checks.partial(15, "medium", f"{total_images - with_alt} images are missing alt text")
    else:
        checks.partial(5, "high", f"{total_images - with_alt} of {total_images} images are missing alt text")

    if soup.find(lambda tag: any(attr in tag.attrs for attr in ARIA_ATTRIBUTES)) is not None:
        checks.ok(20, "ARIA labels or descriptions are used")
    else:
        checks.fail("low", "No ARIA labels or descriptions found")

    landmarks = {name for name in LANDMARK_TAGS if soup.find(name) is not None}
    if len(landmarks) >= 2:
        checks.ok(20, f"Semantic landmarks present ({', '.join(sorted(landmarks))})")
    elif landmarks:
        checks.partial(10, "low", "Only one semantic landmark found; use main, nav, header and footer")
    else:
        checks.fail("medium", "No semantic landmark elements (main, nav, header, footer)")

    label_targets = {str(label.get("for")) for label in soup.find_all("label") if label.get("for")}
    fields = [
        field
        for field in soup.find_all(["input", "select", "textarea"])
        if str(field.get("type") or "").lower() not in UNLABELLED_INPUT_TYPES
    ]
    labelled = sum(1 for field in fields if _is_labelled(field, label_targets))
    coverage = _percent(labelled, len(fields))
    if coverage == 100:
        checks.ok(15, "Form fields have labels")
    elif coverage >= 50:
        checks.partial(8, "medium", f"{len(fields) - labelled} form fields are missing labels")
    else:
        checks.fail("high", f"{len(fields) - labelled} of {len(fields)} form fields are missing labels")

    html = soup.find("html")
    if html is not None and str(html.get("lang") or "").strip():
        checks.ok(10, "Document declares its language")
    else:
        checks.fail("medium", "Missing lang attribute on the html element")

    if soup.find(["h1", "h2", "h3", "h4", "h5", "h6"]) is not None:
        checks.ok(10, "Page uses headings")
    else:
        checks.fail("high", "No headings found")

    return checks.result()


ANALYZERS = {
    "meta": analyze_meta_tags,
    "content": analyze_content_quality,
    "technical": analyze_technical_seo,
    "mobile": analyze_mobile,
    "performance": analyze_performance,
    "security": analyze_security,
    "accessibility": analyze_accessibility,
}
