import pytest
from fastapi.testclient import TestClient

import main
from conftest import RICH_PAGE, RICH_URL, FakeProvider
from database import InMemoryAuditRepository
from text_provider import ProviderUnavailableError


@pytest.fixture
def repository():
    return InMemoryAuditRepository()


@pytest.fixture
def provider():
    return FakeProvider(error=ProviderUnavailableError("no key"))


@pytest.fixture
def client(repository, provider):
    main.app.dependency_overrides[main.get_repository] = lambda: repository
    main.app.dependency_overrides[main.get_provider] = lambda: provider
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_create_and_fetch_audit(client):
    response = client.post("/audits", json={"url": RICH_URL, "markup": RICH_PAGE})

    assert response.status_code == 200
    body = response.json()
    assert body["url"] == RICH_URL
    assert body["result"]["grade"] == "A+"
    assert list(body["result"]["scores"]) == [
        "meta",
        "content",
        "technical",
        "mobile",
        "performance",
        "security",
        "accessibility",
    ]

    fetched = client.get(f"/audits/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == body


def test_audit_without_markup_fetches_the_page(client, monkeypatch):
    fetched = []

    def fake_fetch(url):
        fetched.append(url)
        return ""

    monkeypatch.setattr(main, "fetch_markup", fake_fetch)

    response = client.post("/audits", json={"url": "http://example.com"})

    assert response.status_code == 200
    assert fetched == ["http://example.com"]
    assert response.json()["result"]["scores"]["meta"]["score"] == 0


@pytest.mark.parametrize("url", ["ftp://example.com", "example.com", "", "https://"])
def test_fetching_audit_rejects_non_http_urls(client, monkeypatch, url):
    fetched = []
    monkeypatch.setattr(main, "fetch_markup", lambda target: fetched.append(target) or "")

    response = client.post("/audits", json={"url": url})

    assert response.status_code == 400
    assert fetched == []


@pytest.mark.parametrize("url", ["example.com/page", "ftp://example.com", ""])
def test_posted_markup_is_audited_for_any_url(client, url):
    response = client.post("/audits", json={"url": url, "markup": "<title>x</title>"})

    assert response.status_code == 200
    result = response.json()["result"]
    assert result["url"] == url
    critical = [item["message"] for item in result["recommendations"] if item["severity"] == "critical"]
    assert "Page is not served over HTTPS" in critical


def test_missing_audit_is_404(client):
    assert client.get("/audits/999").status_code == 404


def test_audit_history_lists_newest_first(client):
    for path in ("a", "b"):
        client.post("/audits", json={"url": f"https://example.com/{path}", "markup": RICH_PAGE})

    response = client.get("/audits", params={"limit": 5})

    assert response.status_code == 200
    assert [row["url"] for row in response.json()] == ["https://example.com/b", "https://example.com/a"]


def test_meta_tags_single_mode(client):
    response = client.post(
        "/meta-tags",
        json={"title": "Brewing Coffee", "content": "Coffee at home.", "keywords": "coffee, beans"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["meta_title"] == "Brewing Coffee"
    assert body["meta_keywords"] == ["coffee", "beans"]
    assert "title_variations" not in body


def test_meta_tags_variations_mode(client):
    response = client.post(
        "/meta-tags",
        json={"title": "Brewing Coffee", "content": "Coffee at home.", "generate_variations": True},
    )

    assert response.status_code == 200
    body = response.json()
    assert len(body["title_variations"]) >= 3
    assert len(body["description_variations"]) >= 3
    assert body["generated"] is False


def test_meta_variations_without_title_is_400(client):
    response = client.post("/meta-tags", json={"title": "  ", "content": "x", "generate_variations": True})

    assert response.status_code == 400


def test_content_analyze(client):
    response = client.post("/content/analyze", json={"title": "Coffee", "content": "Short body."})

    assert response.status_code == 200
    assert 0 <= response.json()["overall_score"] <= 100


def test_content_optimize(client):
    response = client.post(
        "/content/optimize",
        json={"title": "Brewing Coffee at Home", "content": "Coffee at home is easy.", "keywords": ["coffee"]},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["slug"] == "brewing-coffee-at-home"
    assert body["meta_tags"]["focus_keyword"] == "coffee"


def test_content_optimize_without_title_is_400(client):
    response = client.post("/content/optimize", json={"title": "", "content": "Coffee at home."})

    assert response.status_code == 400


def test_keywords_suggest_falls_back(client):
    response = client.post(
        "/keywords/suggest",
        json={"content": "Grinding coffee beans fresh makes coffee taste better. Grinding matters."},
    )

    assert response.status_code == 200
    assert response.json()["keywords"][:2] == ["grinding", "coffee"]


def test_slug_endpoint(client):
    assert client.post("/slug", json={"title": "Hello World"}).json()["slug"] == "hello-world"
    assert client.post("/slug", json={"title": "   "}).status_code == 400
