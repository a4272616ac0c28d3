import pytest

import content_optimizer
from conftest import FakeProvider
from content_optimizer import (
    analyze_body,
    analyze_content,
    analyze_excerpt,
    analyze_keyword_usage,
    analyze_title,
    calculate_seo_score,
    generate_recommendations,
    generate_slug,
    optimize_content,
    suggest_keywords,
)
from keywords import clean_keywords, count_occurrences, extract_top_words
from meta_variations import plain_text
from text_provider import ProviderUnavailableError

LONG_ARTICLE = "\n\n".join(
    ["## Choosing beans", "- fresh roast\n- whole beans"]
    + ["Grinding coffee right before brewing keeps the flavour bright and balanced for longer."] * 30
)


@pytest.mark.parametrize(
    "title, slug",
    [
        ("10 Tips for Better Sleep!", "10-tips-for-better-sleep"),
        ("  Hello   World  ", "hello-world"),
        ("Rock & Roll -- History", "rock-roll-history"),
    ],
)
def test_generate_slug(title, slug):
    result = generate_slug(title)

    assert result["slug"] == slug
    assert result["length"] == len(slug)
    assert result["is_optimal"] is True


def test_generate_slug_caps_length():
    result = generate_slug("word " * 60)

    assert result["length"] <= 100
    assert not result["slug"].endswith("-")
    assert result["is_optimal"] is False


@pytest.mark.parametrize("title", ["", "   ", None])
def test_generate_slug_requires_title(title):
    with pytest.raises(ValueError, match="Title is required"):
        generate_slug(title)


def test_analyze_title_rewards_numbers_and_power_words():
    plain = analyze_title("A short note")
    rich = analyze_title("The 7 Best Ways to Grind Coffee at Home")

    assert plain["score"] == 0.5
    assert rich["score"] == 1.0
    assert rich["has_numbers"] and rich["has_power_words"]


def test_analyze_body_detects_structure():
    body = analyze_body(LONG_ARTICLE)

    assert body["word_count"] >= 300
    assert body["has_headings"] is True
    assert body["has_lists"] is True
    assert body["score"] == 1.0


def test_analyze_excerpt_tiers():
    assert analyze_excerpt("")["score"] == 0.0
    assert analyze_excerpt("too short")["score"] == 0.5
    assert analyze_excerpt("x" * 140)["score"] == 1.0


def test_keyword_usage_counts_whole_phrases():
    usage = analyze_keyword_usage("Coffee beans and more coffee. Coffeehouse.", ["coffee"])

    assert usage["keywords"][0]["occurrences"] == 2


def test_analyze_content_uses_hundred_point_scale():
    analysis = analyze_content("The 7 Best Ways to Grind Coffee at Home", LONG_ARTICLE, "x" * 140, ["coffee"])

    assert 0 <= analysis["overall_score"] <= 100
    assert isinstance(analysis["overall_score"], int)
    assert analysis["grade"] in {"A+", "A", "B", "C", "D", "F"}


def test_empty_article_gets_recommendations():
    analysis = analyze_content("", "", "", [])
    categories = {item["category"] for item in generate_recommendations(analysis)}

    assert categories == {"title", "content", "excerpt", "keywords"}


def test_suggest_keywords_falls_back_to_top_words():
    provider = FakeProvider(error=ProviderUnavailableError("no key"))

    result = suggest_keywords("Coffee", LONG_ARTICLE, provider=provider)

    assert result["keywords"] == extract_top_words(plain_text(LONG_ARTICLE), 5)
    assert result["long_tail_keywords"] == []


def test_suggest_keywords_uses_provider_json():
    provider = FakeProvider(
        {"keywords": ["coffee", "Coffee", "grinder"], "longTailKeywords": ["best burr grinder"], "relatedTopics": ["espresso"]}
    )

    result = suggest_keywords("Coffee", LONG_ARTICLE, "Food", provider)

    assert result == {
        "keywords": ["coffee", "grinder"],
        "long_tail_keywords": ["best burr grinder"],
        "related_topics": ["espresso"],
    }
    assert "Category: Food" in provider.prompts[0]


def test_suggest_keywords_skips_provider_for_empty_content():
    provider = FakeProvider({"keywords": ["never"]})

    assert suggest_keywords("Title", "", provider=provider)["keywords"] == []
    assert provider.prompts == []


def test_calculate_seo_score_adds_meta_tag_bonus():
    analysis = {"overall_score": 100}
    tags = {"meta_title": "t" * 55, "meta_description": "d" * 155, "meta_keywords": ["a", "b", "c"]}

    assert calculate_seo_score(analysis, tags) == 100
    assert calculate_seo_score({"overall_score": 50}, {**tags, "meta_keywords": []}) == 55


def test_optimize_content_bundle_with_unavailable_provider():
    provider = FakeProvider(error=ProviderUnavailableError("no key"))

    result = optimize_content("The 7 Best Ways to Grind Coffee", LONG_ARTICLE, keywords=["coffee"], provider=provider)

    assert result["slug"] == "the-7-best-ways-to-grind-coffee"
    assert result["meta_tags"]["meta_title"] == "The 7 Best Ways to Grind Coffee"
    assert result["suggested_keywords"][0] == "coffee"
    assert len(result["suggested_keywords"]) > 1
    assert 0 <= result["seo_score"] <= 100
    assert result["grade"] in {"A+", "A", "B", "C", "D", "F"}


@pytest.mark.parametrize("title", ["", "   ", None])
def test_optimize_content_rejects_missing_title_before_calling_provider(title, monkeypatch):
    provider = FakeProvider({"metaTitle": "never used", "keywords": ["never"]})
    analysed = []
    monkeypatch.setattr(content_optimizer, "analyze_content", lambda *args: analysed.append(args))

    with pytest.raises(ValueError, match="Title is required"):
        optimize_content(title, LONG_ARTICLE, provider=provider)

    assert provider.prompts == []
    assert analysed == []


def test_clean_keywords_dedupes_case_insensitively():
    assert clean_keywords(["Coffee", " coffee ", "", "Tea"]) == ["Coffee", "Tea"]
    assert clean_keywords("a, b,,A") == ["a", "b"]
    assert clean_keywords(None) == []


def test_count_occurrences_matches_whole_words():
    assert count_occurrences("cat category cat. CAT", "cat") == 3
    assert count_occurrences("anything", "  ") == 0


def test_extract_top_words_skips_short_and_stop_words():
    text = "their coffee coffee grinder grinder grinder the 12345 beans"

    assert extract_top_words(text, 2) == ["grinder", "coffee"]
