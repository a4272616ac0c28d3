import json
from datetime import datetime, timezone

import pytest

from text_provider import TextGenerationProvider

PARAGRAPH = "Feed the starter in the morning and mix the dough once it has doubled in size."

RICH_PAGE = f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Complete Guide to Sourdough Bread Baking at Home</title>
  <meta name="description" content="Learn how to bake sourdough bread at home with a simple starter, a reliable schedule and tips for a crisp crust and an open crumb every time.">
  <meta name="keywords" content="sourdough, bread, starter">
  <meta property="og:title" content="Complete Guide to Sourdough Bread Baking">
  <meta property="og:description" content="Bake sourdough bread at home.">
  <meta property="og:image" content="https://example.com/img/loaf.jpg">
  <link rel="canonical" href="https://example.com/guides/sourdough">
  <link rel="preconnect" href="https://cdn.example.com">
  <link rel="stylesheet" href="/css/site.min.css">
  <style>@media (max-width: 600px) {{ body {{ font-size: 16px; }} }}</style>
  <script type="application/ld+json">{{"@context": "https://schema.org", "@type": "Recipe", "name": "Sourdough"}}</script>
  <script src="https://cdn.example.com/app.min.js"></script>
</head>
<body>
  <header><nav aria-label="Main"><a href="/recipes">Recipes</a> <a href="/starter">Starter</a> <a href="/flour">Flour</a></nav></header>
  <main>
    <h1>Sourdough Bread Baking</h1>
    <img src="/img/loaf.jpg" alt="A sourdough loaf" srcset="/img/loaf-2x.jpg 2x" loading="lazy">
    <h2>Building a starter</h2>
    <p>{" ".join([PARAGRAPH] * 12)}</p>
    <h2>Shaping the loaf</h2>
    <ul><li>Flour</li><li>Water</li><li>Salt</li></ul>
    <p>{" ".join([PARAGRAPH] * 12)}</p>
    <h2>Baking</h2>
    <p>{" ".join([PARAGRAPH] * 6)}</p>
    <a href="https://other.example.org/tools" target="_blank" rel="noopener">Tools</a>
    <form action="https://example.com/subscribe" method="post">
      <label for="email">Email</label>
      <input type="email" id="email" name="email">
      <input type="submit" value="Subscribe">
    </form>
  </main>
  <footer><p>Made at home</p></footer>
</body>
</html>
"""

RICH_URL = "https://example.com/guides/sourdough"

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeProvider(TextGenerationProvider):
    """Records prompts and returns a canned response or raises a canned error."""

    name = "fake"

    def __init__(self, response=None, error: Exception | None = None) -> None:
        if isinstance(response, (dict, list)):
            response = json.dumps(response)
        self.response = response
        self.error = error
        self.prompts: list[str] = []

    def generate(self, prompt: str, max_tokens: int = 300, temperature: float = 0.7) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def rich_page() -> str:
    return RICH_PAGE


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
