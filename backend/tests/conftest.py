"""
공용 픽스처 — 네트워크 없이 httpx.MockTransport 로 릴레이/GitHub API 를 흉내낸다
"""
import base64
import json

import httpx
import pytest

from recipebox.db.github_sync import GitHubContentStore
from recipebox.db.snapshot import LocalSnapshot
from recipebox.db.store import RecipeStore
from recipebox.models.schemas import SyncSettings

PADDING = "<!-- " + "x" * 600 + " -->"

JSONLD_PAGE = """<!doctype html>
<html><head>
<title>Beef Stew</title>
<script type="application/ld+json">{ this is not json }</script>
<script type="application/ld+json">
{"@context": "https://schema.org", "@graph": [
  {"@type": "WebSite", "name": "Cooking Site"},
  {"@type": ["Recipe", "NewsArticle"],
   "name": "Classic Beef Stew",
   "description": "A <b>hearty</b> stew",
   "image": [{"url": "https://img.example.com/stew.jpg"}],
   "recipeYield": ["6 servings", "6"],
   "prepTime": "PT20M",
   "cookTime": "PT1H30M",
   "totalTime": "PT2H",
   "recipeCategory": "Dinner",
   "recipeCuisine": "American",
   "keywords": "Stew, Beef, Comfort Food",
   "recipeIngredient": ["2 lb beef chuck", "3 carrots", "1 onion"],
   "nutrition": {"@type": "NutritionInformation", "calories": "420 kcal", "totalFat": "18 g", "proteinContent": "35 g"},
   "recipeInstructions": [
     {"@type": "HowToSection", "name": "Prep", "itemListElement": [
       {"@type": "HowToStep", "text": "Cube the beef."},
       {"@type": "HowToStep", "text": ""}
     ]},
     {"@type": "HowToStep", "text": "Brown the beef."},
     "Simmer for 90 minutes."
   ]}
]}
</script>
</head><body><h1>Classic Beef Stew</h1>""" + PADDING + "</body></html>"

HEURISTIC_PAGE = """<!doctype html>
<html><head>
<meta property="og:title" content="Grandma's Chicken Tacos">
<meta name="description" content="Weeknight tacos">
<meta property="og:image" content="https://img.example.com/tacos.jpg">
</head><body>
<h1>Something else</h1>
<div class="recipe-ingredients">
  <ul>
    <li class="ingredient">1 lb chicken thighs</li>
    <li class="ingredient">8 corn tortillas</li>
    <li class="ingredient">1 cup salsa</li>
  </ul>
</div>
<div class="recipe-instructions"><ol>
  <li>Cook the chicken.</li>
  <li>Warm the tortillas.</li>
</ol></div>
""" + PADDING + "</body></html>"


def html_response(text: str, status: int = 200) -> httpx.Response:
    return httpx.Response(status, text=text, headers={"content-type": "text/html"})


@pytest.fixture
def snapshot(tmp_path):
    return LocalSnapshot(tmp_path / "data")


class FakeGitHub:
    """GitHub Contents API 흉내 — 파일 하나(sha 로 버전 관리)"""

    def __init__(self, doc=None, fail_put: int = 0, fail_get: int = 0):
        self.doc = doc
        self.sha = "sha-0" if doc is not None else None
        self.fail_put = fail_put
        self.fail_get = fail_get
        self.puts = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            if self.fail_get:
                return httpx.Response(self.fail_get, json={"message": "boom"})
            if self.doc is None:
                return httpx.Response(404, json={"message": "Not Found"})
            raw = json.dumps(self.doc).encode("utf-8")
            b64 = base64.b64encode(raw).decode("ascii")
            # API 처럼 60자마다 줄바꿈
            b64 = "\n".join(b64[i:i + 60] for i in range(0, len(b64), 60))
            return httpx.Response(200, json={"content": b64, "sha": self.sha})
        if request.method == "PUT":
            body = json.loads(request.content)
            self.puts.append(body)
            if self.fail_put:
                return httpx.Response(self.fail_put, text='{"message": "sha mismatch"}')
            self.doc = json.loads(base64.b64decode(body["content"]).decode("utf-8"))
            self.sha = f"sha-{len(self.puts)}"
            return httpx.Response(200, json={"content": {"sha": self.sha}})
        return httpx.Response(405)


CONFIGURED = SyncSettings(githubToken="tok", githubOwner="me", githubRepo="recipes", githubBranch="main")


def make_remote(fake: FakeGitHub, settings: SyncSettings = CONFIGURED) -> GitHubContentStore:
    return GitHubContentStore(lambda: settings, transport=httpx.MockTransport(fake.handler))


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
async def store(snapshot, fake_github):
    s = RecipeStore(snapshot, make_remote(fake_github))
    await s.initialize()
    yield s
    await s.close()
