# recipebox/services/scraper/engine.py
# 목적: URL → 레시피 후보. 절대 예외를 던지지 않는다 — 항상 scrapeOk 플래그가 붙은 결과.
# 순서: 릴레이 fetch → (1) JSON-LD 구조화 마크업 → (2) DOM 휴리스틱 → (3) URL 기반 뼈대

from __future__ import annotations
import logging
import re
from typing import Optional, Sequence
from urllib.parse import unquote, urlparse

import httpx
from bs4 import BeautifulSoup

from recipebox.core.config import settings
from recipebox.models.categories import category_emoji
from recipebox.models.schemas import RecipeCandidate
from recipebox.services.classifier import classify
from recipebox.services.scraper.heuristic import UNKNOWN_NAME, extract_heuristic
from recipebox.services.scraper.relays import DEFAULT_RELAYS, Relay, fetch_page
from recipebox.services.scraper.structured import extract_structured

log = logging.getLogger(__name__)

def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")

def title_from_url(url: str) -> str:
    """마지막 경로 조각 → 'Best Beef Stew' 같은 제목 (최후의 이름 추정)."""
    try:
        path = urlparse(url or "").path
    except ValueError:
        return ""
    parts = [p for p in unquote(path).split("/") if p]
    slug = parts[-1] if parts else ""
    slug = re.sub(r"\.[a-z]+$", "", slug, flags=re.I)
    words = [w for w in re.split(r"[-_]+", slug) if w]
    return " ".join(w[:1].upper() + w[1:] for w in words).strip()

def skeleton(url: str) -> RecipeCandidate:
    name = title_from_url(url) or UNKNOWN_NAME
    category = classify("", "", name, [])
    return RecipeCandidate(
        name=name,
        category=category,
        emoji=category_emoji(category),
        source=url or "",
        scrapeOk=False,
    )


class RecipeScraper:
    def __init__(
        self,
        relays: Sequence[Relay] = DEFAULT_RELAYS,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.relays = list(relays)
        self.timeout = timeout if timeout is not None else settings.RELAY_TIMEOUT
        self.transport = transport

    def extract(self, html: str, url: str) -> Optional[RecipeCandidate]:
        # 페이지 내용이 있을 때의 추출 단계 (동기)
        soup = _soup(html)
        recipe = extract_structured(soup, url)
        if recipe is not None:
            log.info("[scraper] structured markup hit: %s", recipe.name)
            return recipe
        recipe = extract_heuristic(soup, url)
        if recipe is not None:
            log.info("[scraper] heuristic extraction: %s (%d ingredients)", recipe.name, len(recipe.ingredients))
        return recipe

    async def scrape(self, url: str) -> RecipeCandidate:
        try:
            html = await fetch_page(url, self.relays, timeout=self.timeout, transport=self.transport)
            if html:
                recipe = self.extract(html, url)
                if recipe is not None:
                    return recipe
            else:
                log.warning("[scraper] all relays failed for %s", url)
        except Exception as e:
            # 운영 안전: 스크레이퍼는 어떤 경우에도 초안을 돌려준다
            log.exception("[scraper] unexpected failure for %s: %s", url, e)
        return skeleton(url)


async def scrape(url: str) -> RecipeCandidate:
    return await RecipeScraper().scrape(url)

__all__ = ["RecipeScraper", "scrape", "skeleton", "title_from_url"]
