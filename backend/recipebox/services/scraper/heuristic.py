# recipebox/services/scraper/heuristic.py
# 목적: 구조화 마크업이 없는 페이지용 DOM 휴리스틱 추출
# 확장: 셀렉터는 운영 중 실패 로그 보고 점진 보정

from __future__ import annotations
import re
from typing import List, Optional

from bs4 import BeautifulSoup

from recipebox.models.categories import category_emoji
from recipebox.models.schemas import RecipeCandidate
from recipebox.services.classifier import classify

UNKNOWN_NAME = "Unknown Recipe"

# 재료: class/data 속성 이름에 ingredient 포함, 또는 microdata
INGREDIENT_SELECTORS = [
    "[class*='ingredient']",
    "[itemprop='recipeIngredient']",
    "[itemprop='ingredients']",
    "[data-ingredient]",
    "li.ingredient",
]

# 단계: instruction/step/direction 계열 컨테이너 안의 li, 또는 microdata
STEP_SELECTORS = [
    "[class*='instruction'] li",
    "[class*='step'] li",
    "[class*='direction'] li",
    "[itemprop='recipeInstructions'] li",
]

def _clean(t: str) -> str:
    return re.sub(r"\s+", " ", (t or "").strip())

def meta_content(soup: BeautifulSoup, name: str) -> str:
    el = soup.select_one(f"meta[property='{name}']") or soup.select_one(f"meta[name='{name}']")
    return _clean(el.get("content") or "") if el else ""

def _leaf_texts(soup: BeautifulSoup, selectors: List[str]) -> List[str]:
    # 바깥 컨테이너(.ingredients)와 안쪽 항목(.ingredient)이 함께 걸리면 안쪽만 남긴다
    # 같은 문구가 두 번 나와도(케이크/프로스팅의 "1 tsp salt") 각각 별개 항목
    matched = {id(el) for sel in selectors for el in soup.select(sel)}
    out: List[str] = []
    if not matched:
        return out
    for el in soup.find_all(True):  # 문서 순서
        if id(el) not in matched:
            continue
        if any(id(d) in matched for d in el.find_all(True)):
            continue
        t = _clean(el.get_text(" ", strip=True))
        if t:
            out.append(t)
    return out

def extract_name(soup: BeautifulSoup) -> str:
    name = meta_content(soup, "og:title")
    if not name:
        h1 = soup.find("h1")
        name = _clean(h1.get_text(" ", strip=True)) if h1 else ""
    return name or UNKNOWN_NAME

def extract_heuristic(soup: BeautifulSoup, source_url: str) -> Optional[RecipeCandidate]:
    """이름 또는 재료가 하나라도 있으면 성공."""
    name = extract_name(soup)
    description = meta_content(soup, "og:description") or meta_content(soup, "description")
    image = meta_content(soup, "og:image")
    ingredients = _leaf_texts(soup, INGREDIENT_SELECTORS)
    steps = _leaf_texts(soup, STEP_SELECTORS)

    if not name and not ingredients:
        return None

    category = classify("", "", name, ingredients)
    return RecipeCandidate(
        name=name,
        description=description,
        category=category,
        emoji=category_emoji(category),
        source=source_url,
        thumbnail=image,
        ingredients=ingredients,
        steps=steps,
        scrapeOk=True,
    )
