# recipebox/services/scraper/structured.py
# 목적: schema.org/Recipe JSON-LD 블록 → 표준 레시피 모양
# 의존: beautifulsoup4 (스크립트 블록 탐색)
# 주의: 사이트마다 값 모양이 제각각(문자열/배열/객체/@value 래퍼) — 여기서 전부 평탄화한다

from __future__ import annotations
import html
import json
import logging
import re
from typing import Any, Dict, Iterable, List, Literal, Optional, Union

from bs4 import BeautifulSoup
from pydantic import BaseModel

from recipebox.models.categories import category_emoji
from recipebox.models.schemas import DEFAULT_SERVINGS, MAX_TAGS, RecipeCandidate, normalize_tags
from recipebox.services.classifier import classify

log = logging.getLogger(__name__)

LD_JSON_RE = re.compile(r"application/ld\+json", re.I)
TAG_RE = re.compile(r"<[^>]+>")
DURATION_RE = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?")
NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")
INT_RE = re.compile(r"\d+")
MAX_KEYWORD_LEN = 25

# 표준 키 → 사이트가 쓰는 동의어 (앞쪽이 우선)
NUTRITION_KEYS: Dict[str, List[str]] = {
    "calories": ["calories"],
    "fat": ["fatContent", "totalFat"],
    "saturatedFat": ["saturatedFatContent", "saturatedFat"],
    "carbs": ["carbohydrateContent", "totalCarbohydrate"],
    "fiber": ["fiberContent", "dietaryFiber"],
    "sugar": ["sugarContent", "sugars"],
    "protein": ["proteinContent", "protein"],
    "sodium": ["sodiumContent", "sodium"],
}

# ---------------------------------------------------------------------
# 값 정리 헬퍼
# ---------------------------------------------------------------------
def to_list(v: Any) -> List[Any]:
    if v is None or v == "":
        return []
    return list(v) if isinstance(v, (list, tuple)) else [v]

def text_of(v: Any) -> str:
    """문자열/@value 래퍼/숫자 → 태그 없는 평문."""
    if v is None or v is False:
        return ""
    if isinstance(v, dict):
        v = v.get("@value", "")
    if isinstance(v, (list, tuple)):
        return ", ".join(t for t in (text_of(x) for x in v) if t)
    s = TAG_RE.sub("", str(v))
    return re.sub(r"\s+", " ", html.unescape(s)).strip()

def first_number(v: Any) -> int:
    m = NUMBER_RE.search(text_of(v))
    return round(float(m.group(0))) if m else 0

# ---------------------------------------------------------------------
# 조리 단계: 문자열 | HowToStep | HowToSection(중첩) 를 태그드 유니온으로 모델링
# ---------------------------------------------------------------------
class PlainStep(BaseModel):
    kind: Literal["plain"] = "plain"
    text: str

class StructuredStep(BaseModel):
    kind: Literal["step"] = "step"
    text: str

class StepSection(BaseModel):
    kind: Literal["section"] = "section"
    name: str = ""
    steps: List[Union[PlainStep, StructuredStep, "StepSection"]]

StepSection.model_rebuild()

InstructionNode = Union[PlainStep, StructuredStep, StepSection]

def parse_instruction(raw: Any) -> Optional[InstructionNode]:
    if isinstance(raw, str):
        return PlainStep(text=text_of(raw))
    if isinstance(raw, dict):
        if "itemListElement" in raw:
            children = [parse_instruction(x) for x in to_list(raw.get("itemListElement"))]
            return StepSection(name=text_of(raw.get("name")), steps=[c for c in children if c])
        return StructuredStep(text=text_of(raw.get("text") or raw.get("name") or ""))
    if isinstance(raw, list):
        children = [parse_instruction(x) for x in raw]
        return StepSection(steps=[c for c in children if c])
    return None

def flatten_steps(nodes: Iterable[InstructionNode]) -> List[str]:
    # 문서 순서 유지, 빈 항목 제거
    out: List[str] = []
    for node in nodes:
        if isinstance(node, StepSection):
            out.extend(flatten_steps(node.steps))
        elif node.text:
            out.append(node.text)
    return out

def parse_instructions(raw: Any) -> List[str]:
    nodes = [parse_instruction(x) for x in to_list(raw)]
    return flatten_steps(n for n in nodes if n)

# ---------------------------------------------------------------------
# 필드별 파서
# ---------------------------------------------------------------------
def parse_nutrition(raw: Any) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        return {}
    out: Dict[str, Any] = {}
    for key, aliases in NUTRITION_KEYS.items():
        for alias in aliases:
            val = text_of(raw.get(alias))
            if val:
                out[key] = val
                break
    if "calories" in out:
        out["calories"] = first_number(out["calories"])
    return out

def parse_duration(raw: Any) -> str:
    """PT1H30M → '1h 30 min', PT45M → '45 min', PT2H → '2 hr'. 그 외는 원문 그대로."""
    if not raw:
        return ""
    s = str(raw)
    m = DURATION_RE.search(s)
    if not m:
        return s
    h = int(m.group(1) or 0)
    mins = int(m.group(2) or 0)
    if h and mins:
        return f"{h}h {mins} min"
    if h:
        return f"{h} hr"
    if mins:
        return f"{mins} min"
    return s

def parse_servings(raw: Any) -> int:
    s = " ".join(text_of(x) for x in to_list(raw))
    m = INT_RE.search(s)
    n = int(m.group(0)) if m else 0
    return n if n > 0 else DEFAULT_SERVINGS

def parse_image(raw: Any) -> str:
    for item in to_list(raw):
        if isinstance(item, str) and item.strip():
            return item.strip()
        if isinstance(item, dict):
            url = item.get("url") or item.get("contentUrl")
            if isinstance(url, str) and url.strip():
                return url.strip()
    return ""

def parse_tags(keywords: Any, category: Any, cuisine: Any) -> List[str]:
    tags: List[str] = []
    kws = keywords if isinstance(keywords, list) else text_of(keywords).split(",")
    for k in kws:
        k = text_of(k).lower()
        if k and len(k) < MAX_KEYWORD_LEN:
            tags.append(k)
    for extra in to_list(category) + to_list(cuisine):
        t = text_of(extra).lower()
        if t:
            tags.append(t)
    return normalize_tags(tags, MAX_TAGS)

# ---------------------------------------------------------------------
# JSON-LD 블록 찾기
# ---------------------------------------------------------------------
def is_recipe(node: Any) -> bool:
    # @type 은 "Recipe" 외에 ["Recipe","NewsArticle"] 같은 복합형도 있다
    if not isinstance(node, dict):
        return False
    return any("recipe" in str(t).lower() for t in to_list(node.get("@type")))

def _nodes(parsed: Any) -> List[Any]:
    if isinstance(parsed, list):
        out: List[Any] = []
        for item in parsed:
            out.extend(_nodes(item))
        return out
    if isinstance(parsed, dict) and "@graph" in parsed:
        return to_list(parsed["@graph"])
    return [parsed]

def find_recipe_node(soup: BeautifulSoup) -> Optional[Dict[str, Any]]:
    """문서의 모든 ld+json 블록 중 첫 번째 Recipe 노드. 깨진 블록은 건너뛴다."""
    for script in soup.find_all("script", attrs={"type": LD_JSON_RE}):
        raw = script.string or script.get_text() or ""
        try:
            parsed = json.loads(raw.strip())
        except ValueError as e:
            log.debug("[scraper] skip malformed ld+json block: %s", e)
            continue
        for node in _nodes(parsed):
            if is_recipe(node):
                return node
    return None

# ---------------------------------------------------------------------
# 정규화
# ---------------------------------------------------------------------
def normalize_recipe_node(data: Dict[str, Any], source_url: str) -> RecipeCandidate:
    name = text_of(data.get("name"))
    ingredients = [
        t for t in (text_of(i) for i in to_list(data.get("recipeIngredient") or data.get("ingredients"))) if t
    ]
    steps = parse_instructions(data.get("recipeInstructions"))

    nutrition = parse_nutrition(data.get("nutrition"))
    calories = nutrition.get("calories") or first_number(data.get("calories"))
    nutrition["calories"] = calories

    category = classify(
        text_of(data.get("recipeCategory")),
        text_of(data.get("recipeCuisine")),
        name,
        ingredients,
    )

    return RecipeCandidate(
        name=name,
        description=text_of(data.get("description")),
        category=category,
        emoji=category_emoji(category),
        calories=calories,
        servings=parse_servings(data.get("recipeYield") or data.get("yield")),
        prepTime=parse_duration(data.get("prepTime")),
        cookTime=parse_duration(data.get("cookTime")),
        totalTime=parse_duration(data.get("totalTime")),
        source=source_url,
        thumbnail=parse_image(data.get("image")),
        ingredients=ingredients,
        steps=steps,
        nutrition=nutrition,
        tags=parse_tags(data.get("keywords"), data.get("recipeCategory"), data.get("recipeCuisine")),
        notes="",
    )

def extract_structured(soup: BeautifulSoup, source_url: str) -> Optional[RecipeCandidate]:
    """이름 + (재료 또는 단계)가 있어야 성공으로 인정."""
    node = find_recipe_node(soup)
    if node is None:
        return None
    recipe = normalize_recipe_node(node, source_url)
    if recipe.name and (recipe.ingredients or recipe.steps):
        recipe.scrapeOk = True
        return recipe
    return None
