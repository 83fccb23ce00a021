# recipebox/models/schemas.py
# 레시피 문서 스키마 — JSON 문서에 저장되는 필드명(camelCase) 그대로 사용
# Recipe: 저장 레코드 / RecipeCandidate: 스크레이퍼 결과(미저장 초안)
# ManualRecipeIn: 수동 입력 폼 → Recipe 변환 (빈 이름은 여기서 거부)

from __future__ import annotations
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from recipebox.models.categories import DEFAULT_CATEGORY, category_emoji

MAX_TAGS = 6
MAX_RATERS = 2
RATING_MIN, RATING_MAX = 0, 10
DEFAULT_SERVINGS = 4

# 공통 유틸
def _as_list(v: Any) -> List[Any]:
    if v is None:
        return []
    if isinstance(v, (list, tuple)):
        return list(v)
    return [v]

def normalize_tags(v: Any, limit: int = MAX_TAGS) -> List[str]:
    # 소문자 + 중복 제거(순서 보존) + 개수 제한
    out: List[str] = []
    for t in _as_list(v):
        s = str(t or "").strip().lower()
        if s and s not in out:
            out.append(s)
    return out[:limit]

def clamp_rating(v: Any) -> Optional[int]:
    if v is None or v == "":
        return None
    # pydantic 은 ValueError 만 검증 오류로 바꾼다 (리스트/딕트의 TypeError 도 여기서 변환)
    try:
        n = int(v)
    except (TypeError, ValueError):
        raise ValueError(f"rating must be an integer 0-{RATING_MAX}, got {v!r}")
    return max(RATING_MIN, min(RATING_MAX, n))

def _first_number(v: Any) -> Optional[int]:
    m = re.search(r"\d+(?:\.\d+)?", str(v or ""))
    return round(float(m.group(0))) if m else None


class Recipe(BaseModel):
    # 모르는 필드는 버리지 않고 그대로 왕복시킨다
    model_config = ConfigDict(extra="allow")

    id: str = ""
    name: str = ""
    category: str = DEFAULT_CATEGORY
    emoji: str = ""
    calories: int = 0                      # 1인분 기준, 0 = 모름
    servings: int = DEFAULT_SERVINGS
    prepTime: str = ""
    cookTime: str = ""
    totalTime: str = ""
    source: str = ""
    thumbnail: str = ""
    description: str = ""
    ingredients: List[str] = Field(default_factory=list)   # "" 원소 = 구분선 (지우지 않음)
    steps: List[str] = Field(default_factory=list)
    nutrition: Dict[str, Any] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)
    ratings: Dict[str, Optional[int]] = Field(default_factory=dict)
    notes: str = ""
    dateAdded: str = ""
    lastModified: str = ""

    @field_validator(
        "id", "name", "category", "emoji", "prepTime", "cookTime", "totalTime",
        "source", "thumbnail", "description", "notes", "dateAdded", "lastModified",
        mode="before",
    )
    @classmethod
    def _v_text(cls, v):
        return "" if v is None else str(v)

    @field_validator("category", mode="after")
    @classmethod
    def _v_category(cls, v):
        return v or DEFAULT_CATEGORY

    @field_validator("calories", mode="before")
    @classmethod
    def _v_calories(cls, v):
        if v is None or v == "":
            return 0
        if isinstance(v, str):
            v = _first_number(v) or 0
        return max(0, int(v))

    @field_validator("servings", mode="before")
    @classmethod
    def _v_servings(cls, v):
        if isinstance(v, str):
            v = _first_number(v)
        try:
            n = int(v)
        except (TypeError, ValueError):
            return DEFAULT_SERVINGS
        return n if n > 0 else DEFAULT_SERVINGS

    @field_validator("ingredients", mode="before")
    @classmethod
    def _v_ingredients(cls, v):
        return ["" if x is None else str(x) for x in _as_list(v)]

    @field_validator("steps", mode="before")
    @classmethod
    def _v_steps(cls, v):
        return [str(x).strip() for x in _as_list(v) if x is not None and str(x).strip()]

    @field_validator("nutrition", mode="before")
    @classmethod
    def _v_nutrition(cls, v):
        return dict(v) if isinstance(v, dict) else {}

    @field_validator("tags", mode="before")
    @classmethod
    def _v_tags(cls, v):
        if isinstance(v, str):
            v = v.split(",")
        return normalize_tags(v)

    @field_validator("ratings", mode="before")
    @classmethod
    def _v_ratings(cls, v):
        if not v:
            return {}
        if not isinstance(v, dict):
            raise ValueError("ratings must be a mapping")
        if len(v) > MAX_RATERS:
            raise ValueError(f"at most {MAX_RATERS} ratings allowed")
        return {str(k): clamp_rating(x) for k, x in v.items()}

    @model_validator(mode="after")
    def _sync_calories(self):
        # 최상위 calories 가 기준값. 0 이면 nutrition 쪽 값을 끌어오고,
        # nutrition 이 비어있지 않으면 그 calories 를 최상위 값으로 맞춘다
        if not self.calories and "calories" in self.nutrition:
            self.calories = _first_number(self.nutrition.get("calories")) or 0
        if self.nutrition:
            self.nutrition["calories"] = self.calories
        return self


def is_link_out(recipe: Recipe) -> bool:
    """재료/단계 없이 출처만 있는 '북마크형' 레시피인지 (저장 필드가 아님)"""
    return not recipe.ingredients and not recipe.steps and bool(recipe.source)

# 읽기 응답에만 붙는 파생 필드 — 클라이언트가 되돌려 보내도 저장하지 않는다
DERIVED_FIELDS = ("linkOut",)

def strip_derived(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k not in DERIVED_FIELDS}


class CollectionDocument(BaseModel):
    version: str = "1.0"
    recipes: List[Recipe] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def _v_version(cls, v):
        return "1.0" if v is None else str(v)

    @field_validator("recipes", mode="before")
    @classmethod
    def _v_recipes(cls, v):
        return _as_list(v)


class RecipeCandidate(Recipe):
    # 스크레이퍼 결과. scrapeOk=False 면 URL에서 이름만 추정한 뼈대
    scrapeOk: bool = False

    def to_recipe(self) -> Recipe:
        data = self.model_dump(exclude={"scrapeOk"})
        return Recipe.model_validate(data)


class MutationResult(BaseModel):
    # 로컬 반영은 항상 성공. 원격 동기화 결과만 따로 표시
    recipe: Optional[Recipe] = None
    syncOk: bool
    syncError: Optional[str] = None


class ImportResult(BaseModel):
    success: bool
    count: int = 0
    error: Optional[str] = None


class StoreStats(BaseModel):
    total: int
    categories: int
    withNotes: int
    catCounts: Dict[str, int] = Field(default_factory=dict)


class SyncSettings(BaseModel):
    githubToken: str = ""
    githubOwner: str = ""
    githubRepo: str = ""
    githubBranch: str = "main"

    @property
    def configured(self) -> bool:
        return bool(self.githubToken and self.githubOwner and self.githubRepo)

    def masked(self) -> Dict[str, str]:
        d = self.model_dump()
        if d["githubToken"]:
            d["githubToken"] = d["githubToken"][:4] + "…"
        return d


# ---------------------------------------------------------------------
# 수동 입력 폼
# ---------------------------------------------------------------------
_STEP_SPLIT_RE = re.compile(r"\n{2,}|\n(?=\d+[.)]\s)")
_STEP_NUM_RE = re.compile(r"^\d+[.)]\s*")

def split_ingredient_lines(text: str) -> List[str]:
    # 앞뒤 빈 줄만 걷어내고, 중간 빈 줄은 구분선("")으로 남긴다
    lines = [s.strip() for s in (text or "").strip().splitlines()]
    out: List[str] = []
    for s in lines:
        if not s and out and out[-1] == "":
            continue
        out.append(s)
    return out

def split_step_text(text: str) -> List[str]:
    text = (text or "").strip()
    if not text:
        return []
    parts = [_STEP_NUM_RE.sub("", p).strip() for p in _STEP_SPLIT_RE.split(text)]
    return [p for p in parts if p]


class ManualRecipeIn(BaseModel):
    name: str
    category: str = DEFAULT_CATEGORY
    calories: int = 0
    servings: int = DEFAULT_SERVINGS
    prepTime: str = ""
    cookTime: str = ""
    emoji: str = ""
    source: str = ""
    notes: str = ""
    ingredients: str = ""      # 한 줄에 재료 하나
    steps: str = ""            # 빈 줄 또는 "1." 번호로 구분
    tags: str = ""             # 쉼표 구분
    nutrition: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("name", mode="after")
    @classmethod
    def _v_name(cls, v):
        v = (v or "").strip()
        if not v:
            raise ValueError("Recipe name is required")
        return v

    def to_recipe(self) -> Recipe:
        category = self.category or DEFAULT_CATEGORY
        return Recipe(
            name=self.name,
            category=category,
            calories=self.calories,
            servings=self.servings,
            prepTime=self.prepTime.strip(),
            cookTime=self.cookTime.strip(),
            emoji=self.emoji.strip() or category_emoji(category),
            source=self.source.strip(),
            notes=self.notes.strip(),
            ingredients=split_ingredient_lines(self.ingredients),
            steps=split_step_text(self.steps),
            tags=[t for t in self.tags.split(",") if t.strip()],
            nutrition=self.nutrition,
        )
