# recipebox/models/categories.py
# 카테고리 분류표 — 키 → 표시 라벨/이모지/색상 (순수 데이터)
# 딕셔너리 순서 = 화면 그룹핑 순서
from typing import Dict

CATEGORIES: Dict[str, Dict[str, str]] = {
    "soups":      {"label": "Soups & Stews",      "emoji": "🍜", "color": "#FF6B6B"},
    "pasta":      {"label": "Pasta & Noodles",    "emoji": "🍝", "color": "#FFA94D"},
    "salads":     {"label": "Salads",             "emoji": "🥗", "color": "#51CF66"},
    "meat":       {"label": "Meat & Poultry",     "emoji": "🍖", "color": "#E64980"},
    "seafood":    {"label": "Seafood",            "emoji": "🐟", "color": "#339AF0"},
    "vegetables": {"label": "Vegetables & Sides", "emoji": "🥦", "color": "#40C057"},
    "casseroles": {"label": "Casseroles & Bakes", "emoji": "🥘", "color": "#CC5DE8"},
    "mexican":    {"label": "Mexican & Tex-Mex",  "emoji": "🌮", "color": "#FF6B35"},
    "asian":      {"label": "Asian Cuisine",      "emoji": "🍱", "color": "#F03E3E"},
    "breakfast":  {"label": "Breakfast & Brunch", "emoji": "🥐", "color": "#F59F00"},
    "pizza":      {"label": "Pizza & Flatbreads", "emoji": "🍕", "color": "#D9480F"},
    "desserts":   {"label": "Desserts & Sweets",  "emoji": "🎂", "color": "#AE3EC9"},
}

DEFAULT_CATEGORY = "meat"
FALLBACK_EMOJI = "🍽️"
FALLBACK_COLOR = "#888"

def is_known(key: str) -> bool:
    return key in CATEGORIES

def category_info(key: str) -> Dict[str, str]:
    # 모르는 키는 거부하지 않고 키 자체를 라벨로 쓴다
    return CATEGORIES.get(key) or {"label": key or "", "emoji": FALLBACK_EMOJI, "color": FALLBACK_COLOR}

def category_label(key: str) -> str:
    return category_info(key)["label"]

def category_emoji(key: str) -> str:
    return category_info(key)["emoji"]
