# recipebox/services/classifier.py
# 목적: 자유 텍스트(선언 카테고리/요리국적/이름/재료) → 카테고리 키
# 특징: 순서가 있는 정규식 규칙 테이블, 첫 매칭 승리. 매칭 없으면 기본 카테고리.
# 확장: 구체적인 규칙은 반드시 넓은 규칙보다 앞에 둔다 (예: 국물류가 고기류보다 먼저)

import re
from typing import Iterable, List, Optional, Tuple

from recipebox.models.categories import DEFAULT_CATEGORY

RULES: List[Tuple[str, "re.Pattern[str]"]] = [
    ("soups",      re.compile(r"soup|stew|chowder|broth|bisque|chili")),
    ("pasta",      re.compile(r"pasta|spaghetti|penne|fettuccine|rigatoni|linguine|lasagna|noodle|macaroni|tagliatelle|gnocchi|orzo")),
    ("mexican",    re.compile(r"taco|fajita|burrito|enchilada|quesadilla|salsa|guacamole|mexican|tex.mex|chimichanga")),
    ("asian",      re.compile(r"stir.fry|fried rice|ramen|pho|pad thai|sushi|teriyaki|korean|chinese|japanese|thai|vietnamese|asian|wok")),
    ("seafood",    re.compile(r"salmon|shrimp|fish|tuna|cod|halibut|tilapia|lobster|crab|scallop|seafood|prawn|clam|mussel")),
    ("salads",     re.compile(r"salad|bowl|grain bowl|buddha bowl")),
    ("breakfast",  re.compile(r"breakfast|brunch|egg|omelette|pancake|waffle|french toast|shakshuka|frittata|quiche")),
    # "pot pie" 는 디저트의 "pie" 보다 먼저 잡아야 한다
    ("casseroles", re.compile(r"casserole|gratin|pot pie")),
    ("desserts",   re.compile(r"cake|cookie|brownie|pie|tart|dessert|sweet|chocolate|ice cream|pudding|muffin|cupcake")),
    ("pizza",      re.compile(r"pizza|flatbread|focaccia|calzone")),
    ("casseroles", re.compile(r"bake")),
    ("meat",       re.compile(r"chicken|beef|pork|lamb|turkey|steak|roast|meatball|meatloaf|wing|rib|cutlet|tenderloin")),
    ("vegetables", re.compile(r"vegetable|veggie|vegan|side dish|roasted veg|cauliflower|broccoli|asparagus|green bean")),
]

def build_text(
    declared: Optional[str],
    cuisine: Optional[str],
    name: Optional[str],
    ingredients: Optional[Iterable[str]],
) -> str:
    ings = " ".join(str(i) for i in (ingredients or []) if i)
    return f"{declared or ''} {cuisine or ''} {name or ''} {ings}".lower()

def classify(
    declared: Optional[str] = "",
    cuisine: Optional[str] = "",
    name: Optional[str] = "",
    ingredients: Optional[Iterable[str]] = None,
) -> str:
    """항상 카테고리 키를 돌려준다 (unknown 없음)."""
    text = build_text(declared, cuisine, name, ingredients)
    for key, rx in RULES:
        if rx.search(text):
            return key
    return DEFAULT_CATEGORY
