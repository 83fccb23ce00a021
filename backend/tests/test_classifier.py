"""
카테고리 분류기 테스트 — 전체 함수(항상 키 반환), 결정적, 규칙 순서
"""
import pytest

from recipebox.models.categories import CATEGORIES, DEFAULT_CATEGORY
from recipebox.services.classifier import RULES, classify


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Street Tacos", "mexican"),
        ("Roast Chicken", "meat"),
        ("Chicken", "meat"),
        ("Tomato Soup", "soups"),
        ("Spaghetti Carbonara", "pasta"),
        ("Chicken Pot Pie", "casseroles"),
        ("Apple Pie", "desserts"),
        ("Garlic Shrimp", "seafood"),
        ("Margherita Pizza", "pizza"),
        ("Baked Ziti Casserole", "casseroles"),
    ],
)
def test_classify_by_name(name, expected):
    assert classify("", "", name, []) == expected


def test_empty_text_gets_default():
    assert classify() == DEFAULT_CATEGORY
    assert classify("", "", "", []) == DEFAULT_CATEGORY
    assert classify(None, None, None, None) == DEFAULT_CATEGORY


def test_no_match_gets_default():
    assert classify("", "", "Zzz Mystery Dish", ["water"]) == DEFAULT_CATEGORY


def test_ingredients_and_cuisine_are_considered():
    assert classify("", "", "Weeknight Dinner", ["1 lb salmon fillet"]) == "seafood"
    assert classify("", "Thai", "Weeknight Dinner", []) == "asian"


def test_case_insensitive():
    assert classify("", "", "BEEF TACOS", []) == "mexican"


def test_deterministic():
    args = ("Main", "Korean", "Bibimbap Bowl", ["rice", "egg"])
    assert len({classify(*args) for _ in range(20)}) == 1


def test_rule_keys_are_known_categories():
    for key, _ in RULES:
        assert key in CATEGORIES
