"""
JSON-LD(schema.org/Recipe) 추출/정규화 테스트
"""
import pytest
from bs4 import BeautifulSoup

from conftest import JSONLD_PAGE
from recipebox.services.scraper.structured import (
    PlainStep,
    StepSection,
    StructuredStep,
    extract_structured,
    find_recipe_node,
    flatten_steps,
    normalize_recipe_node,
    parse_duration,
    parse_image,
    parse_instruction,
    parse_instructions,
    parse_nutrition,
    parse_servings,
    parse_tags,
    text_of,
)


def _soup(html):
    return BeautifulSoup(html, "lxml")


class TestDuration:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("PT1H30M", "1h 30 min"),
            ("PT45M", "45 min"),
            ("PT2H", "2 hr"),
            ("about 20 minutes", "about 20 minutes"),
            ("PT0M", "PT0M"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_parse_duration(self, raw, expected):
        assert parse_duration(raw) == expected


class TestServings:
    def test_first_integer_token(self):
        assert parse_servings("Serves 6 to 8") == 6

    def test_list_value(self):
        assert parse_servings(["8", "8 servings"]) == 8

    def test_default_when_missing(self):
        assert parse_servings(None) == 4
        assert parse_servings("a crowd") == 4

    def test_zero_falls_back(self):
        assert parse_servings("0") == 4


class TestImage:
    def test_string(self):
        assert parse_image("https://a/b.jpg") == "https://a/b.jpg"

    def test_list_of_strings(self):
        assert parse_image(["", "https://a/1.jpg", "https://a/2.jpg"]) == "https://a/1.jpg"

    def test_object_with_url(self):
        assert parse_image({"@type": "ImageObject", "url": "https://a/o.jpg"}) == "https://a/o.jpg"

    def test_missing(self):
        assert parse_image(None) == ""
        assert parse_image([{}]) == ""


class TestNutrition:
    def test_synonyms_first_match_wins(self):
        n = parse_nutrition({"fatContent": "10 g", "totalFat": "99 g", "sugars": "4 g"})
        assert n == {"fat": "10 g", "sugar": "4 g"}

    def test_calories_coerced_to_int(self):
        assert parse_nutrition({"calories": "312.6 kcal"})["calories"] == 313

    def test_not_a_mapping(self):
        assert parse_nutrition("300 calories") == {}


class TestInstructions:
    def test_tagged_union_shapes(self):
        assert isinstance(parse_instruction("Stir."), PlainStep)
        assert isinstance(parse_instruction({"@type": "HowToStep", "text": "Stir."}), StructuredStep)
        section = parse_instruction({"@type": "HowToSection", "itemListElement": ["a", "b"]})
        assert isinstance(section, StepSection)
        assert len(section.steps) == 2

    def test_nested_sections_flatten_in_order(self):
        raw = [
            {"@type": "HowToSection", "name": "Dough", "itemListElement": [
                {"@type": "HowToStep", "text": "Mix flour."},
                {"@type": "HowToSection", "itemListElement": [{"@type": "HowToStep", "name": "Knead."}]},
            ]},
            "<p>Bake.</p>",
            {"@type": "HowToStep", "text": "   "},
        ]
        assert parse_instructions(raw) == ["Mix flour.", "Knead.", "Bake."]

    def test_single_string(self):
        assert parse_instructions("Just cook it.") == ["Just cook it."]

    def test_flatten_drops_empty(self):
        nodes = [PlainStep(text=""), StepSection(steps=[StructuredStep(text="x")])]
        assert flatten_steps(nodes) == ["x"]


def test_text_of_unwraps_value_objects_and_html():
    assert text_of({"@value": "Soup", "@language": "en"}) == "Soup"
    assert text_of("<b>Fish</b> &amp; chips") == "Fish & chips"
    assert text_of(None) == ""


def test_tags_deduplicated_lowercased_and_capped():
    tags = parse_tags("Easy, easy, Dinner, Quick, Healthy, Cheap, Family, Extra", "Dinner", "Italian")
    assert tags == ["easy", "dinner", "quick", "healthy", "cheap", "family"]


def test_tags_skip_long_keywords():
    tags = parse_tags(["short", "this keyword is far too long to keep"], None, None)
    assert tags == ["short"]


def test_find_recipe_node_skips_broken_blocks_and_reads_graph():
    node = find_recipe_node(_soup(JSONLD_PAGE))
    assert node is not None
    assert node["name"] == "Classic Beef Stew"


def test_find_recipe_node_in_top_level_array():
    html = '<script type="application/ld+json">[{"@type":"Person"},{"@type":"recipe","name":"X"}]</script>'
    assert find_recipe_node(_soup(html))["name"] == "X"


def test_normalize_full_recipe():
    r = extract_structured(_soup(JSONLD_PAGE), "https://example.com/classic-beef-stew")
    assert r is not None
    assert r.scrapeOk is True
    assert r.name == "Classic Beef Stew"
    assert r.description == "A hearty stew"
    assert r.ingredients == ["2 lb beef chuck", "3 carrots", "1 onion"]
    assert r.steps == ["Cube the beef.", "Brown the beef.", "Simmer for 90 minutes."]
    assert r.prepTime == "20 min"
    assert r.cookTime == "1h 30 min"
    assert r.totalTime == "2 hr"
    assert r.servings == 6
    assert r.calories == 420
    assert r.nutrition == {"calories": 420, "fat": "18 g", "protein": "35 g"}
    assert r.thumbnail == "https://img.example.com/stew.jpg"
    assert r.category == "soups"
    assert r.emoji == "🍜"
    assert r.source == "https://example.com/classic-beef-stew"
    assert r.tags == ["stew", "beef", "comfort food", "dinner", "american"]


def test_top_level_calories_used_when_nutrition_missing():
    r = normalize_recipe_node({"@type": "Recipe", "name": "X", "calories": "250"}, "u")
    assert r.calories == 250
    assert r.nutrition["calories"] == 250


def test_recipe_without_ingredients_or_steps_is_rejected():
    html = '<script type="application/ld+json">{"@type":"Recipe","name":"Only a name"}</script>'
    assert extract_structured(_soup(html), "u") is None


def test_recipe_without_name_is_rejected():
    html = '<script type="application/ld+json">{"@type":"Recipe","recipeIngredient":["salt"]}</script>'
    assert extract_structured(_soup(html), "u") is None
