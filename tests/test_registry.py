import json

import pytest

from recipe_import.parsing import (
    JsonRecipeParser,
    MealMasterParser,
    ParseError,
    ParserContext,
    ParserRegistry,
    RecipeParser,
    RuleBasedParser,
)

MEAL_MASTER = """MMMMM----- Recipe via Meal-Master (tm) v8.02
      Title: Toast
      1    slice bread
Toast the bread until it is golden brown.
MMMMM
"""


class ExplodingParser(RecipeParser):
    name = "ExplodingParser"
    source_type = "Boom"
    priority = 0

    def can_parse(self, content, context):
        raise RuntimeError("boom")

    def parse(self, content, context):
        return []


def test_default_order_puts_free_text_last():
    registry = ParserRegistry()
    names = registry.names()

    assert names[0] == "MealMasterParser"
    assert names[-1] == "RuleBasedParser"
    assert names.index("RecipeKeeperParser") < names.index("JsonRecipeParser")
    assert names.index("PaprikaParser") < names.index("JsonRecipeParser")
    assert names.index("AllRecipesParser") < names.index("WebScraperParser")
    priorities = [p.priority for p in registry.parsers]
    assert priorities == sorted(priorities)


def test_meal_master_wins_over_free_text():
    registry = ParserRegistry()
    assert RuleBasedParser().can_parse(MEAL_MASTER, ParserContext())
    assert registry.detect(MEAL_MASTER, ParserContext()).name == "MealMasterParser"


@pytest.mark.parametrize("content,context,expected", [
    ('<?xml version="1.0"?><Recipe><Name>X</Name></Recipe>', {}, "MasterCookParser"),
    (json.dumps({"uid": "1", "name": "X", "ingredients": "1 egg"}), {}, "PaprikaParser"),
    (json.dumps({"recipeName": "X"}), {}, "RecipeKeeperParser"),
    (json.dumps({"name": "X"}), {}, "JsonRecipeParser"),
    ("<html><body></body></html>", {"source_url": "https://cooking.nytimes.com/r/1"}, "NYTCookingParser"),
    ("<html><body></body></html>", {"source_url": "https://blog.example.com/r/1"}, "WebScraperParser"),
    ("Toast\n1 slice bread", {}, "RuleBasedParser"),
])
def test_detection(content, context, expected):
    assert ParserRegistry().detect(content, ParserContext(**context)).name == expected


def test_detect_nothing_for_blank_content():
    assert ParserRegistry().detect("   ", ParserContext()) is None


def test_lookup_by_name_and_source_type():
    registry = ParserRegistry()
    assert isinstance(registry.get_by_name("JsonRecipeParser"), JsonRecipeParser)
    assert registry.get_by_name("Nope") is None
    assert registry.get_by_source_type("mealmaster").name == "MealMasterParser"
    assert registry.get_by_source_type("TEXT").name == "RuleBasedParser"
    assert registry.get_by_source_type("unknown") is None


def test_duplicate_names_rejected():
    with pytest.raises(ValueError):
        ParserRegistry([MealMasterParser(), MealMasterParser()])


def test_priority_ties_keep_registration_order():
    class A(RuleBasedParser):
        name = "A"

    class B(RuleBasedParser):
        name = "B"

    assert ParserRegistry([B(), A()]).names() == ["B", "A"]


def test_raising_can_parse_is_skipped():
    registry = ParserRegistry([ExplodingParser(), RuleBasedParser()])
    assert registry.detect("hello", ParserContext()).name == "RuleBasedParser"


def test_parse_by_name_bypasses_detection():
    registry = ParserRegistry()
    recipes = registry.parse("Toast\n1 slice bread", ParserContext(), parser_name="RuleBasedParser")
    assert recipes[0].name == "Toast"

    with pytest.raises(ParseError):
        registry.parse("x", ParserContext(), parser_name="Nope")


def test_parse_without_any_parser_raises():
    with pytest.raises(ParseError):
        ParserRegistry([]).parse("", ParserContext())
