from decimal import Decimal

from recipe_import.parsing import LineClass, ParserContext, RuleBasedParser, classify_line
from recipe_import.parsing.rule_based_parser import scan_meta


def _parse(text, **context):
    recipes = RuleBasedParser().parse(text, ParserContext(**context))
    assert len(recipes) == 1
    return recipes[0]


def test_rule_based_parser_simple():
    text = """
    Pancakes

    Ingredients:
    1 cup flour
    2 eggs
    1/2 cup milk

    Instructions:
    1. Mix everything.
    2. Cook.
    """

    recipe = _parse(text)

    assert recipe.name == "Pancakes"
    assert len(recipe.ingredients) == 3
    assert recipe.ingredients[0].ingredient_name == "flour"
    assert recipe.ingredients[0].quantity == 1
    assert recipe.ingredients[0].unit == "cup"
    assert recipe.ingredients[2].quantity == Decimal("0.5")

    assert len(recipe.instructions) == 2
    assert recipe.instructions[0].step_number == 1
    assert recipe.instructions[0].instruction_text == "Mix everything."


def test_rule_based_parser_unstructured():
    text = """
    Simple Pasta

    What you need:
    - 500g spaghetti
    - Tomato sauce
    - Cheese

    Method:
    Boil water.
    Cook pasta.
    Add sauce.
    """

    recipe = _parse(text)

    assert recipe.name == "Simple Pasta"
    assert [i.ingredient_name for i in recipe.ingredients] == ["spaghetti", "Tomato sauce", "Cheese"]
    assert recipe.ingredients[0].unit == "g"
    assert [s.instruction_text for s in recipe.instructions] == ["Boil water.", "Cook pasta.", "Add sauce."]


def test_headerless_text_uses_heuristics():
    text = """
    # **Quick Omelette**
    2 eggs
    a pinch of salt
    Whisk the eggs with salt.
    Cook in butter until just set, about 2 minutes.
    """

    recipe = _parse(text)

    assert recipe.name == "Quick Omelette"
    assert [i.ingredient_name for i in recipe.ingredients] == ["eggs", "a pinch of salt"]
    assert len(recipe.instructions) == 2
    assert recipe.instructions[1].time_minutes == 2


def test_metadata_lines_anywhere():
    text = """
    Chili
    Serves 4-6
    Ingredients:
    Prep time: 15 minutes
    1 lb beef
    Cook time: 1 hour
    Instructions:
    Brown the beef.
    """

    recipe = _parse(text)

    assert recipe.servings == 4
    assert recipe.prep_time_minutes == 15
    assert recipe.cook_time_minutes == 60
    assert recipe.total_time_minutes == 75
    assert [i.ingredient_name for i in recipe.ingredients] == ["beef"]
    assert len(recipe.instructions) == 1


def test_numbered_steps_in_instruction_section_are_not_ingredients():
    text = """
    Soup
    Directions
    1. Chop 2 carrots.
    2. Simmer 20 minutes.
    """

    recipe = _parse(text)

    assert recipe.ingredients == []
    assert [s.instruction_text for s in recipe.instructions] == ["Chop 2 carrots.", "Simmer 20 minutes."]
    assert recipe.instructions[1].time_minutes == 20


def test_description_and_notes_sections():
    text = """
    Bread
    About:
    A **simple** loaf.
    Ingredients:
    3 cups flour
    Notes:
    Freezes well.
    Use bread flour for more chew.
    """

    recipe = _parse(text)

    assert recipe.description == "A simple loaf."
    assert recipe.metadata["notes"] == "Freezes well.\nUse bread flour for more chew."


def test_keycap_numbered_steps():
    text = "Toast\nSteps:\n1\ufe0f\u20e3 Toast the bread.\n2\ufe0f\u20e3 Butter it."
    recipe = _parse(text)
    assert [s.instruction_text for s in recipe.instructions] == ["Toast the bread.", "Butter it."]


def test_title_hint_and_headerless_start():
    text = "Ingredients:\n2 eggs\n"
    assert _parse(text, metadata={"title_hint": "Eggs"}).name == "Eggs"
    assert _parse(text, file_name="eggs.txt").name == "eggs.txt"
    assert _parse(text).name == "Untitled Recipe"


def test_blank_text():
    parser = RuleBasedParser()
    assert not parser.can_parse("   \n ", ParserContext())
    recipes = parser.parse("   ", ParserContext(file_name="empty.txt"))
    assert len(recipes) == 1
    assert recipes[0].name == "empty.txt"
    assert recipes[0].ingredients == []
    assert recipes[0].instructions == []
    assert parser.parse("", ParserContext())[0].name == "Untitled Recipe"


def test_classify_line_is_pure():
    assert classify_line("Ingredients:", "unknown") == LineClass("header", "ingredients")
    assert classify_line("1. Stir well", "instructions").kind == "instruction"
    assert classify_line("1. Stir well", "unknown").kind == "instruction"
    assert classify_line("2 cups flour", "unknown").kind == "ingredient"
    assert classify_line("Salt and pepper", "ingredients") == LineClass("ingredient", "ingredients")
    assert classify_line("Preheat the oven", "unknown").kind == "instruction"
    assert classify_line("Butter, 1 stick", "unknown").kind == "skip"
    assert classify_line("Flour 2 cups", "unknown").kind == "ingredient"

    meta = classify_line("Serves: 4", "instructions")
    assert meta == LineClass("meta", "instructions", "servings", "4")


def test_several_times_on_one_line():
    text = """
    Pancakes
    Prep: 10 min | Cook: 20 min
    1 cup flour
    """

    recipe = _parse(text)

    assert recipe.prep_time_minutes == 10
    assert recipe.cook_time_minutes == 20
    assert [i.ingredient_name for i in recipe.ingredients] == ["flour"]


def test_servings_mentioned_mid_sentence():
    text = """
    Lentil Soup
    This recipe serves 4 people.
    2 cups lentils
    """

    assert _parse(text).servings == 4


def test_explicit_meta_line_beats_later_mentions():
    text = """
    Stew
    Servings: 6
    Divide into 2 servings if you are hungry.
    """

    assert _parse(text).servings == 6


def test_scan_meta():
    assert scan_meta("Prep time: 5 minutes; Cook time: 1 hour; Total: 65 min") == {
        "prep_time_minutes": 5,
        "cook_time_minutes": 60,
        "total_time_minutes": 65,
    }
    assert scan_meta("Makes 8 servings") == {"servings": 8}
    assert scan_meta("Preheat the oven and cook the pasta.") == {}
