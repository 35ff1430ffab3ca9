import json
import logging
import math
import re
from typing import Any, Iterable, List, Optional

from ..core.text import clean_text
from .measurements import normalize_unit, parse_quantity, parse_servings, parse_time
from .parser import (
    ParsedIngredient,
    ParsedInstruction,
    ParsedRecipe,
    ParseError,
    ParserContext,
    RecipeParser,
)

logger = logging.getLogger(__name__)

# Ordered aliases per logical field; schema.org names included
NAME_KEYS = ("name", "title", "recipeName", "headline")
DESCRIPTION_KEYS = ("description", "summary", "intro")
AUTHOR_KEYS = ("author", "by", "creator")
SOURCE_KEYS = ("source", "sourceName", "publisher")
SOURCE_URL_KEYS = ("sourceUrl", "source_url", "url", "link")
PREP_KEYS = ("prepTime", "preparationTime", "prep_time")
COOK_KEYS = ("cookTime", "cookingTime", "cook_time")
TOTAL_KEYS = ("totalTime", "total_time")
SERVINGS_KEYS = ("servings", "recipeYield", "yield", "serves")
IMAGE_KEYS = ("image", "imageUrl", "image_url", "photo", "thumbnail", "thumbnailUrl")
CATEGORY_KEYS = ("categories", "category", "recipeCategory", "recipeCourse")
TAG_KEYS = ("tags", "keywords", "recipeCuisine")
INGREDIENT_KEYS = ("ingredients", "recipeIngredient", "recipeIngredients", "ingredientLines")
INSTRUCTION_KEYS = ("instructions", "recipeInstructions", "recipeDirections", "directions", "steps", "method")
NUTRITION_KEYS = ("nutrition", "nutritional_info", "nutritionInfo")
NOTES_KEYS = ("notes", "recipeNotes", "tips")

INSTRUCTION_SPLIT_RE = re.compile(r"[\n;]")


def _reject_constant(name: str):
    # json.loads accepts NaN and Infinity, which are not JSON
    raise ParseError(f"Failed to parse JSON recipe: non-standard constant {name}")


def is_recipe_node(node: Any) -> bool:
    """True for a JSON-LD node typed Recipe (plain string or list of types)."""
    if not isinstance(node, dict):
        return False
    node_type = node.get("@type")
    if isinstance(node_type, list):
        return "Recipe" in node_type
    return node_type == "Recipe"


def _first(obj: dict, keys: Iterable[str]) -> Any:
    for key in keys:
        value = obj.get(key)
        if value not in (None, "", [], {}):
            return value
    return None


def _as_text(value: Any) -> Optional[str]:
    """Coerce strings, numbers, `{"name": ...}`/`{"url": ...}` objects and lists to one string."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        return clean_text(value) or None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, dict):
        return _as_text(value.get("name") or value.get("url") or value.get("@id"))
    if isinstance(value, list):
        for item in value:
            text = _as_text(item)
            if text:
                return text
    return None


def _as_list(value: Any) -> List[str]:
    """List of strings, or a comma separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    if isinstance(value, list):
        items = []
        for item in value:
            text = _as_text(item)
            if text:
                items.append(text)
        return items
    text = _as_text(value)
    return [text] if text else []


def _as_minutes(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        return int(value) or None
    return parse_time(_as_text(value))


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


class JsonRecipeParser(RecipeParser):
    """
    Generic JSON recipes: a single object, an array of objects, or a JSON-LD
    document with an "@graph". Malformed JSON is a caller error and raises
    ParseError.
    """

    name = "JsonRecipeParser"
    source_type = "JSON"
    priority = 40

    # Vendor exports put several lines in one list entry
    split_embedded_newlines = False

    def can_parse(self, content: str, context: ParserContext) -> bool:
        data = self._load_quietly(content)
        if isinstance(data, list):
            data = next((item for item in data if isinstance(item, dict)), None)
        if not isinstance(data, dict):
            return False
        if any(is_recipe_node(node) for node in data.get("@graph") or []):
            return True
        return any(key in data for key in NAME_KEYS[:3])

    def parse(self, content: str, context: ParserContext) -> List[ParsedRecipe]:
        try:
            data = json.loads(content, parse_constant=_reject_constant)
        except (json.JSONDecodeError, TypeError) as e:
            line = getattr(e, "lineno", None)
            raise ParseError(f"Failed to parse JSON recipe: {e}", line_number=line) from e

        recipes = [self._parse_recipe(node, context) for node in self._recipe_nodes(data)]
        logger.info(f"{self.name}: parsed {len(recipes)} recipe(s)")
        return recipes

    def _load_quietly(self, content: str) -> Any:
        stripped = (content or "").lstrip()
        if not stripped.startswith(("{", "[")):
            return None
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            return None

    def _recipe_nodes(self, data: Any) -> List[dict]:
        if isinstance(data, dict):
            if "@graph" in data:
                return [node for node in data.get("@graph") or [] if is_recipe_node(node)]
            return [data]
        if isinstance(data, list):
            nodes = [item for item in data if isinstance(item, dict)]
            # JSON-LD arrays mix Recipe with WebPage, Organization, ...
            if any("@type" in node for node in nodes):
                nodes = [node for node in nodes if is_recipe_node(node)]
            return nodes
        raise ParseError(f"Expected a JSON object or array, got {type(data).__name__}")

    def _parse_recipe(self, obj: dict, context: ParserContext) -> ParsedRecipe:
        metadata = {}
        nutrition = _first(obj, NUTRITION_KEYS)
        if nutrition is not None:
            if isinstance(nutrition, dict):
                nutrition = {k: v for k, v in nutrition.items() if not k.startswith("@")}
            metadata["nutrition"] = nutrition
        notes = _first(obj, NOTES_KEYS)
        if notes is not None:
            metadata["notes"] = notes

        return ParsedRecipe(
            name=_as_text(_first(obj, NAME_KEYS)),
            description=_as_text(_first(obj, DESCRIPTION_KEYS)),
            author=_as_text(_first(obj, AUTHOR_KEYS)),
            source=_as_text(_first(obj, SOURCE_KEYS)),
            source_url=_as_text(_first(obj, SOURCE_URL_KEYS)) or context.source_url,
            prep_time_minutes=_as_minutes(_first(obj, PREP_KEYS)),
            cook_time_minutes=_as_minutes(_first(obj, COOK_KEYS)),
            total_time_minutes=_as_minutes(_first(obj, TOTAL_KEYS)),
            servings=parse_servings(_first(obj, SERVINGS_KEYS)),
            image_url=_as_text(_first(obj, IMAGE_KEYS)),
            categories=_as_list(_first(obj, CATEGORY_KEYS)),
            tags=_as_list(_first(obj, TAG_KEYS)),
            ingredients=self._ingredients(_first(obj, INGREDIENT_KEYS)),
            instructions=self._instructions(_first(obj, INSTRUCTION_KEYS)),
            metadata=metadata,
        )

    # --- Ingredients ---

    def _expand(self, items: List[Any]) -> List[Any]:
        if not self.split_embedded_newlines:
            return items
        expanded = []
        for item in items:
            if isinstance(item, str) and "\n" in item.strip():
                expanded.extend(line for line in item.splitlines() if line.strip())
            else:
                expanded.append(item)
        return expanded

    def _ingredients(self, value: Any) -> List[ParsedIngredient]:
        if value is None:
            return []
        if isinstance(value, str):
            items: List[Any] = [line for line in value.splitlines() if line.strip()]
        elif isinstance(value, list):
            items = self._expand(value)
        else:
            return []

        ingredients = []
        for item in items:
            if isinstance(item, str):
                ingredient = self.ingredient_from_text(item, len(ingredients))
            elif isinstance(item, dict):
                ingredient = self._structured_ingredient(item, len(ingredients))
            else:
                ingredient = None
            if ingredient is not None:
                ingredients.append(ingredient)
        return ingredients

    def _structured_ingredient(self, item: dict, order: int) -> Optional[ParsedIngredient]:
        name = _as_text(_first(item, ("name", "ingredient", "item", "food")))
        original = _as_text(_first(item, ("text", "original", "originalText")))
        if not name:
            return self.ingredient_from_text(original, order) if original else None

        quantity = _first(item, ("quantity", "amount", "qty"))
        unit = _as_text(_first(item, ("unit", "measure")))
        preparation = _as_text(_first(item, ("preparation", "prep")))
        if not original:
            original = " ".join(str(p) for p in (quantity, unit, name) if p not in (None, ""))

        return ParsedIngredient(
            order=order,
            section_name=_as_text(item.get("section")),
            quantity=parse_quantity(None if quantity is None else str(quantity)),
            unit=normalize_unit(unit) if unit else None,
            ingredient_name=name,
            preparation=preparation,
            notes=_as_text(_first(item, ("notes", "note"))),
            is_optional=_as_bool(_first(item, ("optional", "isOptional"))),
            original_text=original,
        )

    # --- Instructions ---

    def _instructions(self, value: Any) -> List[ParsedInstruction]:
        if value is None:
            return []
        if isinstance(value, str):
            entries = [(line, None) for line in INSTRUCTION_SPLIT_RE.split(value)]
        elif isinstance(value, list):
            entries = list(self._flatten_steps(value, None))
        else:
            return []

        instructions = []
        for entry, section_name in entries:
            instruction = self._instruction(entry, len(instructions) + 1, section_name)
            if instruction is not None:
                instructions.append(instruction)
        return instructions

    def _flatten_steps(self, items: List[Any], section_name: Optional[str]):
        """Yield (step, section) pairs, unrolling HowToSection groups."""
        for item in self._expand(items):
            if isinstance(item, dict) and "itemListElement" in item:
                section = _as_text(item.get("name")) or section_name
                children = item.get("itemListElement")
                if not isinstance(children, list):
                    children = [children]
                yield from self._flatten_steps(children, section)
            else:
                yield item, section_name

    def _instruction(self, entry: Any, step_number: int, section_name: Optional[str]) -> Optional[ParsedInstruction]:
        if isinstance(entry, str):
            return self.instruction_from_text(entry, step_number, section_name)
        if not isinstance(entry, dict):
            return None

        text = _as_text(_first(entry, ("text", "instruction", "description", "name")))
        if not text:
            return None
        instruction = self.instruction_from_text(text, step_number, section_name)
        if instruction is None:
            return None

        update = {}
        minutes = _as_minutes(_first(entry, ("time", "duration")))
        if minutes is not None:
            update["time_minutes"] = minutes
        temperature = _first(entry, ("temperature", "temp"))
        if isinstance(temperature, bool) or not isinstance(temperature, (int, float)):
            temperature = None
        if temperature is not None and math.isfinite(temperature):
            unit = (_as_text(_first(entry, ("temperatureUnit", "tempUnit"))) or "F").upper()[:1]
            update["temperature"] = int(temperature)
            update["temperature_unit"] = unit if unit in ("F", "C") else "F"
        return instruction.model_copy(update=update) if update else instruction
