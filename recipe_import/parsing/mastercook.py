import logging
import re
import xml.etree.ElementTree as ET
from typing import Iterable, List, Optional

from ..core.text import clean_text, split_numbered_blob
from .measurements import normalize_unit, parse_quantity, parse_servings, parse_time
from .parser import ParsedIngredient, ParsedInstruction, ParsedRecipe, ParserContext, RecipeParser

logger = logging.getLogger(__name__)

RECIPE_TAG_RE = re.compile(r"<\s*recipe[\s>/]", re.IGNORECASE)
MASTERCOOK_EXTENSIONS = (".mx2", ".mxp")
PLACEHOLDER_TITLE = "MasterCook Recipe"

# field -> accepted child tags (lower-case, namespace stripped)
FIELD_TAGS = {
    "name": ("name", "title", "recipename"),
    "description": ("description", "summary", "intro"),
    "author": ("author", "by", "creator"),
    "source": ("source", "sourcename"),
    "source_url": ("sourceurl", "url", "link"),
    "image_url": ("image", "imageurl", "photo"),
}
PREP_TAGS = ("preptime", "preparationtime")
COOK_TAGS = ("cooktime", "cookingtime")
TOTAL_TAGS = ("totaltime",)
SERVINGS_TAGS = ("servings", "yield", "serves")
CATEGORY_TAGS = ("categories", "category")
TAG_TAGS = ("tags", "tag", "keywords")
INGREDIENT_LIST_TAGS = ("ingredients", "ingredientlist")
INGREDIENT_TAGS = ("ingredient", "item", "iitm")
INSTRUCTION_LIST_TAGS = ("instructions", "directions", "steps", "method")
INSTRUCTION_TAGS = ("instruction", "step", "direction")


def _local(tag) -> str:
    """'{ns}Recipe' -> 'recipe'."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1].lower()


def _text(element: Optional[ET.Element]) -> str:
    if element is None:
        return ""
    return "".join(element.itertext()).strip()


def _child(element: ET.Element, tags: Iterable[str]) -> Optional[ET.Element]:
    for tag in tags:
        for child in element:
            if _local(child.tag) == tag:
                return child
    return None


def _child_text(element: ET.Element, tags: Iterable[str]) -> Optional[str]:
    child = _child(element, tags)
    value = clean_text(_text(child)) if child is not None else ""
    return value or None


def _split_list(element: Optional[ET.Element], item_tags: Iterable[str]) -> List[str]:
    """Repeated child elements, or one text blob split on commas."""
    if element is None:
        return []
    items = [clean_text(_text(c)) for c in element if _local(c.tag) in item_tags]
    if items:
        return [i for i in items if i]
    return [c.strip() for c in _text(element).split(",") if c.strip()]


class MasterCookParser(RecipeParser):
    """
    MasterCook MX2/MXP and similar XML exports. Every <Recipe> element is one
    recipe.

    Malformed XML does not raise: the result is a single placeholder recipe
    whose description says what went wrong, so a batch of files keeps going.
    """

    name = "MasterCookParser"
    source_type = "MealMaster"
    priority = 20

    def can_parse(self, content: str, context: ParserContext) -> bool:
        file_name = (context.file_name or "").lower()
        looks_xml = file_name.endswith(MASTERCOOK_EXTENSIONS) or content.lstrip().lower().startswith("<?xml")
        return looks_xml and bool(RECIPE_TAG_RE.search(content))

    def parse(self, content: str, context: ParserContext) -> List[ParsedRecipe]:
        try:
            root = ET.fromstring(content.strip())
        except ET.ParseError as e:
            logger.warning(f"MasterCook XML parse failed for {context.file_name or 'content'}: {e}")
            return [self._placeholder(context, f"Failed to parse MasterCook XML: {e}")]

        elements = [el for el in root.iter() if _local(el.tag) == "recipe"]
        if not elements:
            return [self._placeholder(context, "No <Recipe> elements found in MasterCook XML")]

        recipes = [self._parse_recipe(el, context) for el in elements]
        logger.info(f"MasterCook: parsed {len(recipes)} recipe(s)")
        return recipes

    def _placeholder(self, context: ParserContext, reason: str) -> ParsedRecipe:
        return ParsedRecipe(
            name=context.file_name or PLACEHOLDER_TITLE,
            description=reason,
            source="MasterCook",
            source_url=context.source_url,
        )

    def _parse_recipe(self, element: ET.Element, context: ParserContext) -> ParsedRecipe:
        fields = {key: _child_text(element, tags) for key, tags in FIELD_TAGS.items()}
        if not fields["name"]:
            fields["name"] = element.get("name") or element.get("title")
        fields["source"] = fields["source"] or "MasterCook"

        return ParsedRecipe(
            **fields,
            prep_time_minutes=parse_time(_child_text(element, PREP_TAGS)),
            cook_time_minutes=parse_time(_child_text(element, COOK_TAGS)),
            total_time_minutes=parse_time(_child_text(element, TOTAL_TAGS)),
            servings=parse_servings(_child_text(element, SERVINGS_TAGS) or element.get("servings")),
            categories=_split_list(_child(element, CATEGORY_TAGS), ("category", "cat")),
            tags=_split_list(_child(element, TAG_TAGS), ("tag", "keyword")),
            ingredients=self._ingredients(_child(element, INGREDIENT_LIST_TAGS)),
            instructions=self._instructions(_child(element, INSTRUCTION_LIST_TAGS)),
        )

    def _ingredients(self, container: Optional[ET.Element]) -> List[ParsedIngredient]:
        if container is None:
            return []

        ingredients = []
        children = [c for c in container if _local(c.tag) in INGREDIENT_TAGS]
        if not children:
            for line in split_numbered_blob(_text(container)):
                ingredient = self.ingredient_from_text(line, len(ingredients))
                if ingredient is not None:
                    ingredients.append(ingredient)
            return ingredients

        for child in children:
            ingredient = self._ingredient_element(child, len(ingredients))
            if ingredient is not None:
                ingredients.append(ingredient)
        return ingredients

    def _ingredient_element(self, element: ET.Element, order: int) -> Optional[ParsedIngredient]:
        name = _child_text(element, ("name", "ingredient", "food"))
        if not name:
            # <Ingredient>1 cup flour</Ingredient>
            return self.ingredient_from_text(_text(element), order)

        quantity_text = _child_text(element, ("quantity", "amount", "qty")) or element.get("qty")
        unit = _child_text(element, ("unit", "measure")) or element.get("unit")
        preparation = _child_text(element, ("preparation", "prep"))
        original = " ".join(p for p in (quantity_text, unit, name, preparation) if p)
        return ParsedIngredient(
            order=order,
            quantity=parse_quantity(quantity_text),
            unit=normalize_unit(unit) if unit else None,
            ingredient_name=name,
            preparation=preparation,
            notes=_child_text(element, ("notes", "note")),
            is_optional=(_child_text(element, ("optional",)) or "").lower() in ("true", "yes", "1"),
            original_text=original,
        )

    def _instructions(self, container: Optional[ET.Element]) -> List[ParsedInstruction]:
        if container is None:
            return []

        children = [c for c in container if _local(c.tag) in INSTRUCTION_TAGS]
        texts = [_text(c) for c in children] if children else split_numbered_blob(_text(container))

        instructions = []
        for text in texts:
            instruction = self.instruction_from_text(text, len(instructions) + 1)
            if instruction is not None:
                instructions.append(instruction)
        return instructions
