import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from .measurements import parse_servings, parse_time
from .parser import (
    DEFAULT_TITLE,
    ParsedIngredient,
    ParsedInstruction,
    ParsedRecipe,
    ParserContext,
    RecipeParser,
)

logger = logging.getLogger(__name__)

SECTION_DELIMITER_RE = re.compile(r"MMMMM|-----")
SUBSECTION_RE = re.compile(r"^[A-Z \-]*[A-Z][A-Z \-]*$")
BANNER_RE = re.compile(r"meal-?master", re.IGNORECASE)

# header key -> ParsedRecipe field
HEADER_FIELDS = {
    "title": "name",
    "categories": "categories",
    "yield": "servings",
    "servings": "servings",
    "preparation time": "prep_time_minutes",
    "prep time": "prep_time_minutes",
    "cook time": "cook_time_minutes",
    "source": "source",
    "from": "source",
    "author": "author",
    "by": "author",
}
HEADER_RE = re.compile(
    r"^(" + "|".join(sorted(map(re.escape, HEADER_FIELDS), key=len, reverse=True)) + r")\s*:\s*(.*)$",
    re.IGNORECASE,
)
TITLE_LINE_RE = re.compile(r"^\s*title\s*:", re.IGNORECASE | re.MULTILINE)


def is_subsection_header(line: str) -> bool:
    """Short all-caps line such as "FILLING" or "-- FOR THE SAUCE --"."""
    return 3 <= len(line) <= 50 and bool(SUBSECTION_RE.match(line))


@dataclass
class _Draft:
    fields: dict = field(default_factory=lambda: {"categories": []})
    ingredients: List[ParsedIngredient] = field(default_factory=list)
    instructions: List[ParsedInstruction] = field(default_factory=list)
    section_name: Optional[str] = None

    @property
    def has_title(self) -> bool:
        return bool(self.fields.get("name"))

    @property
    def has_body(self) -> bool:
        return bool(self.ingredients or self.instructions)


class MealMasterParser(RecipeParser):
    """
    MealMaster (.mmf, .mm): line-oriented, several recipes per file separated
    by "MMMMM" or "-----" lines.

    A delimited section that carries a "Title:" line starts a new recipe;
    sections without one (e.g. "-----FILLING-----" blocks) continue the
    recipe before them.
    """

    name = "MealMasterParser"
    source_type = "MealMaster"
    priority = 10

    def can_parse(self, content: str, context: ParserContext) -> bool:
        return "MMMMM" in content or ("-----" in content and "Title:" in content)

    def parse(self, content: str, context: ParserContext) -> List[ParsedRecipe]:
        drafts: List[_Draft] = []
        for section in SECTION_DELIMITER_RE.split(content):
            if not section.strip():
                continue
            if not drafts or TITLE_LINE_RE.search(section):
                drafts.append(_Draft())
            self._read_section(section, drafts[-1])

        titled = [d for d in drafts if d.has_title]
        if titled:
            chosen = titled
        else:
            # No "Title:" anywhere: keep the sections that carried a recipe body
            chosen = [d for d in drafts if d.has_body]
            for d in chosen:
                d.fields["name"] = context.file_name or DEFAULT_TITLE

        recipes = [
            ParsedRecipe(**d.fields, ingredients=d.ingredients, instructions=d.instructions)
            for d in chosen
        ]
        logger.info(f"MealMaster: parsed {len(recipes)} recipe(s)")
        return recipes

    def _read_section(self, content: str, draft: _Draft) -> None:
        for raw_line in content.split("\n"):
            line = raw_line.strip()
            if not line or BANNER_RE.search(line):
                continue

            header = HEADER_RE.match(line)
            if header:
                self._apply_header(draft.fields, header.group(1).lower(), header.group(2).strip())
            elif is_subsection_header(line):
                draft.section_name = line.strip("-").strip()
            elif line[0].isdigit() or raw_line.startswith("  "):
                ingredient = self.ingredient_from_text(line, len(draft.ingredients), draft.section_name)
                if ingredient is not None:
                    draft.ingredients.append(ingredient)
            elif len(line) >= 20 and ":" not in line:
                instruction = self.instruction_from_text(line, len(draft.instructions) + 1, draft.section_name)
                if instruction is not None:
                    draft.instructions.append(instruction)

    def _apply_header(self, fields: dict, key: str, value: str) -> None:
        target = HEADER_FIELDS[key]
        if target == "categories":
            fields["categories"].extend(c.strip() for c in value.split(",") if c.strip())
        elif target == "servings":
            fields["servings"] = parse_servings(value)
        elif target in ("prep_time_minutes", "cook_time_minutes"):
            fields[target] = parse_time(value)
        elif value:
            fields[target] = value
