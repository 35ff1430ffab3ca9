import re
from typing import Dict, List, NamedTuple, Optional

from ..core.text import clean_md, clean_text, normalize_keycap_numbers, strip_list_marker
from .measurements import parse_servings, parse_time
from .parser import DEFAULT_TITLE, ParsedRecipe, ParserContext, RecipeParser

UNKNOWN = "unknown"

# Common headers
SECTION_HEADERS = [
    ("ingredients", re.compile(r"^(?:ingredients?|shopping list|what you(?:'ll)? need)\s*:?$", re.I)),
    ("instructions", re.compile(
        r"^(?:instructions?|directions?|steps?|method|procedure|preparation|how to make(?: it)?)\s*:?$", re.I
    )),
    ("description", re.compile(r"^(?:description|about|intro(?:duction)?)\s*:?$", re.I)),
    ("notes", re.compile(r"^(?:notes?|tips?|cook'?s notes?)\s*:?$", re.I)),
]

# Metadata lines, recognised in any section
META_PATTERNS = [
    ("servings", re.compile(r"^(?:servings?|serves|yield|makes)\b\s*:?\s*(.+)$", re.I)),
    ("servings", re.compile(r"^(\d+\s*(?:-|to)?\s*\d*)\s+servings?$", re.I)),
    ("prep_time_minutes", re.compile(r"^prep(?:aration)?(?:\s+time\s*:?|\s*:)\s*(.+)$", re.I)),
    ("cook_time_minutes", re.compile(r"^cook(?:ing)?(?:\s+time\s*:?|\s*:)\s*(.+)$", re.I)),
    ("total_time_minutes", re.compile(r"^(?:total\b(?:\s+time)?\s*:?|ready in\b)\s*(.+)$", re.I)),
]

# Metadata anywhere in a line: "Prep: 10 min | Cook: 20 min", "serves 4 people"
_UNTIL_SEPARATOR = r"([^|;•]+)"
META_SCANS = [
    ("servings", re.compile(r"\b(?:serves|servings?|yields?)\s*:?\s*(\d+)\b", re.I)),
    ("servings", re.compile(r"\b(\d+)\s*servings?\b", re.I)),
    ("prep_time_minutes", re.compile(rf"\bprep(?:aration)?(?:\s+time\s*:?|\s*:)\s*{_UNTIL_SEPARATOR}", re.I)),
    ("cook_time_minutes", re.compile(rf"\bcook(?:ing)?(?:\s+time\s*:?|\s*:)\s*{_UNTIL_SEPARATOR}", re.I)),
    ("total_time_minutes", re.compile(rf"\b(?:total(?:\s+time\s*:?|\s*:)|ready\s+in\b)\s*{_UNTIL_SEPARATOR}", re.I)),
]

NUMBERED_STEP_RE = re.compile(r"^(?:step\s*)?\d{1,2}[.):]\s", re.I)
QUANTITY_WORD_RE = re.compile(
    r"^(?:a|an|some|half|quarter|one|two|three|four|five|six|few|handful)\s+", re.I
)
UNIT_KEYWORD_RE = re.compile(
    r"\b(?:cups?|tsps?|tbsps?|teaspoons?|tablespoons?|oz|ounces?|lbs?|pounds?|grams?|kg|ml|"
    r"liters?|litres?|pinch|dash|cloves?)\b",
    re.I,
)
COOKING_VERBS = (
    "preheat", "heat", "cook", "bake", "boil", "simmer", "fry", "sauté", "saute",
    "mix", "stir", "whisk", "blend", "combine", "add", "pour", "spread",
    "place", "arrange", "transfer", "remove", "drain", "rinse", "wash",
    "chop", "dice", "mince", "slice", "cut", "peel", "grate", "shred",
    "season", "serve", "let", "bring", "reduce", "cover",
)
COOKING_VERB_RE = re.compile(rf"^(?:{'|'.join(COOKING_VERBS)})\b", re.I)


class LineClass(NamedTuple):
    """What a line is, and the section state after reading it."""

    kind: str  # header | meta | ingredient | instruction | description | note | skip
    section: str
    field: Optional[str] = None
    value: Optional[str] = None


def detect_section(line: str) -> Optional[str]:
    for section, pattern in SECTION_HEADERS:
        if pattern.match(line):
            return section
    return None


def scan_meta(line: str) -> Dict[str, int]:
    """Every servings/time value mentioned in a line, first mention per field."""
    found: Dict[str, int] = {}
    for field, pattern in META_SCANS:
        if field in found:
            continue
        for m in pattern.finditer(line):
            value = parse_servings(m.group(1)) if field == "servings" else parse_time(m.group(1))
            if value is not None:
                found[field] = value
                break
    return found


def classify_line(line: str, section: str = UNKNOWN) -> LineClass:
    """
    Classify one stripped line given the current section.

    Pure: the caller threads `LineClass.section` into the next call.
    """
    new_section = detect_section(line)
    if new_section:
        return LineClass("header", new_section)

    for field, pattern in META_PATTERNS:
        m = pattern.match(line)
        if m:
            return LineClass("meta", section, field, m.group(1).strip())

    if section == "ingredients":
        return LineClass("ingredient", section)
    if section == "instructions":
        return LineClass("instruction", section)
    if section == "description":
        return LineClass("description", section)
    if section == "notes":
        return LineClass("note", section)

    # No header seen yet: guess from the line itself
    if NUMBERED_STEP_RE.match(line):
        return LineClass("instruction", section)
    if line[0].isdigit() or QUANTITY_WORD_RE.match(line):
        return LineClass("ingredient", section)
    if COOKING_VERB_RE.match(line):
        return LineClass("instruction", section)
    if UNIT_KEYWORD_RE.search(line):
        return LineClass("ingredient", section)
    lower = line.lower()
    if len(line) > 40 and ("until" in lower or "minute" in lower):
        return LineClass("instruction", section)
    return LineClass("skip", section)


class RuleBasedParser(RecipeParser):
    """Free text of last resort: accepts anything that is not blank."""

    name = "RuleBasedParser"
    source_type = "Text"
    priority = 1000

    def can_parse(self, content: str, context: ParserContext) -> bool:
        return bool(content and content.strip())

    def parse(self, content: str, context: ParserContext) -> List[ParsedRecipe]:
        # 1. Normalize emojis (quick win)
        text = normalize_keycap_numbers(content or "")

        lines = [line.strip() for line in text.split("\n") if line.strip()]
        text_lines = list(lines)
        if not lines:
            # Nothing to read: an empty recipe rather than no recipe
            title = context.metadata.get("title_hint") or context.file_name or DEFAULT_TITLE
            return [ParsedRecipe(name=title, source_url=context.source_url)]

        title_hint = context.metadata.get("title_hint")
        if title_hint:
            title = title_hint
        elif detect_section(lines[0]):
            # Text opens straight into a section: nothing to use as a title
            title = context.file_name or DEFAULT_TITLE
        else:
            title = clean_md(lines[0])
            lines = lines[1:]

        fields = {"name": title}
        ingredients, instructions, description, notes = [], [], [], []
        section = UNKNOWN

        for line in lines:
            result = classify_line(line, section)
            section = result.section

            if result.kind == "meta":
                self._apply_meta(fields, result.field, result.value)
            elif result.kind == "ingredient":
                ingredient = self.ingredient_from_text(strip_list_marker(line), len(ingredients))
                if ingredient is not None:
                    ingredients.append(ingredient)
            elif result.kind == "instruction":
                instruction = self.instruction_from_text(line, len(instructions) + 1)
                if instruction is not None:
                    instructions.append(instruction)
            elif result.kind == "description":
                description.append(clean_md(line))
            elif result.kind == "note":
                notes.append(clean_md(line))

        # Servings and times can sit anywhere, even mid-line; explicit meta lines win
        for line in text_lines:
            for field, value in scan_meta(line).items():
                fields.setdefault(field, value)

        return [
            ParsedRecipe(
                **fields,
                description=clean_text(" ".join(description)) or None,
                source_url=context.source_url,
                ingredients=ingredients,
                instructions=instructions,
                metadata={"notes": "\n".join(notes)} if notes else {},
            )
        ]

    def _apply_meta(self, fields: dict, field: str, value: str) -> None:
        if field == "servings":
            servings = parse_servings(value)
            if servings is not None:
                fields["servings"] = servings
        else:
            minutes = parse_time(value)
            if minutes is not None:
                fields[field] = minutes
