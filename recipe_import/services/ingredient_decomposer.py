"""
Packaged-food ingredient label decomposition.

"Enriched Wheat Flour (Wheat Flour, Niacin, Iron), Sugar, Salt" becomes three
top-level components, the first owning three parenthetical sub-components.
The tree is built completely before any taxonomy lookup, and annotation
returns a new tree.
"""

import asyncio
import logging
import re
from typing import Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from ..core.text import split_top_level
from ..settings import settings
from .entity_resolver import EntityResolver
from .taxonomy import BaseIngredientEntry

logger = logging.getLogger("recipe_import.decomposer")

# "(< 2%)", "(2%)", "(less than 2%)", "(2% or less)"
PERCENT_RE = re.compile(
    r"\s*\(\s*(?:[<>≤]=?\s*|less than\s+)?\d+(?:\.\d+)?\s*%(?:\s+or less)?\s*\)", re.IGNORECASE
)
LABEL_RE = re.compile(r"^\s*ingredients?\s*:\s*", re.IGNORECASE)
QUALIFIER_RE = re.compile(
    r"^(?:contains?\s+)?(?:\d+(?:\.\d+)?\s*%\s+or\s+less\s+of|less\s+than\s+\d+(?:\.\d+)?\s*%\s+of)"
    r"(?:\s+the\s+following)?\s*:?\s*",
    re.IGNORECASE,
)
LEADING_CONNECTOR_RE = re.compile(r"^(?:and/or|and|or)\s+", re.IGNORECASE)
TRAILING_CONNECTOR_RE = re.compile(r"\s+(?:and/or|and|or)\s*$", re.IGNORECASE)
FOOTNOTE_CHARS = "*†‡"


class ParsedIngredientComponent(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    base_ingredient_id: Optional[str] = None
    matched_name: Optional[str] = None
    order_index: int
    is_parenthetical: bool = False
    sub_components: Optional[List["ParsedIngredientComponent"]] = None

    def walk(self) -> Iterator["ParsedIngredientComponent"]:
        """This component, then its descendants depth-first."""
        yield self
        for child in self.sub_components or []:
            yield from child.walk()


ParsedIngredientComponent.model_rebuild()


class ParsedIngredientResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    original_string: str
    components: List[ParsedIngredientComponent] = []

    def walk(self) -> Iterator[ParsedIngredientComponent]:
        for component in self.components:
            yield from component.walk()


def _trim_edges(text: str) -> str:
    text = text.strip().rstrip(".").strip()
    text = QUALIFIER_RE.sub("", text)
    text = LEADING_CONNECTOR_RE.sub("", text)
    return TRAILING_CONNECTOR_RE.sub("", text).strip()


def clean_ingredient_name(name: str) -> str:
    """Strip qualifiers, connectors, percentages, footnote markers and periods."""
    name = PERCENT_RE.sub("", name or "")
    for ch in FOOTNOTE_CHARS:
        name = name.replace(ch, "")
    return _trim_edges(name)


def split_parentheticals(token: str) -> Optional[Tuple[str, List[str]]]:
    """
    "Name (a, b) (c)" -> ("Name ", ["a, b", "c"]).

    None unless a non-empty head is followed only by balanced top-level
    groups (and whitespace).
    """
    start = token.find("(")
    if start <= 0 or not token[:start].strip():
        return None

    groups: List[str] = []
    depth = 0
    begin = start
    for i in range(start, len(token)):
        ch = token[i]
        if ch == "(":
            if depth == 0:
                begin = i + 1
            depth += 1
        elif ch == ")":
            if depth == 0:
                return None
            depth -= 1
            if depth == 0:
                groups.append(token[begin:i])
        elif depth == 0 and not ch.isspace():
            return None

    if depth:
        return None
    return token[:start], groups


class IngredientDecomposer:
    def __init__(self, resolver: Optional[EntityResolver] = None):
        self.resolver = resolver

    # --- Tree ---

    def parse(self, text: str) -> ParsedIngredientResult:
        """Build the component tree without touching the taxonomy."""
        original = text or ""
        body = LABEL_RE.sub("", original)
        return ParsedIngredientResult(
            original_string=original,
            components=self._split(body, parenthetical=False),
        )

    def _split(self, text: str, parenthetical: bool) -> List[ParsedIngredientComponent]:
        components: List[ParsedIngredientComponent] = []
        for token in split_top_level(text, ","):
            component = self._component(token, len(components), parenthetical)
            if component is not None:
                components.append(component)
        return components

    def _component(self, token: str, order_index: int, parenthetical: bool) -> Optional[ParsedIngredientComponent]:
        token = _trim_edges(PERCENT_RE.sub("", token))
        if not token:
            return None

        split = split_parentheticals(token)
        if split:
            head, groups = split
            name = clean_ingredient_name(head)
            if name:
                # "Citric Acid (Acidulant) (Preservative)": every group feeds one list
                return ParsedIngredientComponent(
                    name=name,
                    order_index=order_index,
                    is_parenthetical=parenthetical,
                    sub_components=self._split(", ".join(groups), parenthetical=True) or None,
                )

        name = clean_ingredient_name(token)
        if not name:
            return None
        return ParsedIngredientComponent(name=name, order_index=order_index, is_parenthetical=parenthetical)

    # --- Resolution ---

    def decompose(self, text: str) -> ParsedIngredientResult:
        """Parse, then resolve every distinct name one after another."""
        result = self.parse(text)
        if self.resolver is None:
            return result
        matches = {name: self.resolver.resolve(name) for name in self._unique_names(result)}
        return self._annotate(result, matches)

    async def decompose_async(self, text: str, max_concurrency: Optional[int] = None) -> ParsedIngredientResult:
        """Parse, then resolve distinct names concurrently in worker threads."""
        result = self.parse(text)
        if self.resolver is None:
            return result

        semaphore = asyncio.Semaphore(max_concurrency or settings.resolver_concurrency)

        async def resolve(name: str):
            async with semaphore:
                return name, await asyncio.to_thread(self.resolver.resolve, name)

        pairs = await asyncio.gather(*(resolve(name) for name in self._unique_names(result)))
        return self._annotate(result, dict(pairs))

    def _unique_names(self, result: ParsedIngredientResult) -> List[str]:
        return list(dict.fromkeys(c.name for c in result.walk()))

    def _annotate(
        self, result: ParsedIngredientResult, matches: Dict[str, Optional[BaseIngredientEntry]]
    ) -> ParsedIngredientResult:
        components = [self._annotate_component(c, matches) for c in result.components]
        resolved = sum(1 for name, entry in matches.items() if entry is not None)
        logger.info(f"Resolved {resolved}/{len(matches)} ingredient names")
        return result.model_copy(update={"components": components})

    def _annotate_component(
        self, component: ParsedIngredientComponent, matches: Dict[str, Optional[BaseIngredientEntry]]
    ) -> ParsedIngredientComponent:
        update = {}
        entry = matches.get(component.name)
        if entry is not None:
            update["base_ingredient_id"] = entry.id
            update["matched_name"] = entry.name
        if component.sub_components is not None:
            update["sub_components"] = [self._annotate_component(c, matches) for c in component.sub_components]
        return component.model_copy(update=update) if update else component
