"""
Recipe extraction from already-fetched HTML.

Tier 1 reads schema.org JSON-LD through the JSON parser. Tier 2 walks ordered
CSS selector lists per field. When neither yields an ingredient or a step the
result is a single placeholder, so a page always produces one recipe.
"""

import logging
import re
from typing import List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from ..core.text import clean_text
from .json_parser import JsonRecipeParser
from .measurements import parse_servings, parse_time
from .parser import ParsedRecipe, ParseError, ParserContext, RecipeParser

logger = logging.getLogger(__name__)

PLACEHOLDER_TITLE = "Web Recipe Import"

# (parser name, domain, source label)
SITE_SCRAPERS = [
    ("AllRecipesParser", "allrecipes.com", "AllRecipes"),
    ("FoodNetworkParser", "foodnetwork.com", "Food Network"),
    ("TastyParser", "tasty.co", "Tasty"),
    ("SeriousEatsParser", "seriouseats.com", "Serious Eats"),
    ("NYTCookingParser", "cooking.nytimes.com", "NYT Cooking"),
]

HTML_RE = re.compile(r"<\s*(?:!doctype\s+html|html|head|body|script|div|article|main)\b", re.IGNORECASE)
RECIPE_MARKER_RE = re.compile(r'"@type"\s*:\s*(?:\[[^\]]*?)?"Recipe"')

# Field -> selectors, most specific first
TITLE_SELECTORS = [
    'h1[itemprop="name"]',
    "h1.recipe-title",
    'h1[class*="recipe"]',
    ".recipe-header h1",
    ".recipe-title",
    "h1",
]
DESCRIPTION_SELECTORS = [
    '[itemprop="description"]',
    ".recipe-summary",
    ".recipe-description",
    'meta[name="description"]',
]
INGREDIENT_SELECTORS = [
    '[itemprop="recipeIngredient"]',
    ".recipe-ingredients li",
    ".ingredients li",
    '[class*="ingredient"] li',
    ".recipe-ingredient",
]
INSTRUCTION_SELECTORS = [
    '[itemprop="recipeInstructions"] li',
    '[itemprop="recipeInstructions"]',
    ".recipe-instructions li",
    ".instructions li",
    ".recipe-method li",
    ".directions li",
    '[class*="instruction"] li',
]
IMAGE_SELECTORS = [
    '[itemprop="image"]',
    'meta[property="og:image"]',
    ".recipe-image img",
    ".recipe-hero img",
]
PREP_TIME_SELECTORS = ['[itemprop="prepTime"]', ".prep-time"]
COOK_TIME_SELECTORS = ['[itemprop="cookTime"]', ".cook-time"]
YIELD_SELECTORS = ['[itemprop="recipeYield"]', ".recipe-yield", ".servings"]


def _node_text(node) -> str:
    if node.name == "meta":
        return clean_text(node.get("content") or "")
    return clean_text(node.get_text(" ", strip=True))


def _select_first(soup: BeautifulSoup, selectors: List[str]):
    for selector in selectors:
        node = soup.select_one(selector)
        if node is not None:
            return node
    return None


def _select_texts(soup: BeautifulSoup, selectors: List[str]) -> List[str]:
    """Texts of every node matched by the first selector that matches anything."""
    for selector in selectors:
        nodes = soup.select(selector)
        if nodes:
            return [t for t in (_node_text(n) for n in nodes) if t]
    return []


def _duration(soup: BeautifulSoup, selectors: List[str]) -> Optional[int]:
    node = _select_first(soup, selectors)
    if node is None:
        return None
    # <meta itemprop="prepTime" content="PT15M"> or <time datetime="PT15M">
    return parse_time(node.get("content") or node.get("datetime") or _node_text(node))


class WebRecipeParser(RecipeParser):
    """
    HTML page with a known http(s) source URL.

    With `domain` set the parser only claims pages from that site; otherwise it
    claims any page.
    """

    source_type = "WebScraper"

    def __init__(self, name: str = "WebScraperParser", domain: Optional[str] = None,
                 source_label: Optional[str] = None, priority: Optional[int] = None):
        self.name = name
        self.domain = domain.lower() if domain else None
        self.source_label = source_label
        self.priority = priority if priority is not None else (50 if domain else 60)
        self._json = JsonRecipeParser()

    def can_parse(self, content: str, context: ParserContext) -> bool:
        url = context.source_url or ""
        if not url.lower().startswith(("http://", "https://")):
            return False
        if not HTML_RE.search(content or ""):
            return False
        if self.domain is None:
            return True
        host = (urlparse(url).hostname or "").lower()
        return host == self.domain or host.endswith("." + self.domain)

    def parse(self, content: str, context: ParserContext) -> List[ParsedRecipe]:
        soup = BeautifulSoup(content or "", "html.parser")

        recipes = self._from_json_ld(soup, context)
        if recipes:
            return recipes

        recipe = self._from_selectors(soup, context)
        if recipe.ingredients or recipe.instructions:
            logger.info(f"{self.name}: extracted recipe from HTML selectors for {context.source_url}")
            return [recipe]

        logger.info(f"{self.name}: nothing extractable at {context.source_url}, returning placeholder")
        return [
            ParsedRecipe(
                name=PLACEHOLDER_TITLE,
                description=f"Recipe imported from {context.source_url}",
                source=self._source(context),
                source_url=context.source_url,
            )
        ]

    def _source(self, context: ParserContext) -> Optional[str]:
        return self.source_label or urlparse(context.source_url or "").hostname

    def _from_json_ld(self, soup: BeautifulSoup, context: ParserContext) -> List[ParsedRecipe]:
        for script in soup.find_all("script", type="application/ld+json"):
            block = script.string or script.get_text()
            if not block or not RECIPE_MARKER_RE.search(block):
                continue
            try:
                recipes = self._json.parse(block, context)
            except ParseError as e:
                logger.warning(f"{self.name}: unreadable JSON-LD at {context.source_url}: {e.message}")
                continue
            if recipes:
                source = self._source(context)
                return [
                    r.model_copy(update={"source_url": context.source_url, "source": r.source or source})
                    for r in recipes
                ]
        return []

    def _from_selectors(self, soup: BeautifulSoup, context: ParserContext) -> ParsedRecipe:
        title = _select_first(soup, TITLE_SELECTORS)
        description = _select_first(soup, DESCRIPTION_SELECTORS)

        image_url = None
        image = _select_first(soup, IMAGE_SELECTORS)
        if image is not None:
            src = image.get("content") or image.get("src") or image.get("data-src")
            if src:
                image_url = urljoin(context.source_url or "", src)

        ingredients = []
        for text in _select_texts(soup, INGREDIENT_SELECTORS):
            ingredient = self.ingredient_from_text(text, len(ingredients))
            if ingredient is not None:
                ingredients.append(ingredient)

        instructions = []
        for text in _select_texts(soup, INSTRUCTION_SELECTORS):
            instruction = self.instruction_from_text(text, len(instructions) + 1)
            if instruction is not None:
                instructions.append(instruction)

        servings_node = _select_first(soup, YIELD_SELECTORS)
        return ParsedRecipe(
            name=_node_text(title) if title is not None else PLACEHOLDER_TITLE,
            description=(_node_text(description) or None) if description is not None else None,
            source=self._source(context),
            source_url=context.source_url,
            prep_time_minutes=_duration(soup, PREP_TIME_SELECTORS),
            cook_time_minutes=_duration(soup, COOK_TIME_SELECTORS),
            servings=parse_servings(_node_text(servings_node)) if servings_node is not None else None,
            image_url=image_url,
            ingredients=ingredients,
            instructions=instructions,
        )


def site_parsers() -> List[WebRecipeParser]:
    return [WebRecipeParser(name, domain, label) for name, domain, label in SITE_SCRAPERS]
