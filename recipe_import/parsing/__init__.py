from .parser import (
    DEFAULT_TITLE,
    ParsedIngredient,
    ParsedInstruction,
    ParsedRecipe,
    ParseError,
    ParserContext,
    RecipeParser,
)
from .meal_master import MealMasterParser
from .mastercook import MasterCookParser
from .json_parser import JsonRecipeParser
from .vendors import PaprikaParser, RecipeKeeperParser
from .rule_based_parser import LineClass, RuleBasedParser, classify_line
from .web import SITE_SCRAPERS, WebRecipeParser
from .registry import ParserRegistry, default_parsers

__all__ = [
    "DEFAULT_TITLE", "ParsedIngredient", "ParsedInstruction", "ParsedRecipe", "ParseError",
    "ParserContext", "RecipeParser", "MealMasterParser", "MasterCookParser", "JsonRecipeParser",
    "PaprikaParser", "RecipeKeeperParser", "LineClass", "RuleBasedParser", "classify_line",
    "SITE_SCRAPERS", "WebRecipeParser", "ParserRegistry", "default_parsers",
]
