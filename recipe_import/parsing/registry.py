import logging
from typing import Iterable, List, Optional

from .json_parser import JsonRecipeParser
from .mastercook import MasterCookParser
from .meal_master import MealMasterParser
from .parser import ParsedRecipe, ParseError, ParserContext, RecipeParser
from .rule_based_parser import RuleBasedParser
from .vendors import PaprikaParser, RecipeKeeperParser
from .web import WebRecipeParser, site_parsers

logger = logging.getLogger(__name__)


def default_parsers() -> List[RecipeParser]:
    return [
        MealMasterParser(),
        MasterCookParser(),
        RecipeKeeperParser(),
        PaprikaParser(),
        JsonRecipeParser(),
        *site_parsers(),
        WebRecipeParser(),
        RuleBasedParser(),
    ]


class ParserRegistry:
    """
    Ordered set of parsers. Detection walks them by ascending `priority`
    (ties keep registration order) and picks the first that accepts.
    """

    def __init__(self, parsers: Optional[Iterable[RecipeParser]] = None):
        parsers = list(default_parsers() if parsers is None else parsers)

        seen = set()
        for parser in parsers:
            if parser.name in seen:
                raise ValueError(f"Duplicate parser name: {parser.name}")
            seen.add(parser.name)

        # sorted() is stable
        self._parsers = tuple(sorted(parsers, key=lambda p: p.priority))

    @property
    def parsers(self) -> List[RecipeParser]:
        return list(self._parsers)

    def names(self) -> List[str]:
        return [p.name for p in self._parsers]

    def detect(self, content: str, context: ParserContext) -> Optional[RecipeParser]:
        for parser in self._parsers:
            try:
                if parser.can_parse(content, context):
                    return parser
            except Exception as e:
                logger.warning(f"Parser {parser.name} failed during detection: {e}")
        return None

    def get_by_name(self, name: str) -> Optional[RecipeParser]:
        for parser in self._parsers:
            if parser.name == name:
                return parser
        return None

    def get_by_source_type(self, source_type: str) -> Optional[RecipeParser]:
        wanted = (source_type or "").lower()
        for parser in self._parsers:
            if parser.source_type.lower() == wanted:
                return parser
        return None

    def parse(self, content: str, context: ParserContext, parser_name: Optional[str] = None) -> List[ParsedRecipe]:
        """Parse with the named parser, or the detected one."""
        if parser_name:
            parser = self.get_by_name(parser_name)
            if parser is None:
                raise ParseError(f"Unknown parser: {parser_name}")
        else:
            parser = self.detect(content, context)
            if parser is None:
                raise ParseError("No parser available for this content")

        logger.info(f"Parsing with {parser.name}")
        return parser.parse(content, context)
