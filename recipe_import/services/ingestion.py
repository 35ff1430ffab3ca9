import logging
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel

from ..parsing import ParsedRecipe, ParseError, ParserContext, ParserRegistry

logger = logging.getLogger("recipe_import.ingestion")


class ImportResult(BaseModel):
    parser_name: Optional[str] = None
    recipes: List[ParsedRecipe] = []
    errors: List[str] = []

    @property
    def ok(self) -> bool:
        return bool(self.recipes) and not self.errors


class ImportService:
    def __init__(self, registry: Optional[ParserRegistry] = None):
        # We can inject a registry with a custom parser set here
        self.registry = registry or ParserRegistry()

    def run(
        self, content: str, context: Optional[ParserContext] = None, parser_name: Optional[str] = None
    ) -> ImportResult:
        context = context or ParserContext()
        label = context.file_name or context.source_url or "content"

        if parser_name:
            parser = self.registry.get_by_name(parser_name)
            if parser is None:
                return ImportResult(errors=[f"Unknown parser: {parser_name}"])
        else:
            parser = self.registry.detect(content, context)
            if parser is None:
                logger.info(f"No parser accepted {label}")
                return ImportResult(errors=["No parser could read this content"])

        logger.info(f"Importing {label} with {parser.name}")
        try:
            recipes = parser.parse(content, context)
        except ParseError as e:
            logger.warning(f"{parser.name} rejected {label}: {e.message}")
            where = f" (line {e.line_number})" if e.line_number else ""
            return ImportResult(parser_name=parser.name, errors=[f"{e.message}{where}"])

        errors = [] if recipes else ["No recipes found in content"]
        logger.info(f"Imported {len(recipes)} recipe(s) from {label}")
        return ImportResult(parser_name=parser.name, recipes=recipes, errors=errors)

    def run_batch(
        self, documents: Iterable[Tuple[str, ParserContext]], parser_name: Optional[str] = None
    ) -> List[ImportResult]:
        """Import each (content, context) pair on its own; one bad file never stops the rest."""
        results = []
        for content, context in documents:
            try:
                results.append(self.run(content, context, parser_name))
            except Exception as e:
                label = (context and (context.file_name or context.source_url)) or "content"
                logger.exception(f"Unexpected failure importing {label}")
                results.append(ImportResult(errors=[f"Import failed: {e}"]))
        return results
