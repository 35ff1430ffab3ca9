from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ..deps import get_registry
from ..parsing import ParserContext, ParserRegistry
from ..schemas import ImportRequest, ParserInfo
from ..services.ingestion import ImportResult, ImportService

router = APIRouter()


@router.get("/parsers", response_model=List[ParserInfo])
def list_parsers(registry: ParserRegistry = Depends(get_registry)):
    """Parsers in detection order."""
    return [ParserInfo(name=p.name, source_type=p.source_type, priority=p.priority) for p in registry.parsers]


@router.post("/parse", response_model=ImportResult)
def parse_recipes(body: ImportRequest, registry: ParserRegistry = Depends(get_registry)):
    """Parse raw content into canonical recipes. Nothing is persisted."""
    if body.parser_name and registry.get_by_name(body.parser_name) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Parser '{body.parser_name}' not found")

    context = ParserContext(
        file_name=body.file_name,
        file_url=body.file_url,
        source_url=body.source_url,
        metadata=body.metadata,
    )
    result = ImportService(registry).run(body.content, context, parser_name=body.parser_name)
    if not result.recipes and result.errors:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=result.errors)
    return result
