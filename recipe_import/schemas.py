"""Request/response bodies for the HTTP layer."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ParserInfo(BaseModel):
    name: str
    source_type: str
    priority: int


class ImportRequest(BaseModel):
    content: str
    file_name: Optional[str] = None
    file_url: Optional[str] = None
    source_url: Optional[str] = None
    metadata: Dict[str, str] = Field(default_factory=dict)
    parser_name: Optional[str] = None


class IngredientTextRequest(BaseModel):
    text: str = Field(..., min_length=1)


class LinkRequest(BaseModel):
    text: str = Field(..., min_length=1)
    created_by: Optional[str] = None


class LinkResponse(BaseModel):
    ingredient_id: str
    base_ingredient_ids: List[str]
