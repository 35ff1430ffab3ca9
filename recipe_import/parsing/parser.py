from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.text import clean_text, strip_list_marker
from .measurements import (
    extract_leading_note,
    extract_preparation,
    is_optional_ingredient,
    parse_quantity_and_unit,
    parse_temperature,
    parse_time,
    split_unit,
)

DEFAULT_TITLE = "Untitled Recipe"


class ParseError(ValueError):
    """Structural parse failure for a self-describing format."""

    def __init__(self, message: str, line_number: Optional[int] = None, context: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.line_number = line_number
        self.context = context


class ParserContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    file_name: Optional[str] = None
    file_url: Optional[str] = None
    source_url: Optional[str] = None
    metadata: Dict[str, str] = Field(default_factory=dict)


class ParsedIngredient(BaseModel):
    model_config = ConfigDict(frozen=True)

    order: int
    section_name: Optional[str] = None
    quantity: Optional[Decimal] = None
    unit: Optional[str] = None
    ingredient_name: str
    preparation: Optional[str] = None
    notes: Optional[str] = None
    is_optional: bool = False
    # Untouched source fragment
    original_text: str = ""


class ParsedInstruction(BaseModel):
    model_config = ConfigDict(frozen=True)

    step_number: int
    section_name: Optional[str] = None
    instruction_text: str
    time_minutes: Optional[int] = None
    temperature: Optional[int] = None
    temperature_unit: Optional[Literal["F", "C"]] = None


class ParsedRecipe(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = DEFAULT_TITLE
    description: Optional[str] = None
    author: Optional[str] = None
    source: Optional[str] = None
    source_url: Optional[str] = None
    prep_time_minutes: Optional[int] = None
    cook_time_minutes: Optional[int] = None
    total_time_minutes: Optional[int] = None
    servings: Optional[int] = None
    ingredients: List[ParsedIngredient] = []
    instructions: List[ParsedInstruction] = []
    tags: List[str] = []
    categories: List[str] = []
    image_url: Optional[str] = None
    metadata: Dict[str, Any] = {}

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)

        name = data.get("name")
        if not name or not str(name).strip():
            data["name"] = DEFAULT_TITLE
        else:
            data["name"] = str(name).strip()

        prep = data.get("prep_time_minutes")
        cook = data.get("cook_time_minutes")
        if data.get("total_time_minutes") is None and (prep is not None or cook is not None):
            data["total_time_minutes"] = (prep or 0) + (cook or 0)
        return data


class RecipeParser(ABC):
    """
    One source format.

    `priority` orders detection in the registry (lower is tried first).
    """

    name: str = ""
    source_type: str = ""
    priority: int = 100

    @abstractmethod
    def can_parse(self, content: str, context: ParserContext) -> bool:
        """Cheap check whether this parser understands the content."""

    @abstractmethod
    def parse(self, content: str, context: ParserContext) -> List[ParsedRecipe]:
        """Parse raw content into zero or more canonical recipes."""

    def ingredient_from_text(
        self, text: str, order: int, section_name: Optional[str] = None
    ) -> Optional[ParsedIngredient]:
        """Run one ingredient line through the measurement grammar."""
        line = clean_text(text)
        if not line:
            return None

        quantity, unit, remaining = parse_quantity_and_unit(line)

        # "1 (14 oz) can tomatoes": the size note sits between quantity and unit
        notes = None
        if quantity is not None and unit is None and remaining.startswith("("):
            notes, remaining = extract_leading_note(remaining)
            unit, remaining = split_unit(remaining)

        if not remaining:
            # a bare "2 cups" names nothing
            return None

        name, preparation = extract_preparation(remaining)
        if not name:
            return None

        return ParsedIngredient(
            order=order,
            section_name=section_name,
            quantity=quantity,
            unit=unit,
            ingredient_name=name,
            preparation=preparation,
            notes=notes,
            is_optional=is_optional_ingredient(line),
            original_text=text.strip(),
        )

    def instruction_from_text(
        self, text: str, step_number: int, section_name: Optional[str] = None
    ) -> Optional[ParsedInstruction]:
        """Build a step, picking up any duration or oven temperature it mentions."""
        body = clean_text(strip_list_marker(text))
        if not body:
            return None

        temperature, temperature_unit = parse_temperature(body)
        return ParsedInstruction(
            step_number=step_number,
            section_name=section_name,
            instruction_text=body,
            time_minutes=_duration_in(body),
            temperature=temperature,
            temperature_unit=temperature_unit,
        )


def _duration_in(text: str) -> Optional[int]:
    # A whole sentence is never a bare minute count
    if text.strip().isdigit():
        return None
    return parse_time(text)
