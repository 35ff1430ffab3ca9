"""Base-ingredient taxonomy access.

The resolver and linker only see the `TaxonomyRepository` protocol; the SQL
implementation opens a fresh session per call so it can be used from worker
threads.
"""

from typing import Callable, List, Optional, Protocol

from pydantic import BaseModel, ConfigDict
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..models import BaseIngredient, IngredientBaseComponent, generate_uuid


class BaseIngredientEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: Optional[str] = None
    description: Optional[str] = None
    common_names: List[str] = []
    is_approved: bool = False

    @classmethod
    def from_row(cls, row: BaseIngredient) -> "BaseIngredientEntry":
        names = [n.strip() for n in (row.common_names or "").split(",") if n.strip()]
        return cls(
            id=row.id,
            name=row.name,
            category=row.category,
            description=row.description,
            common_names=names,
            is_approved=bool(row.is_approved),
        )


class TaxonomyRepository(Protocol):
    def find_by_name(self, name: str) -> Optional[BaseIngredientEntry]: ...

    def search(self, query: str, approved_only: bool = True, limit: int = 10) -> List[BaseIngredientEntry]: ...

    def link_component(
        self,
        ingredient_id: str,
        base_ingredient_id: str,
        order_index: int,
        is_main: bool,
        notes: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> str: ...


class SqlTaxonomyRepository:
    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def find_by_name(self, name: str) -> Optional[BaseIngredientEntry]:
        """Exact, case-sensitive name match."""
        with self.session_factory() as db:
            row = (
                db.query(BaseIngredient)
                .filter(BaseIngredient.name == name)
                .order_by(BaseIngredient.is_approved.desc())
                .first()
            )
            return BaseIngredientEntry.from_row(row) if row else None

    def search(self, query: str, approved_only: bool = True, limit: int = 10) -> List[BaseIngredientEntry]:
        """Substring match on name, common names or description, ordered by name."""
        with self.session_factory() as db:
            q = db.query(BaseIngredient).filter(
                or_(
                    BaseIngredient.name.icontains(query, autoescape=True),
                    BaseIngredient.common_names.icontains(query, autoescape=True),
                    BaseIngredient.description.icontains(query, autoescape=True),
                )
            )
            if approved_only:
                q = q.filter(BaseIngredient.is_approved.is_(True))
            rows = q.order_by(BaseIngredient.name).limit(limit).all()
            return [BaseIngredientEntry.from_row(r) for r in rows]

    def link_component(
        self,
        ingredient_id: str,
        base_ingredient_id: str,
        order_index: int,
        is_main: bool,
        notes: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> str:
        with self.session_factory() as db:
            link_id = generate_uuid()
            link = IngredientBaseComponent(
                id=link_id,
                ingredient_id=ingredient_id,
                base_ingredient_id=base_ingredient_id,
                order_index=order_index,
                is_main_component=is_main,
                notes=notes,
                created_by=created_by,
            )
            db.add(link)
            try:
                db.commit()
            except Exception:
                db.rollback()
                raise
            return link_id
