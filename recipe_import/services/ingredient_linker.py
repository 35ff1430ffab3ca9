import logging
from typing import List, Optional

from ..settings import settings
from .entity_resolver import EntityResolver
from .ingredient_decomposer import IngredientDecomposer, ParsedIngredientComponent
from .taxonomy import TaxonomyRepository

logger = logging.getLogger("recipe_import.linker")


class IngredientLinker:
    """
    Writes resolved label components as base-component links of a product
    ingredient.

    - The first top-level component is the main one.
    - Top-level links keep their order index; nested links get
      `order_offset + n` (n counts nested components depth-first from 1) so
      they sort after every top-level link.
    - A base ingredient is linked at most once.
    - Each link is independent: a failure is logged and skipped.
    """

    def __init__(
        self,
        repository: TaxonomyRepository,
        decomposer: Optional[IngredientDecomposer] = None,
        order_offset: Optional[int] = None,
    ):
        self.repository = repository
        self.decomposer = decomposer or IngredientDecomposer(EntityResolver(repository))
        self.order_offset = settings.sub_component_order_offset if order_offset is None else order_offset

    def link(self, ingredient_id: str, text: str, created_by: Optional[str] = None) -> List[str]:
        """Returns the base-ingredient ids that were linked, in link order."""
        result = self.decomposer.decompose(text)
        linked: List[str] = []
        sequence = 0

        for position, component in enumerate(result.components):
            notes = None
            if component.sub_components:
                notes = "Contains: " + ", ".join(c.name for c in component.sub_components)
            self._link(
                ingredient_id, component, component.order_index, position == 0, notes, created_by, linked
            )

            for parent, child in self._nested(component):
                sequence += 1
                self._link(
                    ingredient_id, child, self.order_offset + sequence, False,
                    f"Sub-component of {parent.name}", created_by, linked,
                )

        logger.info(f"Linked {len(linked)} base ingredient(s) to ingredient {ingredient_id}")
        return linked

    def _nested(self, component: ParsedIngredientComponent):
        """(parent, child) pairs below `component`, depth-first."""
        for child in component.sub_components or []:
            yield component, child
            yield from self._nested(child)

    def _link(
        self,
        ingredient_id: str,
        component: ParsedIngredientComponent,
        order_index: int,
        is_main: bool,
        notes: Optional[str],
        created_by: Optional[str],
        linked: List[str],
    ) -> None:
        base_id = component.base_ingredient_id
        if not base_id or base_id in linked:
            return
        try:
            self.repository.link_component(
                ingredient_id, base_id, order_index, is_main, notes=notes, created_by=created_by
            )
        except Exception as e:
            logger.warning(
                f"Failed to link base ingredient {base_id} ('{component.name}') to ingredient {ingredient_id}: {e}"
            )
            return
        linked.append(base_id)
