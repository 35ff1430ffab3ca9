from fastapi import APIRouter, Depends

from ..deps import get_taxonomy_repository
from ..schemas import IngredientTextRequest, LinkRequest, LinkResponse
from ..services.entity_resolver import EntityResolver
from ..services.ingredient_decomposer import IngredientDecomposer, ParsedIngredientResult
from ..services.ingredient_linker import IngredientLinker
from ..services.taxonomy import TaxonomyRepository

router = APIRouter()


@router.post("/parse", response_model=ParsedIngredientResult)
async def parse_ingredient_label(
    body: IngredientTextRequest,
    repository: TaxonomyRepository = Depends(get_taxonomy_repository),
):
    """Decompose a label into a component tree annotated with taxonomy matches."""
    decomposer = IngredientDecomposer(EntityResolver(repository))
    return await decomposer.decompose_async(body.text)


@router.post("/{ingredient_id}/base-components", response_model=LinkResponse)
def link_base_components(
    ingredient_id: str,
    body: LinkRequest,
    repository: TaxonomyRepository = Depends(get_taxonomy_repository),
):
    """Resolve the label and link every matched base ingredient (best effort)."""
    linked = IngredientLinker(repository).link(ingredient_id, body.text, created_by=body.created_by)
    return LinkResponse(ingredient_id=ingredient_id, base_ingredient_ids=linked)
