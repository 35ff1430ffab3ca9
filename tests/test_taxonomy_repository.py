import pytest
from sqlalchemy.exc import IntegrityError

from recipe_import.models import IngredientBaseComponent
from recipe_import.services.taxonomy import SqlTaxonomyRepository


@pytest.fixture
def repo(session_factory, taxonomy):
    return SqlTaxonomyRepository(session_factory)


def test_find_by_name_is_exact(repo):
    entry = repo.find_by_name("Sugar")

    assert entry.id == "sugar"
    assert entry.common_names == ["sucrose", "cane sugar"]
    assert entry.is_approved is True
    assert repo.find_by_name("sugar") is None
    assert repo.find_by_name("Sug") is None


def test_find_by_name_returns_unapproved_rows(repo):
    entry = repo.find_by_name("Monosodium Glutamate")
    assert entry is not None
    assert entry.is_approved is False


def test_search_covers_common_names_and_description(repo):
    assert [e.id for e in repo.search("cane sugar")] == ["sugar"]
    assert [e.id for e in repo.search("b3")] == ["niacin"]
    assert [e.id for e in repo.search("FLOUR")] == ["flour"]


def test_search_skips_unapproved_unless_asked(repo):
    assert repo.search("glutamate") == []
    assert [e.id for e in repo.search("glutamate", approved_only=False)] == ["msg"]


def test_search_orders_by_name_and_limits(repo):
    # "i" hits Iron, Niacin, Salt ("sodium chloride") and Wheat Flour ("plain flour")
    assert [e.name for e in repo.search("i")] == ["Iron", "Niacin", "Salt", "Wheat Flour"]
    assert [e.name for e in repo.search("i", limit=2)] == ["Iron", "Niacin"]


def test_search_treats_wildcards_literally(repo):
    assert repo.search("%") == []


def test_link_component_writes_a_row(repo, db_session):
    link_id = repo.link_component("ing-1", "salt", 2, False, notes="note", created_by="user-1")

    row = db_session.get(IngredientBaseComponent, link_id)
    assert row.ingredient_id == "ing-1"
    assert row.base_ingredient_id == "salt"
    assert row.order_index == 2
    assert row.is_main_component is False
    assert row.notes == "note"
    assert row.created_by == "user-1"


def test_duplicate_link_raises(repo, db_session):
    repo.link_component("ing-1", "salt", 0, True)

    with pytest.raises(IntegrityError):
        repo.link_component("ing-1", "salt", 1, False)

    assert db_session.query(IngredientBaseComponent).count() == 1
