from typing import List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from recipe_import.main import app
from recipe_import.db import Base
from recipe_import.deps import get_db, get_session_factory
from recipe_import.models import BaseIngredient
from recipe_import.services.taxonomy import BaseIngredientEntry

# --- Test Database Setup ---

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

# Note: check_same_thread is needed for SQLite.
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool  # Important for in-memory to share connection across threads/sessions
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    """Test client with DB override."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    """Direct database session for setup."""
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
def taxonomy(db_session):
    """A small approved vocabulary plus one unapproved entry."""
    rows = [
        BaseIngredient(id="flour", name="Wheat Flour", category="grain", common_names="flour, plain flour", is_approved=True),
        BaseIngredient(id="niacin", name="Niacin", category="vitamin", description="Vitamin B3", is_approved=True),
        BaseIngredient(id="iron", name="Iron", category="mineral", is_approved=True),
        BaseIngredient(id="sugar", name="Sugar", category="sweetener", common_names="sucrose, cane sugar", is_approved=True),
        BaseIngredient(id="salt", name="Salt", category="seasoning", common_names="sodium chloride", is_approved=True),
        BaseIngredient(id="msg", name="Monosodium Glutamate", category="additive", is_approved=False),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


class FakeTaxonomyRepository:
    """In-memory stand-in for the taxonomy, recording every call."""

    def __init__(self, entries: Optional[List[BaseIngredientEntry]] = None):
        self.entries = list(entries or [])
        self.find_calls: List[str] = []
        self.search_calls: List[tuple] = []
        self.links: List[dict] = []
        self.fail_find_for = set()
        self.fail_link_for = set()

    def find_by_name(self, name):
        self.find_calls.append(name)
        if name in self.fail_find_for:
            raise RuntimeError("taxonomy unavailable")
        return next((e for e in self.entries if e.name == name), None)

    def search(self, query, approved_only=True, limit=10):
        self.search_calls.append((query, approved_only, limit))
        q = query.lower()
        hits = [
            e for e in self.entries
            if (not approved_only or e.is_approved)
            and (q in e.name.lower() or any(q in n.lower() for n in e.common_names) or q in (e.description or "").lower())
        ]
        return sorted(hits, key=lambda e: e.name)[:limit]

    def link_component(self, ingredient_id, base_ingredient_id, order_index, is_main, notes=None, created_by=None):
        if base_ingredient_id in self.fail_link_for:
            raise RuntimeError("link write failed")
        self.links.append({
            "ingredient_id": ingredient_id,
            "base_ingredient_id": base_ingredient_id,
            "order_index": order_index,
            "is_main": is_main,
            "notes": notes,
            "created_by": created_by,
        })
        return f"link-{len(self.links)}"


@pytest.fixture
def fake_repo():
    return FakeTaxonomyRepository([
        BaseIngredientEntry(id="flour", name="Wheat Flour", common_names=["flour"], is_approved=True),
        BaseIngredientEntry(id="niacin", name="Niacin", is_approved=True),
        BaseIngredientEntry(id="iron", name="Iron", is_approved=True),
        BaseIngredientEntry(id="sugar", name="Sugar", common_names=["sucrose"], is_approved=True),
        BaseIngredientEntry(id="salt", name="Salt", is_approved=True),
        BaseIngredientEntry(id="msg", name="Monosodium Glutamate", is_approved=False),
    ])
