from recipe_import import db


def test_init_engine_creates_taxonomy_tables():
    db.init_engine("sqlite://")

    assert db.table_names() == ["base_ingredients", "ingredient_base_components"]


def test_get_db_yields_a_session_bound_to_the_engine():
    engine = db.init_engine("sqlite://")

    gen = db.get_db()
    session = next(gen)
    assert session.get_bind() is engine
    gen.close()


def test_init_engine_can_skip_table_creation():
    db.init_engine("sqlite://", create_tables=False)
    assert db.table_names() == []
