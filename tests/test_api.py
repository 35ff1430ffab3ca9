import json


def test_ready(client):
    r = client.get("/api/ready")
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["db_ok"] is True
    assert body["parsers"] > 0


def test_list_parsers_in_detection_order(client):
    r = client.get("/api/imports/parsers")
    assert r.status_code == 200
    parsers = r.json()

    assert parsers[0]["name"] == "MealMasterParser"
    assert parsers[-1] == {"name": "RuleBasedParser", "source_type": "Text", "priority": 1000}
    priorities = [p["priority"] for p in parsers]
    assert priorities == sorted(priorities)


def test_parse_json_recipe(client):
    content = json.dumps({
        "name": "Pancakes",
        "recipeIngredient": ["1 cup flour", "2 eggs"],
        "recipeInstructions": "Whisk everything.\nFry in a hot pan.",
    })
    r = client.post("/api/imports/parse", json={"content": content, "file_name": "pancakes.json"})

    assert r.status_code == 200
    body = r.json()
    assert body["parser_name"] == "JsonRecipeParser"
    assert body["errors"] == []
    recipe = body["recipes"][0]
    assert recipe["name"] == "Pancakes"
    assert [i["ingredient_name"] for i in recipe["ingredients"]] == ["flour", "eggs"]
    assert len(recipe["instructions"]) == 2


def test_parse_with_unknown_parser_is_404(client):
    r = client.post("/api/imports/parse", json={"content": "x", "parser_name": "Nope"})
    assert r.status_code == 404


def test_parse_failure_is_422(client):
    r = client.post("/api/imports/parse", json={"content": "{", "parser_name": "JsonRecipeParser"})

    assert r.status_code == 422
    assert r.json()["detail"][0].startswith("Failed to parse JSON recipe")


def test_parse_blank_content_is_422(client):
    r = client.post("/api/imports/parse", json={"content": "  "})
    assert r.status_code == 422
    assert r.json()["detail"] == ["No parser could read this content"]


def test_decompose_label(client, taxonomy):
    r = client.post(
        "/api/ingredients/parse",
        json={"text": "Enriched Wheat Flour (Wheat Flour, Niacin, Iron), Sugar, Salt"},
    )

    assert r.status_code == 200
    components = r.json()["components"]
    assert [c["name"] for c in components] == ["Enriched Wheat Flour", "Sugar", "Salt"]
    assert [c["base_ingredient_id"] for c in components] == [None, "sugar", "salt"]
    subs = components[0]["sub_components"]
    assert [c["base_ingredient_id"] for c in subs] == ["flour", "niacin", "iron"]
    assert all(c["is_parenthetical"] for c in subs)


def test_decompose_rejects_empty_text(client):
    r = client.post("/api/ingredients/parse", json={"text": ""})
    assert r.status_code == 422


def test_link_base_components(client, taxonomy, db_session):
    from recipe_import.models import IngredientBaseComponent

    r = client.post(
        "/api/ingredients/ing-42/base-components",
        json={"text": "Sugar (Sucrose), Salt", "created_by": "tester"},
    )

    assert r.status_code == 200
    assert r.json() == {"ingredient_id": "ing-42", "base_ingredient_ids": ["sugar", "salt"]}

    rows = (
        db_session.query(IngredientBaseComponent)
        .order_by(IngredientBaseComponent.order_index)
        .all()
    )
    assert [(row.base_ingredient_id, row.order_index, row.is_main_component) for row in rows] == [
        ("sugar", 0, True),
        ("salt", 1, False),
    ]
    assert rows[0].notes == "Contains: Sucrose"
    assert {row.created_by for row in rows} == {"tester"}
