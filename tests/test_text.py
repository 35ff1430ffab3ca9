import random

from recipe_import.core.text import (
    clean_md,
    clean_text,
    normalize_keycap_numbers,
    split_numbered_blob,
    split_top_level,
    strip_list_marker,
)

WORDS = ["salt", "sugar", "wheat flour", "niacin", "iron", " oil ", "", "b1"]


def _balanced(rng: random.Random, depth: int = 0) -> str:
    """Random comma separated text with balanced, possibly nested, parentheses."""
    parts = []
    for _ in range(rng.randint(1, 4)):
        word = rng.choice(WORDS)
        if depth < 3 and rng.random() < 0.4:
            word = f"{word} ({_balanced(rng, depth + 1)})"
        parts.append(word)
    return ",".join(parts)


def test_split_top_level_ignores_nested_commas():
    assert split_top_level("A (B, C), D") == ["A (B, C)", " D"]
    assert split_top_level("A (B (C, D), E), F") == ["A (B (C, D), E)", " F"]


def test_split_top_level_keeps_empty_segments():
    assert split_top_level("a,,b") == ["a", "", "b"]
    assert split_top_level("") == [""]


def test_split_top_level_stray_close_paren():
    assert split_top_level("a), b") == ["a)", " b"]


def test_split_top_level_reconstructs_random_balanced_input():
    rng = random.Random(1234)
    for _ in range(500):
        s = _balanced(rng)
        parts = split_top_level(s)
        assert ",".join(parts) == s
        for part in parts:
            # no segment ends inside an open parenthesis
            depth = 0
            for ch in part:
                depth += ch == "("
                depth -= ch == ")"
            assert depth == 0


def test_clean_md():
    assert clean_md("# **Pancakes**") == "Pancakes"
    assert clean_md("- item") == "item"
    assert clean_md("") == ""


def test_clean_text_collapses_whitespace():
    assert clean_text("  a \n\t b  ") == "a b"


def test_keycap_numbers():
    assert normalize_keycap_numbers("1\ufe0f\u20e3 Mix") == "1. Mix"
    assert normalize_keycap_numbers("\U0001f51f Serve") == "10. Serve"


def test_strip_list_marker():
    assert strip_list_marker("1. Mix") == "Mix"
    assert strip_list_marker("2) Stir") == "Stir"
    assert strip_list_marker("Step 3: Bake") == "Bake"
    assert strip_list_marker("- eggs") == "eggs"
    assert strip_list_marker("2 cups flour") == "2 cups flour"


def test_split_numbered_blob():
    blob = "1. Mix the flour. 2. Add eggs.\n3) Bake until golden."
    assert split_numbered_blob(blob) == ["Mix the flour.", "Add eggs.", "Bake until golden."]
