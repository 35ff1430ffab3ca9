import re
from typing import List

_KEYCAP = "\ufe0f\u20e3"
_KEYCAP_NUMBERS = {f"{d}{_KEYCAP}": f"{d}." for d in range(10)}
_KEYCAP_NUMBERS["\U0001f51f"] = "10."

# "1.", "2)", "3 -", "Step 4:", bullets
LIST_MARKER_RE = re.compile(
    r"^\s*(?:(?:step\s*)?\d{1,2}\s*[.):\-]\s+|(?:step\s*)\d{1,2}\s+|[-•*]\s+)",
    re.IGNORECASE,
)

# A numbered marker that starts a new item after the end of a sentence
_INLINE_MARKER_RE = re.compile(r"(?<=[.!?])\s+(?=\d{1,2}[.)]\s)")


def clean_md(text: str) -> str:
    """
    Sanitize markdown artifacts from text.
    Removes:
    - Leading headers (#, ##)
    - Bold markers (**, __)
    - Leading bullets (-, *)
    """
    if not text:
        return ""

    # Remove bolding (**text** -> text)
    text = re.sub(r"(\*\*|__)(.*?)\1", r"\2", text)

    # Remove leading headers (# Title -> Title)
    text = re.sub(r"^\s*#+\s+", "", text)

    # Remove leading bullets (- Item -> Item)
    text = re.sub(r"^\s*[-*]\s+", "", text)

    return text.strip()


def clean_text(text: str) -> str:
    """Collapse runs of whitespace and trim."""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def normalize_keycap_numbers(text: str) -> str:
    for k, v in _KEYCAP_NUMBERS.items():
        text = text.replace(k, v)
    return text


def strip_list_marker(text: str) -> str:
    """Drop a leading list marker ("1.", "2)", "Step 3:", "- ") from a line."""
    if not text:
        return ""
    return LIST_MARKER_RE.sub("", text, count=1).strip()


def split_top_level(text: str, delimiter: str = ",") -> List[str]:
    """
    Split on `delimiter` only where it is not nested inside parentheses.

    Empty segments are kept, so joining the result with the delimiter gives
    back the input. A stray closing parenthesis never drives the depth below
    zero.
    """
    parts: List[str] = []
    current: List[str] = []
    depth = 0

    for ch in text or "":
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        elif ch == delimiter and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)

    parts.append("".join(current))
    return parts


def split_numbered_blob(text: str) -> List[str]:
    """
    Break a text blob into items on newlines and on inline numbered markers
    ("Mix well. 2. Bake."), stripping the markers.
    """
    items: List[str] = []
    for line in (text or "").splitlines():
        for piece in _INLINE_MARKER_RE.split(line):
            piece = clean_text(strip_list_marker(piece))
            if piece:
                items.append(piece)
    return items
