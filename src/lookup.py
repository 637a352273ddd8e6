from typing import Any, List, Optional, Sequence, Tuple

from xmltree import TEXT_KEY

KeyPath = Tuple[str, ...]


def resolve(tree: Any, path: Sequence[str]) -> Any:
    """Walk ``tree`` one key at a time. Returns None as soon as a key is missing."""
    if tree is None or not path:
        return None
    current = tree
    for key in path:
        if isinstance(current, dict) and key in current:
            current = current[key]
        else:
            return None
    return current


def first_value(tree: Any, candidates: Sequence[Sequence[str]]) -> Any:
    for path in candidates:
        value = resolve(tree, path)
        if value not in (None, ""):
            return value
    return None


def text_of(value: Any) -> Optional[str]:
    if isinstance(value, list):
        for item in value:
            text = text_of(item)
            if text:
                return text
        return None
    if isinstance(value, dict):
        return text_of(value.get(TEXT_KEY))
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def first_text(tree: Any, candidates: Sequence[Sequence[str]]) -> Optional[str]:
    for path in candidates:
        text = text_of(resolve(tree, path))
        if text:
            return text
    return None


def as_list(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    if value is None:
        return []
    return [value]
