"""Helpers for reading author-format (YAML) nodes.

Authored content spells tagged unions as single-key mappings
(`{OneOf: [...]}`) or, for variants without a payload, as a bare string
(`Nothing`). Every shape error is raised as a VerifError so it picks up
context on its way out of the verifier.
"""

from typing import Any

from .errors import VerifError


def tagged(node: Any, what: str) -> tuple[str, Any]:
    """Split an author node into its variant tag and payload."""
    if isinstance(node, str):
        return node, None
    if isinstance(node, dict) and len(node) == 1:
        ((tag, body),) = node.items()
        if isinstance(tag, str):
            return tag, body
    raise VerifError.custom(
        f"expected {what} written as a single-key mapping naming its variant, found {node!r}"
    )


def number(value: Any, what: str) -> float:
    # YAML booleans are ints in Python, but never a sensible number here
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise VerifError.custom(f"expected a number for {what}, found {value!r}")
    return float(value)


def integer(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise VerifError.custom(f"expected a whole number for {what}, found {value!r}")
    return value


def name(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise VerifError.custom(f"expected a name for {what}, found {value!r}")
    return value


def pair(value: Any, what: str) -> tuple[Any, Any]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise VerifError.custom(f"expected a two-element list for {what}, found {value!r}")
    return value[0], value[1]


def sequence(value: Any, what: str) -> list[Any]:
    if not isinstance(value, list):
        raise VerifError.custom(f"expected a list for {what}, found {value!r}")
    return value
