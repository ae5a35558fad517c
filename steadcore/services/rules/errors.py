"""Error types for content lookup and content verification.

Two families:
- ConfigError: a lookup against an already-verified Config failed
  (stale handle, unknown name, missing effect).
- VerifError: authored content could not be turned into a Config. Carries
  a trail of context lines, innermost first, appended as the error unwinds
  through the verifier.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field


class ConfigError(Exception):
    """Base class for failed lookups against a loaded config."""


class UnknownArchetypeHandle(ConfigError):
    def __init__(self, handle: int):
        self.handle = handle
        super().__init__(f"no archetype found for handle {handle}")


class UnknownArchetypeName(ConfigError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"no archetype found with name {name!r}")


class UnknownEffect(ConfigError):
    def __init__(self, item_handle: int, effect_index: int):
        self.item_handle = item_handle
        self.effect_index = effect_index
        super().__init__(
            f"item with handle {item_handle} has no plant effect at index {effect_index}"
        )


def _suggestion_text(suggestions: list[str]) -> str:
    if not suggestions:
        return ""
    return " Perhaps you meant " + ", or ".join(suggestions) + "?"


@dataclass
class UnknownItem:
    """An item name that matched no item archetype."""

    name: str
    suggestions: list[str] = field(default_factory=list)

    def describe(self) -> str:
        return (
            f"referenced item {self.name}, but no item with this name could be found."
            + _suggestion_text(self.suggestions)
        )


@dataclass
class UnknownPlant:
    """A plant name that matched no plant archetype."""

    name: str
    suggestions: list[str] = field(default_factory=list)

    def describe(self) -> str:
        return (
            f"referenced plant {self.name}, but no plant with this name could be found."
            + _suggestion_text(self.suggestions)
        )


@dataclass
class Custom:
    message: str

    def describe(self) -> str:
        return self.message


VerifErrorKind = UnknownItem | UnknownPlant | Custom


class VerifError(Exception):
    """Authored content failed verification.

    Attributes:
        kind: The violated rule.
        context: Descriptions of the enclosing constructs, innermost first.
    """

    def __init__(self, kind: VerifErrorKind, context: list[str] | None = None):
        self.kind = kind
        self.context = context or []
        super().__init__(kind.describe())

    @classmethod
    def custom(cls, message: str) -> "VerifError":
        return cls(Custom(message))

    def note(self, context: str) -> "VerifError":
        """Append a description of an enclosing construct."""
        self.context.append(context)
        return self

    def report(self) -> str:
        lines = ["I ran into trouble verifying your config"]
        lines.extend(f"> {ctx}" for ctx in self.context)
        lines.append(f"as {self.kind.describe()}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.report()


@contextmanager
def noting(context: str) -> Iterator[None]:
    """Append `context` to any VerifError raised inside the block."""
    try:
        yield
    except VerifError as e:
        e.note(context)
        raise
