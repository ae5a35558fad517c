"""N-gram name search, used to suggest fixes for misspelled references."""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class SearchResult:
    text: str
    similarity: float


class NgramCorpus:
    """A fixed set of names, indexed by padded character n-grams.

    Similarity starts from the number of n-grams two names share divided by
    the number of n-grams in either of them, counting repeats. With `warp`
    above 1 the score becomes 1 - (1 - shared / all) ** warp, which lifts
    short names where a single typo breaks most of their n-grams.
    """

    def __init__(
        self, names: Iterable[str], arity: int = 3, pad: str = " ", warp: float = 2.0
    ):
        self.arity = arity
        self.warp = warp
        self.pad = pad * (arity - 1)
        self._entries = [(name, self._grams(name)) for name in dict.fromkeys(names)]

    def __len__(self) -> int:
        return len(self._entries)

    def _grams(self, text: str) -> Counter:
        padded = f"{self.pad}{text.lower()}{self.pad}"
        return Counter(padded[i : i + self.arity] for i in range(len(padded) - self.arity + 1))

    def _similarity(self, shared: int, total: int) -> float:
        if not total:
            return 0.0
        if self.warp == 1.0:
            return shared / total
        return (total**self.warp - (total - shared) ** self.warp) / total**self.warp

    def search(self, query: str, threshold: float, limit: int | None = None) -> list[SearchResult]:
        """Names at least `threshold` similar to `query`, best first."""
        query_grams = self._grams(query)
        query_total = sum(query_grams.values())
        results = []
        for name, grams in self._entries:
            shared = sum((query_grams & grams).values())
            total = query_total + sum(grams.values()) - shared
            similarity = self._similarity(shared, total)
            if similarity >= threshold:
                results.append(SearchResult(name, similarity))
        results.sort(key=lambda r: r.similarity, reverse=True)
        return results[:limit] if limit is not None else results

    def suggestions(self, query: str, threshold: float, limit: int | None = None) -> list[str]:
        return [r.text for r in self.search(query, threshold, limit)]
