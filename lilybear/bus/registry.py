"""Registry of live subscriber names."""

from collections import Counter


class AddressRegistry:
    """
    Tracks which names currently have at least one subscription.

    Names are counted rather than stored once: several subscribers may share
    a name and the name stays live until the last of them leaves.
    """

    def __init__(self):
        self._counts: Counter[str] = Counter()

    def add(self, name: str) -> None:
        self._counts[name] += 1

    def discard(self, name: str) -> None:
        """Drop one registration of `name`; unknown names are ignored."""
        if self._counts[name] <= 1:
            self._counts.pop(name, None)
        else:
            self._counts[name] -= 1

    def count(self, name: str) -> int:
        return self._counts.get(name, 0)

    def names(self) -> list[str]:
        """Sorted unique live names."""
        return sorted(self._counts)

    def __contains__(self, name: object) -> bool:
        return self._counts.get(name, 0) > 0  # type: ignore[arg-type]

    def __len__(self) -> int:
        return len(self._counts)
