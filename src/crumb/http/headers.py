"""Immutable, case-insensitive HTTP headers built from ASGI byte pairs."""

from collections.abc import Iterator, Mapping


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive HTTP headers.

    Names are lowercased and everything is decoded (latin-1) once, at
    construction. ``headers[name]`` is the first value; ``get_list`` returns
    every value, for headers that may repeat (several ``Cookie`` lines).
    """

    __slots__ = ("_items",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        self._items: tuple[tuple[str, str], ...] = tuple(
            (name.decode("latin-1").lower(), value.decode("latin-1")) for name, value in raw
        )

    def __getitem__(self, key: str) -> str:
        key = key.lower()
        for name, value in self._items:
            if name == key:
                return value
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and any(name == key.lower() for name, _ in self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name for name, _ in self._items))

    def __len__(self) -> int:
        return len(dict.fromkeys(name for name, _ in self._items))

    def __repr__(self) -> str:
        return f"Headers({dict(self)!r})"

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*, in arrival order."""
        key = key.lower()
        return [value for name, value in self._items if name == key]

    def first_value(self, key: str) -> str | None:
        """First element of a comma-separated header, stripped and lowercased.

        ``X-Forwarded-Proto: https, http`` gives ``"https"``: the hop
        closest to the client is listed first.
        """
        value = self.get(key)
        if value is None:
            return None
        return value.split(",", 1)[0].strip().lower()
