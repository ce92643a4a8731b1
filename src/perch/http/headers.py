"""Read-only request headers."""

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, str]):
    """Request headers looked up case-insensitively.

    Built from the ASGI byte pairs. A header sent more than once is
    combined into one comma-separated value, as HTTP allows for list
    headers.
    """

    __slots__ = ("_values",)

    def __init__(self, raw: Iterable[tuple[bytes, bytes]] = ()) -> None:
        values: dict[str, str] = {}
        for name, value in raw:
            key = name.decode("latin-1").lower()
            text = value.decode("latin-1")
            values[key] = f"{values[key]}, {text}" if key in values else text
        self._values = values

    def __getitem__(self, key: str) -> str:
        return self._values[key.lower()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Headers({self._values!r})"
