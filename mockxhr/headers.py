"""Ordered, case-insensitive header storage for requests and responses."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Optional

from requests.structures import CaseInsensitiveDict


class HeadersContainer:
    """Header names compare case-insensitively and keep first-insertion order.

    Adding a name that is already present appends the new value to the
    existing one, separated by ``", "``.
    """

    def __init__(self, headers: Optional[Mapping[str, str]] = None) -> None:
        self._headers: CaseInsensitiveDict = CaseInsensitiveDict()
        if headers:
            for name, value in headers.items():
                self.add_header(name, value)

    def reset(self) -> None:
        self._headers.clear()

    def get_header(self, name: str) -> Optional[str]:
        return self._headers.get(name)

    def get_all(self) -> str:
        """Serialize as ``name: value\\r\\n`` lines with lower-cased names."""

        return "".join(f"{name}: {value}\r\n" for name, value in self._headers.lower_items())

    def add_header(self, name: str, value: str) -> None:
        lowered = name.lower()
        for key, existing in self._headers.items():
            if key.lower() == lowered:
                # First spelling of the name wins
                self._headers[key] = f"{existing}, {value}"
                return
        self._headers[name] = value

    def items(self) -> list[tuple[str, str]]:
        return list(self._headers.items())

    def to_dict(self) -> dict[str, str]:
        return dict(self._headers.items())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._headers

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def __repr__(self) -> str:
        return f"HeadersContainer({self.to_dict()!r})"


__all__ = ["HeadersContainer"]
