"""Requirement catalog.

An immutable, ordered mapping of requirement ID to description. Catalog
order is the order every report uses (gap list, matrix, CSV rows).
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from reqtrace_core.config import SuiteConfig


class RequirementCatalog(Mapping[str, str]):
    """Read-only ``requirement ID -> description`` mapping in catalog order.

    Example:
        >>> catalog = RequirementCatalog({"1.1": "Verify sheets exist"})
        >>> catalog["1.1"]
        'Verify sheets exist'
        >>> catalog.missing(["1.1", "9.9"])
        ['9.9']
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, str]) -> None:
        self._entries = MappingProxyType(dict(entries))

    @classmethod
    def from_config(cls, config: SuiteConfig) -> RequirementCatalog:
        """Build the catalog from a loaded suite configuration."""
        return cls(config.requirements)

    def __getitem__(self, req_id: str) -> str:
        return self._entries[req_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"RequirementCatalog({len(self)} requirements)"

    def missing(self, req_ids: list[str] | tuple[str, ...]) -> list[str]:
        """Return the IDs from ``req_ids`` that are not in the catalog."""
        return [r for r in req_ids if r not in self._entries]

    def category_of(self, req_id: str) -> str:
        """Return the ``<category>`` prefix of a dotted requirement ID."""
        return req_id.split(".", 1)[0]
