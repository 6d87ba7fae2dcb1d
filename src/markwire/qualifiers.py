from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from markwire.markers import Named

M = TypeVar("M")

TagExtractor = Callable[[Any], Any]


class QualifierRegistry:
    """Map qualifier marker kinds to functions extracting a tag from a marker.

    Entries are consulted in registration order; the first kind with an
    instance among a point's metadata supplies the tag. Register qualifiers
    before the first injection: the registry is read without locking by every
    classification.
    """

    def __init__(self) -> None:
        self._extractors: dict[type[Any], TagExtractor] = {}
        self.register(Named, _named_value)

    def register(self, marker_kind: type[M], extractor: Callable[[M], Any]) -> None:
        """Register (or replace) the tag extractor for ``marker_kind``."""
        if not isinstance(marker_kind, type):
            msg = f"Qualifier marker kind must be a class, got {marker_kind!r}"
            raise TypeError(msg)
        self._extractors[marker_kind] = extractor

    def extract_tag(self, metadata: Iterable[Any]) -> Any:
        """Return the tag carried by ``metadata``, or ``None`` when unqualified."""
        metadata = tuple(metadata)
        for marker_kind, extractor in self._extractors.items():
            marker = next((item for item in metadata if isinstance(item, marker_kind)), None)
            if marker is not None:
                return extractor(marker)
        return None

    def __contains__(self, marker_kind: object) -> bool:
        return marker_kind in self._extractors

    def __len__(self) -> int:
        return len(self._extractors)


def _named_value(marker: Named) -> Any:
    return marker.value
