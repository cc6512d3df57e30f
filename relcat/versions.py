"""Version identifiers, ordering and branch matching."""

from __future__ import annotations

from dataclasses import dataclass
from functools import total_ordering
from typing import Optional, Tuple

from .errors import VersionFormatError

WILDCARD = "x"


@total_ordering
@dataclass(frozen=True)
class VersionId:
    """Three-part version number where any part may be the ``x`` wildcard.

    Wildcard parts are stored as ``None``. Concrete release versions never
    carry wildcards, branch patterns such as ``3.0.x`` do.
    """

    parts: Tuple[Optional[int], Optional[int], Optional[int]]

    @classmethod
    def parse(cls, text: str) -> "VersionId":
        pieces = text.strip().split(".")
        if len(pieces) != 3:
            raise VersionFormatError(f"expected three version parts in {text!r}")
        parts = []
        for piece in pieces:
            if piece == WILDCARD:
                parts.append(None)
            elif piece.isdigit():
                parts.append(int(piece))
            else:
                raise VersionFormatError(f"invalid version part {piece!r} in {text!r}")
        return cls((parts[0], parts[1], parts[2]))

    @property
    def is_wildcard(self) -> bool:
        return any(part is None for part in self.parts)

    def filename(self) -> str:
        """Render with wildcards replaced by ``0`` for use in output paths."""
        return ".".join("0" if part is None else str(part) for part in self.parts)

    def __str__(self) -> str:
        return ".".join(WILDCARD if part is None else str(part) for part in self.parts)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, VersionId):
            return NotImplemented
        return compare(self, other) < 0


def compare(a: VersionId, b: VersionId) -> int:
    """Compare two versions, returning -1, 0 or 1.

    Parts are compared left to right. The first differing part decides: a
    wildcard sorts above any number, so ``3.0.x`` is newer than every
    ``3.0.N`` and ``4.0.x`` outranks ``4.0.1``.
    """
    for left, right in zip(a.parts, b.parts):
        if left == right:
            continue
        if left is None:
            return 1
        if right is None:
            return -1
        return 1 if left > right else -1
    return 0


def matches(version: VersionId, pattern: VersionId) -> bool:
    """Return True when ``version`` belongs to the branch ``pattern``.

    ``3.0.14`` matches ``3.0.x`` and ``3.x.x`` but not ``3.1.x``. A wildcard
    on either side matches, which also allows comparing two patterns.
    """
    for left, right in zip(version.parts, pattern.parts):
        if left == right or left is None or right is None:
            continue
        return False
    return True


__all__ = ["VersionId", "WILDCARD", "compare", "matches"]
