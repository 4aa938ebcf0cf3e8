"""Detection of GitLab items that already have a GitHub counterpart.

GitLab and GitHub ids live in different namespaces, so items are matched
only by exact title after trimming surrounding whitespace. The destination
snapshots are fetched once per phase and never updated while creating.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeVar

if TYPE_CHECKING:
    from collections.abc import Iterable


class Titled(Protocol):
    @property
    def title(self) -> str: ...


T = TypeVar("T", bound=Titled)


def titles_match(source_title: str, destination_title: str) -> bool:
    return source_title.strip() == destination_title.strip()


def find_existing(source_title: str, destination_items: Iterable[T]) -> T | None:
    """Return the first destination item whose title matches, or None."""
    for item in destination_items:
        if titles_match(source_title, item.title):
            return item
    return None


def already_migrated(source_title: str, destination_items: Iterable[Titled]) -> bool:
    """Check whether an item with this title already exists in the destination."""
    return find_existing(source_title, destination_items) is not None
