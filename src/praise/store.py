"""Rating storage behind a small repository interface."""

from __future__ import annotations

import threading
from collections import defaultdict
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Protocol

from praise.models import ContributorRating, PRRating, RatingRecord


class RatingStore(Protocol):
    """What the rating service needs from persistence."""

    def add(self, record: RatingRecord) -> None: ...

    def get_ratings_for(self, contributor_id: str) -> list[PRRating]: ...

    def get_records_for(self, contributor_id: str) -> list[RatingRecord]: ...

    def get_records_for_organization(self, organization_id: str) -> list[RatingRecord]: ...

    def contributors_in(self, organization_id: str) -> list[str]: ...

    def username_for(self, contributor_id: str) -> str | None: ...

    def contributor_lock(self, contributor_id: str) -> AbstractContextManager[None]: ...

    def cache_summary(self, contributor_id: str, summary: ContributorRating) -> None: ...

    def cached_summary(self, contributor_id: str) -> ContributorRating | None: ...


class InMemoryRatingStore:
    """Append-only, process-local rating store.

    Records are kept per contributor in insertion order. Re-adding a
    record with an id that is already stored is a no-op. Contributors are
    joined to an organization the first time one of their records names it.
    """

    def __init__(self) -> None:
        self._records: dict[str, RatingRecord] = {}
        self._by_contributor: dict[str, list[str]] = defaultdict(list)
        self._members: dict[str, list[str]] = defaultdict(list)
        self._usernames: dict[str, str] = {}
        self._summaries: dict[str, ContributorRating] = {}
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def add(self, record: RatingRecord) -> None:
        with self._guard:
            if record.id in self._records:
                return
            self._records[record.id] = record
            self._by_contributor[record.contributor_id].append(record.id)
            members = self._members[record.organization_id]
            if record.contributor_id not in members:
                members.append(record.contributor_id)
            if record.github is not None:
                self._usernames.setdefault(record.contributor_id, record.github.author)

    def get_records_for(self, contributor_id: str) -> list[RatingRecord]:
        with self._guard:
            return [self._records[rid] for rid in self._by_contributor.get(contributor_id, [])]

    def get_ratings_for(self, contributor_id: str) -> list[PRRating]:
        return [record.rating for record in self.get_records_for(contributor_id)]

    def get_records_for_organization(self, organization_id: str) -> list[RatingRecord]:
        with self._guard:
            return [r for r in self._records.values() if r.organization_id == organization_id]

    def contributors_in(self, organization_id: str) -> list[str]:
        with self._guard:
            return list(self._members.get(organization_id, []))

    def username_for(self, contributor_id: str) -> str | None:
        return self._usernames.get(contributor_id)

    @contextmanager
    def contributor_lock(self, contributor_id: str) -> Iterator[None]:
        """Serialize read-modify-write sequences for one contributor."""
        with self._guard:
            lock = self._locks.setdefault(contributor_id, threading.RLock())
        with lock:
            yield

    def cache_summary(self, contributor_id: str, summary: ContributorRating) -> None:
        self._summaries[contributor_id] = summary

    def cached_summary(self, contributor_id: str) -> ContributorRating | None:
        return self._summaries.get(contributor_id)

    def __len__(self) -> int:
        return len(self._records)
