"""
Resolve API member references to stored people.

Upstream member ids come from a different system than our people table, so
members are matched by name and district. The matcher never creates a
person: anything it can't place is logged and skipped by the caller.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from nysync.database.normalization import (
    api_district_to_db,
    fold_name,
    normalize_name,
)
from nysync.database.store import BillStore
from nysync.models.nys_api import ApiMember
from nysync.models.people import Person

logger = logging.getLogger(__name__)


class PeopleCache:
    """
    The people table, loaded once per sync run.

    Loading is lazy; invalidate() forces the next lookup to reload.
    """

    def __init__(self, store: BillStore):
        self.store = store
        self._people: Optional[List[Person]] = None

    async def get(self) -> List[Person]:
        if self._people is None:
            self._people = await self.store.load_people()
            logger.info(f"Loaded {len(self._people)} people for matching")
        return self._people

    def invalidate(self) -> None:
        self._people = None

    @property
    def loaded(self) -> bool:
        return self._people is not None


@dataclass
class _Target:
    """Pre-folded comparison keys for one API member."""
    full_name: str
    first_name: str
    last_name: str
    district: Optional[str]
    normalized_name: str


class PersonMatcher:
    """
    Match API members to people using a cascade of strategies.

    First hit wins; every comparison is accent- and case-insensitive:

    1. last name within the member's district (SD-### / HD-###)
    2. exact full name
    3. first_name and last_name fields
    4. normalized full name (no punctuation, suffixes or middle initials)
    5. unique last name, or unique last name + first initial
    """

    def __init__(self, cache: PeopleCache):
        self.cache = cache
        self.unmatched = 0

    async def match(self, member: Optional[ApiMember]) -> Optional[int]:
        """
        Find the people_id for an API member.

        Returns:
            people_id, or None if no strategy matched
        """
        if member is None or not member.has_identity:
            return None

        people = await self.cache.get()
        if not people:
            return None

        target = self._target(member)
        for strategy in (
            self._by_district,
            self._by_full_name,
            self._by_name_fields,
            self._by_normalized_name,
            self._by_last_name,
        ):
            person = strategy(target, people)
            if person is not None:
                return person.people_id

        self.unmatched += 1
        logger.warning(
            f"No People match for: {member.display_name} "
            f"(API memberId: {member.member_id}, district: {target.district or 'unknown'})"
        )
        return None

    @staticmethod
    def _target(member: ApiMember) -> _Target:
        full_name = member.full_name or member.short_name or ""
        last_name = member.last_name
        first_name = member.first_name
        # Some payloads only carry fullName; split it so the field strategies still apply
        if full_name and not last_name:
            parts = normalize_name(full_name).split()
            if len(parts) >= 2:
                first_name = first_name or parts[0]
                last_name = parts[-1]
        return _Target(
            full_name=fold_name(full_name),
            first_name=fold_name(first_name),
            last_name=fold_name(last_name),
            district=api_district_to_db(member.district_code, member.chamber),
            normalized_name=normalize_name(full_name),
        )

    @staticmethod
    def _by_district(target: _Target, people: List[Person]) -> Optional[Person]:
        if not (target.last_name and target.district):
            return None
        return next(
            (p for p in people
             if p.district == target.district and fold_name(p.last_name) == target.last_name),
            None,
        )

    @staticmethod
    def _by_full_name(target: _Target, people: List[Person]) -> Optional[Person]:
        if not target.full_name:
            return None
        return next((p for p in people if fold_name(p.name) == target.full_name), None)

    @staticmethod
    def _by_name_fields(target: _Target, people: List[Person]) -> Optional[Person]:
        if not (target.first_name and target.last_name):
            return None
        return next(
            (p for p in people
             if fold_name(p.first_name) == target.first_name
             and fold_name(p.last_name) == target.last_name),
            None,
        )

    @staticmethod
    def _by_normalized_name(target: _Target, people: List[Person]) -> Optional[Person]:
        if not target.normalized_name:
            return None
        return next(
            (p for p in people if p.name and normalize_name(p.name) == target.normalized_name),
            None,
        )

    @staticmethod
    def _by_last_name(target: _Target, people: List[Person]) -> Optional[Person]:
        if not target.last_name:
            return None
        candidates = [p for p in people if fold_name(p.last_name) == target.last_name]
        if len(candidates) == 1:
            return candidates[0]
        if len(candidates) > 1 and target.first_name:
            initial = target.first_name[0]
            narrowed = [p for p in candidates if fold_name(p.first_name).startswith(initial)]
            if len(narrowed) == 1:
                return narrowed[0]
        return None


@dataclass
class SyncContext:
    """
    Per-run state threaded through the sync.

    Each strategy invocation builds its own context, so the people cache
    never leaks between independent runs.
    """
    store: BillStore
    cache: PeopleCache = field(init=False)
    matcher: PersonMatcher = field(init=False)

    def __post_init__(self):
        self.cache = PeopleCache(self.store)
        self.matcher = PersonMatcher(self.cache)

    def reset(self) -> None:
        """Drop cached people and counters before a fresh run."""
        self.cache.invalidate()
        self.matcher.unmatched = 0
