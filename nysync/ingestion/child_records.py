"""
Sponsors, history and votes for one bill.

Every sync here fully replaces the bill's rows from the freshly fetched
payload. History and votes are left untouched when upstream returns an
empty list, since that is more often a transient gap than a real removal.
"""
import logging
from datetime import date
from typing import Dict, List, Optional

from nysync.config.constants import ROLL_CALL_ID_MULTIPLIER
from nysync.database.normalization import map_vote_type, normalize_chamber
from nysync.database.store import BillStore
from nysync.ingestion.person_matcher import PersonMatcher
from nysync.models.legislation import HistoryEntry, MemberVote, RollCall, Sponsor
from nysync.models.nys_api import ApiBill, ApiVoteEvent

logger = logging.getLogger(__name__)


def roll_call_id_for(bill_id: int, index: int) -> int:
    """
    Roll call id for the index-th (1-based) vote event of a bill.

    Positional: if upstream reorders a bill's vote list, ids move with it.
    """
    return bill_id * ROLL_CALL_ID_MULTIPLIER + index


class ChildRecordSyncer:
    """
    Rebuild the dependent records of a bill.

    Each method returns the number of rows written, or None when it skipped
    the bill because upstream had nothing to offer. Exceptions propagate;
    the orchestrator decides how bad they are.
    """

    def __init__(self, store: BillStore, matcher: PersonMatcher):
        self.store = store
        self.matcher = matcher

    async def sync_sponsors(self, bill: ApiBill, bill_id: int) -> int:
        """
        Primary sponsor at position 1, co-sponsors at 2..N by list order,
        multi-sponsors numbered after the last co-sponsor slot. Unmatched
        members are dropped and leave a gap.
        """
        sponsors: List[Sponsor] = []

        people_id = await self.matcher.match(bill.primary_sponsor)
        if people_id is not None:
            sponsors.append(Sponsor(bill_id=bill_id, people_id=people_id, position=1))

        for i, member in enumerate(bill.co_sponsors):
            people_id = await self.matcher.match(member)
            if people_id is not None:
                sponsors.append(Sponsor(bill_id=bill_id, people_id=people_id, position=i + 2))

        start = len(bill.co_sponsors) + 2
        for i, member in enumerate(bill.multi_sponsors):
            people_id = await self.matcher.match(member)
            if people_id is not None:
                sponsors.append(Sponsor(bill_id=bill_id, people_id=people_id, position=start + i))

        return await self.store.replace_sponsors(bill_id, sponsors)

    async def sync_history(self, bill: ApiBill, bill_id: int) -> Optional[int]:
        """Replace the bill's action history from its latest amendment."""
        actions = bill.latest_actions()
        if not actions:
            logger.debug(f"No actions upstream for bill {bill_id}, keeping stored history")
            return None

        entries = [
            HistoryEntry(
                bill_id=bill_id,
                date=action.date or date.today().isoformat(),
                sequence=action.sequence_no,
                action=action.action_text,
                chamber=normalize_chamber(action.chamber),
            )
            for action in actions
        ]
        return await self.store.replace_history(bill_id, entries)

    async def sync_votes(self, bill: ApiBill, bill_id: int) -> Optional[int]:
        """
        Replace the bill's roll calls and member votes.

        Returns:
            Number of roll calls written, or None if upstream had no votes
        """
        if not bill.votes:
            logger.debug(f"No votes upstream for bill {bill_id}, keeping stored roll calls")
            return None

        removed = await self.store.delete_votes_for_bill(bill_id)
        if removed:
            logger.debug(f"Removed {removed} roll calls for bill {bill_id}")

        for index, event in enumerate(bill.votes, start=1):
            roll_call, votes = await self._build_roll_call(event, bill_id, index)
            await self.store.upsert_roll_call(roll_call)
            if votes:
                await self.store.upsert_votes(votes)

        return len(bill.votes)

    async def _build_roll_call(self, event: ApiVoteEvent, bill_id: int, index: int):
        roll_call_id = roll_call_id_for(bill_id, index)
        counts: Dict[int, int] = {1: 0, 2: 0, 3: 0, 4: 0}
        votes: List[MemberVote] = []

        for vote_type, members in event.member_votes.items():
            code, desc = map_vote_type(vote_type)
            if code in counts:
                counts[code] += len(members)

            for member in members:
                people_id = await self.matcher.match(member)
                if people_id is not None:
                    votes.append(MemberVote(
                        people_id=people_id,
                        roll_call_id=roll_call_id,
                        vote=code,
                        vote_desc=desc,
                    ))

        roll_call = RollCall(
            roll_call_id=roll_call_id,
            bill_id=bill_id,
            date=event.vote_date,
            chamber=normalize_chamber(event.event_chamber),
            description=event.description or event.vote_type,
            yea=counts[1],
            nay=counts[2],
            absent=counts[3],
            nv=counts[4],
            total=sum(counts.values()),
        )
        return roll_call, votes
