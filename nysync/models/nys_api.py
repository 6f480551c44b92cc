"""
NYS Open Legislation API payload models.

Only the fields the sync needs are modelled; everything else in the
response is ignored. Upstream wraps most lists as {"items": [...]} and
some members as {"member": {...}}; validators unwrap both so the rest of
the code works with plain lists and never touches raw dicts.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for upstream payloads: camelCase aliases, unknown keys ignored."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _unwrap_items(value: Any) -> Any:
    """{"items": X} -> X, None -> empty list."""
    if value is None:
        return []
    if isinstance(value, dict) and "items" in value:
        return value["items"] if value["items"] is not None else []
    return value


def _unwrap_member(value: Any) -> Any:
    """Co-sponsor entries come either as members or as {"member": {...}}."""
    if isinstance(value, dict) and isinstance(value.get("member"), dict):
        return value["member"]
    return value


class ApiMember(ApiModel):
    """A legislator reference as it appears in sponsor and vote lists."""
    member_id: Optional[int] = None
    short_name: Optional[str] = None
    full_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    district_code: Optional[int] = None
    chamber: Optional[str] = None

    @field_validator("district_code", "member_id", mode="before")
    @classmethod
    def _lenient_int(cls, value: Any) -> Optional[int]:
        if value in (None, ""):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    @property
    def display_name(self) -> Optional[str]:
        """Best available full name."""
        if self.full_name or self.short_name:
            return self.full_name or self.short_name
        joined = " ".join(part for part in (self.first_name, self.last_name) if part)
        return joined or None

    @property
    def has_identity(self) -> bool:
        return bool(self.full_name or self.short_name or self.last_name)


class ApiSponsor(ApiModel):
    member: Optional[ApiMember] = None


class ApiCommittee(ApiModel):
    name: Optional[str] = None
    chamber: Optional[str] = None


class ApiBillStatus(ApiModel):
    status_type: Optional[str] = None
    status_desc: Optional[str] = None
    action_date: Optional[str] = None
    committee_name: Optional[str] = None


class ApiAction(ApiModel):
    """One legislative action (history line)."""
    date: Optional[str] = None
    sequence_no: int = 0
    text: Optional[str] = None
    description: Optional[str] = None
    chamber: Optional[str] = None

    @field_validator("sequence_no", mode="before")
    @classmethod
    def _default_sequence(cls, value: Any) -> Any:
        return 0 if value is None else value

    @property
    def action_text(self) -> Optional[str]:
        return self.text or self.description


class ApiAmendment(ApiModel):
    version: Optional[str] = None
    actions: List[ApiAction] = Field(default_factory=list)

    @field_validator("actions", mode="before")
    @classmethod
    def _unwrap_actions(cls, value: Any) -> Any:
        return _unwrap_items(value)


class ApiVoteEvent(ApiModel):
    """A roll call: vote metadata plus member lists keyed by vote type."""
    vote_type: Optional[str] = None
    vote_date: Optional[str] = None
    description: Optional[str] = None
    chamber: Optional[str] = None
    committee: Optional[ApiCommittee] = None
    member_votes: Dict[str, List[ApiMember]] = Field(default_factory=dict)

    @field_validator("member_votes", mode="before")
    @classmethod
    def _unwrap_member_votes(cls, value: Any) -> Dict[str, Any]:
        groups = _unwrap_items(value)
        if not isinstance(groups, dict):
            return {}
        return {
            vote_type: [_unwrap_member(m) for m in _unwrap_items(group)]
            for vote_type, group in groups.items()
        }

    @property
    def event_chamber(self) -> Optional[str]:
        if self.committee and self.committee.chamber:
            return self.committee.chamber
        return self.chamber


class ApiBill(ApiModel):
    """Full bill detail from /bills/{session}/{printNo}."""
    base_print_no: Optional[str] = None
    print_no: Optional[str] = None
    session: Optional[int] = None
    title: Optional[str] = None
    summary: Optional[str] = None
    published_date_time: Optional[str] = None
    status: ApiBillStatus = Field(default_factory=ApiBillStatus)
    current_committee: Optional[ApiCommittee] = None
    sponsor: Optional[ApiSponsor] = None
    co_sponsors: List[ApiMember] = Field(default_factory=list)
    multi_sponsors: List[ApiMember] = Field(default_factory=list)
    amendments: Dict[str, ApiAmendment] = Field(default_factory=dict)
    actions: List[ApiAction] = Field(default_factory=list)
    votes: List[ApiVoteEvent] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("co_sponsors", "multi_sponsors", mode="before")
    @classmethod
    def _unwrap_sponsor_lists(cls, value: Any) -> List[Any]:
        return [_unwrap_member(m) for m in _unwrap_items(value)]

    @field_validator("amendments", mode="before")
    @classmethod
    def _unwrap_amendments(cls, value: Any) -> Any:
        value = _unwrap_items(value)
        return value if isinstance(value, dict) else {}

    @field_validator("actions", "votes", mode="before")
    @classmethod
    def _unwrap_lists(cls, value: Any) -> Any:
        return _unwrap_items(value)

    @property
    def print_number(self) -> Optional[str]:
        return self.base_print_no or self.print_no

    @property
    def primary_sponsor(self) -> Optional[ApiMember]:
        return self.sponsor.member if self.sponsor else None

    @property
    def committee_name(self) -> Optional[str]:
        if self.status.committee_name:
            return self.status.committee_name
        return self.current_committee.name if self.current_committee else None

    def latest_actions(self) -> List[ApiAction]:
        """
        Actions of the most recent amendment.

        Amendment keys are version letters ("" for the original print), so
        the lexicographically last key is the newest. Falls back to the
        bill-level action list when that amendment carries none.
        """
        if self.amendments:
            latest = self.amendments[sorted(self.amendments)[-1]]
            if latest.actions:
                return latest.actions
        return self.actions


class ApiBillRef(ApiModel):
    """A bill reference from the listing or the updates feed."""
    base_print_no: Optional[str] = None
    session: Optional[int] = None

    @classmethod
    def from_update(cls, item: Dict[str, Any]) -> "ApiBillRef":
        """Update events nest the bill id under "id"."""
        ident = item.get("id")
        if isinstance(ident, dict) and ident.get("basePrintNo"):
            return cls.model_validate(ident)
        return cls.model_validate(item)


class ApiResponse(ApiModel):
    """Envelope every endpoint returns."""
    success: bool = False
    message: Optional[str] = None
    response_type: Optional[str] = None
    result: Optional[Any] = None

    @property
    def items(self) -> List[Any]:
        if isinstance(self.result, dict):
            return self.result.get("items") or []
        return []

    @property
    def total(self) -> int:
        if isinstance(self.result, dict):
            return self.result.get("size") or self.result.get("total") or 0
        return 0
