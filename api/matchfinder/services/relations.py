from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Iterable

from ..schemas import BlockedProfile, ContactRequest, DeclinedProfile, Interest, Profile, ProfileView

logger = logging.getLogger(__name__)

DECLINED_INTEREST_STATUSES = {"declined", "blocked"}


@dataclass(frozen=True)
class InteractionStatus:
    is_new: bool = True
    is_viewed: bool = False
    interest_sent: bool = False
    interest_received: bool = False
    interest_accepted: bool = False
    interest_expired: bool = False
    contact_request_sent: bool = False
    contact_request_received: bool = False
    contact_request_accepted: bool = False
    can_chat: bool = False


@dataclass(frozen=True)
class RelationStatus:
    is_declined_by_me: bool = False
    is_declined_by_them: bool = False
    is_blocked: bool = False
    is_blocked_by_them: bool = False
    interaction: InteractionStatus = field(default_factory=InteractionStatus)

    @property
    def hidden(self) -> bool:
        return self.is_blocked or self.is_blocked_by_them or self.is_declined_by_me or self.is_declined_by_them

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


EMPTY_STATUS = RelationStatus()


@dataclass
class RelationIndex:
    viewer_profile_id: str
    declined_by_me: set[str] = field(default_factory=set)
    declined_by_them: set[str] = field(default_factory=set)
    blocked_by_me: set[str] = field(default_factory=set)
    blocked_by_them: set[str] = field(default_factory=set)
    viewed: set[str] = field(default_factory=set)
    interest_sent: dict[str, Interest] = field(default_factory=dict)
    interest_received: dict[str, Interest] = field(default_factory=dict)
    interest_accepted: dict[str, Interest] = field(default_factory=dict)
    interest_expired: dict[str, Interest] = field(default_factory=dict)
    contact_sent: dict[str, ContactRequest] = field(default_factory=dict)
    contact_received: dict[str, ContactRequest] = field(default_factory=dict)
    contact_accepted: dict[str, ContactRequest] = field(default_factory=dict)
    skipped: int = 0

    def status_for(self, profile_id: str) -> RelationStatus:
        is_viewed = profile_id in self.viewed
        interest_sent = profile_id in self.interest_sent
        interest_received = profile_id in self.interest_received
        interest_accepted = profile_id in self.interest_accepted
        interest_expired = profile_id in self.interest_expired
        contact_sent = profile_id in self.contact_sent
        contact_received = profile_id in self.contact_received
        contact_accepted = profile_id in self.contact_accepted
        declined_by_me = profile_id in self.declined_by_me
        declined_by_them = profile_id in self.declined_by_them

        has_history = (
            is_viewed
            or interest_sent
            or interest_received
            or interest_accepted
            or contact_sent
            or contact_received
            or contact_accepted
            or declined_by_me
            or declined_by_them
            or interest_expired
        )
        return RelationStatus(
            is_declined_by_me=declined_by_me,
            is_declined_by_them=declined_by_them,
            is_blocked=profile_id in self.blocked_by_me,
            is_blocked_by_them=profile_id in self.blocked_by_them,
            interaction=InteractionStatus(
                is_new=not has_history,
                is_viewed=is_viewed,
                interest_sent=interest_sent,
                interest_received=interest_received,
                interest_accepted=interest_accepted,
                interest_expired=interest_expired,
                contact_request_sent=contact_sent,
                contact_request_received=contact_received,
                contact_request_accepted=contact_accepted,
                can_chat=interest_accepted,
            ),
        )


def _counterpart(viewer: str, a: str | None, b: str | None) -> tuple[str, str] | None:
    """Return (direction, counterpart) for an edge a->b touching the viewer."""
    if not a or not b:
        return None
    if a == viewer:
        return "out", b
    if b == viewer:
        return "in", a
    return None


def build_relation_index(
    viewer_profile_id: str,
    interests: Iterable[Interest] = (),
    contact_requests: Iterable[ContactRequest] = (),
    blocks: Iterable[BlockedProfile] = (),
    declines: Iterable[DeclinedProfile] = (),
    views: Iterable[ProfileView] = (),
) -> RelationIndex:
    idx = RelationIndex(viewer_profile_id=viewer_profile_id)
    me = viewer_profile_id

    for d in declines:
        edge = _counterpart(me, d.decliner_profile_id, d.declined_profile_id)
        if edge is None:
            if not d.decliner_profile_id or not d.declined_profile_id:
                idx.skipped += 1
            continue
        direction, other = edge
        if direction == "out" and not d.is_reconsidered:
            idx.declined_by_me.add(other)

    for b in blocks:
        edge = _counterpart(me, b.blocker_profile_id, b.blocked_profile_id)
        if edge is None:
            if not b.blocker_profile_id or not b.blocked_profile_id:
                idx.skipped += 1
            continue
        if b.is_unblocked:
            continue
        direction, other = edge
        if direction == "out":
            idx.blocked_by_me.add(other)
        else:
            idx.blocked_by_them.add(other)

    for i in interests:
        edge = _counterpart(me, i.from_profile_id, i.to_profile_id)
        if edge is None:
            if not i.from_profile_id or not i.to_profile_id:
                idx.skipped += 1
            continue
        direction, other = edge
        status = (i.status or "").lower()
        if status == "pending":
            if direction == "out":
                idx.interest_sent[other] = i
            else:
                idx.interest_received[other] = i
        elif status == "accepted":
            idx.interest_accepted[other] = i
        elif status == "expired":
            idx.interest_expired[other] = i
        elif status in DECLINED_INTEREST_STATUSES and direction == "out":
            idx.declined_by_them.add(other)

    for c in contact_requests:
        edge = _counterpart(me, c.from_profile_id, c.to_profile_id)
        if edge is None:
            if not c.from_profile_id or not c.to_profile_id:
                idx.skipped += 1
            continue
        direction, other = edge
        status = (c.status or "").lower()
        if status == "pending":
            if direction == "out":
                idx.contact_sent[other] = c
            else:
                idx.contact_received[other] = c
        elif status == "approved":
            idx.contact_accepted[other] = c

    for v in views:
        edge = _counterpart(me, v.viewer_profile_id, v.viewed_profile_id)
        if edge is None:
            if not v.viewer_profile_id or not v.viewed_profile_id:
                idx.skipped += 1
            continue
        direction, other = edge
        if direction == "out":
            idx.viewed.add(other)

    if idx.skipped:
        logger.debug("[RELATIONS] skipped %s log entries with missing profile ids", idx.skipped)
    return idx


def build_status_map(index: RelationIndex, profiles: Iterable[Profile]) -> dict[str, RelationStatus]:
    return {p.profile_id: index.status_for(p.profile_id) for p in profiles}


def scan_status(
    viewer_profile_id: str,
    profile_id: str,
    interests: list[Interest],
    contact_requests: list[ContactRequest],
    blocks: list[BlockedProfile],
    declines: list[DeclinedProfile],
    views: list[ProfileView] | None = None,
) -> RelationStatus:
    """Per-candidate rescan of every log. Reference for the indexed path; O(E) per call."""
    me, other = viewer_profile_id, profile_id
    views = views or []

    def interest(frm: str, to: str, statuses: set[str]) -> bool:
        return any(i.from_profile_id == frm and i.to_profile_id == to and (i.status or "").lower() in statuses for i in interests)

    def contact(frm: str, to: str, status: str) -> bool:
        return any(c.from_profile_id == frm and c.to_profile_id == to and (c.status or "").lower() == status for c in contact_requests)

    declined_by_me = any(
        d.decliner_profile_id == me and d.declined_profile_id == other and not d.is_reconsidered for d in declines
    )
    declined_by_them = interest(me, other, DECLINED_INTEREST_STATUSES)
    is_blocked = any(b.blocker_profile_id == me and b.blocked_profile_id == other and not b.is_unblocked for b in blocks)
    is_blocked_by_them = any(
        b.blocker_profile_id == other and b.blocked_profile_id == me and not b.is_unblocked for b in blocks
    )
    is_viewed = any(v.viewer_profile_id == me and v.viewed_profile_id == other for v in views)
    sent = interest(me, other, {"pending"})
    received = interest(other, me, {"pending"})
    accepted = interest(me, other, {"accepted"}) or interest(other, me, {"accepted"})
    expired = interest(me, other, {"expired"}) or interest(other, me, {"expired"})
    c_sent = contact(me, other, "pending")
    c_received = contact(other, me, "pending")
    c_accepted = contact(me, other, "approved") or contact(other, me, "approved")

    has_history = any(
        (is_viewed, sent, received, accepted, c_sent, c_received, c_accepted, declined_by_me, declined_by_them, expired)
    )
    return RelationStatus(
        is_declined_by_me=declined_by_me,
        is_declined_by_them=declined_by_them,
        is_blocked=is_blocked,
        is_blocked_by_them=is_blocked_by_them,
        interaction=InteractionStatus(
            is_new=not has_history,
            is_viewed=is_viewed,
            interest_sent=sent,
            interest_received=received,
            interest_accepted=accepted,
            interest_expired=expired,
            contact_request_sent=c_sent,
            contact_request_received=c_received,
            contact_request_accepted=c_accepted,
            can_chat=accepted,
        ),
    )
