"""Declarative booking lifecycle transitions."""

from dataclasses import dataclass
from typing import Dict, FrozenSet, List

from ..models.booking import BookingStatus
from ..principal import ActorRole


@dataclass(frozen=True)
class Transition:
    action: str
    role: ActorRole
    from_statuses: FrozenSet[str]
    to_status: str

    def describe_allowed(self) -> str:
        return " or ".join(sorted(self.from_statuses))


def _t(action: str, role: ActorRole, sources: List[BookingStatus], target: BookingStatus) -> Transition:
    return Transition(action, role, frozenset(s.value for s in sources), target.value)


S = BookingStatus

TRANSITIONS: Dict[str, Transition] = {
    t.action: t
    for t in (
        _t("accept", ActorRole.VENDOR, [S.PENDING], S.ACCEPTED),
        _t("reject", ActorRole.VENDOR, [S.PENDING], S.REJECTED),
        _t("pay", ActorRole.CLIENT, [S.ACCEPTED], S.PAID),
        _t("cancel", ActorRole.CLIENT, [S.PENDING, S.ACCEPTED, S.PAID], S.CANCELLED),
        _t("mark_on_the_way", ActorRole.VENDOR, [S.PAID], S.ON_THE_WAY),
        _t("mark_received", ActorRole.CLIENT, [S.ON_THE_WAY], S.RECEIVED),
        _t("mark_picked_up", ActorRole.VENDOR, [S.ON_THE_WAY, S.RECEIVED], S.PICKED_UP),
        _t("mark_finished", ActorRole.CLIENT, [S.RECEIVED, S.PICKED_UP], S.FINISHED),
        _t("mark_completed", ActorRole.VENDOR, [S.PICKED_UP, S.CLAIM], S.COMPLETED),
        _t("claim", ActorRole.CLIENT, [S.PAID, S.RECEIVED, S.PICKED_UP, S.FINISHED], S.CLAIM),
    )
}

# Statuses a client may review from; reviewing does not move the booking
REVIEWABLE_STATUSES = frozenset({S.FINISHED.value, S.COMPLETED.value})


def get_transition(action: str) -> Transition:
    return TRANSITIONS[action]


def vendor_actions_for(status: str) -> List[str]:
    """Vendor actions available for a booking in ``status``, in display order."""
    return [
        t.action
        for t in TRANSITIONS.values()
        if t.role == ActorRole.VENDOR and status in t.from_statuses
    ]
