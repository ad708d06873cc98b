"""
Proposal lifecycle derivation.

Status is computed, never stored. Evaluation order (first match wins):

  executed -> canceled -> pending -> active -> succeeded | defeated

The voting window [start_time, end_time] is closed on both ends. A tie
after the window closes is a defeat. ``expired`` is part of the vocabulary
but nothing derives it yet; there is no execution window upstream.
"""

from typing import Protocol

PENDING = "pending"
ACTIVE = "active"
SUCCEEDED = "succeeded"
DEFEATED = "defeated"
EXECUTED = "executed"
CANCELED = "canceled"
EXPIRED = "expired"

ALL_STATUSES = (PENDING, ACTIVE, SUCCEEDED, DEFEATED, EXECUTED, CANCELED, EXPIRED)


class _Timed(Protocol):
    start_time: int
    end_time: int
    for_votes: int
    against_votes: int
    executed: bool
    canceled: bool


def proposal_status(p: _Timed, now: int) -> str:
    if p.executed:
        return EXECUTED
    if p.canceled:
        return CANCELED
    if now < p.start_time:
        return PENDING
    if now <= p.end_time:
        return ACTIVE
    # Python ints are arbitrary precision; never compare tallies as floats.
    if int(p.for_votes) > int(p.against_votes):
        return SUCCEEDED
    return DEFEATED


def is_known_status(value: str) -> bool:
    return (value or "").strip().lower() in ALL_STATUSES
