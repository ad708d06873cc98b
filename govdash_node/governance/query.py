"""
List-proposals query: parse -> stamp -> filter -> paginate.

Filters are conjunctive. Ordering follows the store's enumeration order;
an unknown status value simply matches nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from govdash_node.crypto_utils import normalize_address
from govdash_node.governance.errors import InvalidInput
from govdash_node.governance.models import Proposal
from govdash_node.governance.status import proposal_status

DEFAULT_LIMIT = 20
MAX_LIMIT = 50


@dataclass(frozen=True)
class ListQuery:
    status: Optional[str] = None
    proposer: Optional[str] = None
    voter: Optional[str] = None
    limit: int = DEFAULT_LIMIT
    offset: int = 0


def _parse_int(raw: Any, name: str) -> int:
    if isinstance(raw, bool):
        raise InvalidInput(f"Invalid {name} parameter")
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        raise InvalidInput(f"Invalid {name} parameter") from None


def _optional_str(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    s = str(raw).strip()
    return s or None


def parse_list_query(
    params: Mapping[str, Any],
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> ListQuery:
    raw_limit = params.get("limit")
    raw_offset = params.get("offset")

    limit = default_limit if raw_limit in (None, "") else _parse_int(raw_limit, "limit")
    if limit < 1 or limit > max_limit:
        raise InvalidInput(f"Invalid limit parameter (must be between 1 and {max_limit})")

    offset = 0 if raw_offset in (None, "") else _parse_int(raw_offset, "offset")
    if offset < 0:
        raise InvalidInput("Invalid offset parameter (must be non-negative)")

    proposer = _optional_str(params.get("proposer"))
    voter = _optional_str(params.get("voter"))
    return ListQuery(
        status=_optional_str(params.get("status")),
        proposer=normalize_address(proposer) if proposer else None,
        voter=normalize_address(voter) if voter else None,
        limit=limit,
        offset=offset,
    )


def stamp(p: Proposal, now: int) -> Dict[str, Any]:
    """Wire form of a proposal: derived status plus decimal-string tallies."""
    return p.to_wire(proposal_status(p, now))


def run_query(
    proposals: List[Proposal],
    q: ListQuery,
    now: int,
    has_voted: Callable[[int, str], bool],
) -> Dict[str, Any]:
    stamped = [(p, stamp(p, now)) for p in proposals]

    if q.status:
        wanted = q.status.lower()
        stamped = [(p, w) for p, w in stamped if w["status"] == wanted]

    if q.proposer:
        stamped = [(p, w) for p, w in stamped if normalize_address(p.proposer) == q.proposer]

    if q.voter:
        stamped = [(p, w) for p, w in stamped if has_voted(p.id, q.voter)]

    total = len(stamped)
    page = [w for _, w in stamped[q.offset:q.offset + q.limit]]
    return {"proposals": page, "total": total, "offset": q.offset, "limit": q.limit}
