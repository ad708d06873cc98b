# govdash_node/api/health.py
"""
Health API.

- GET /health          liveness
- GET /health/summary  proposal counts per derived status
"""

from __future__ import annotations

import time
from typing import Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from govdash_node.api.governance import get_service
from govdash_node.governance.service import GovernanceService
from govdash_node.governance.status import ALL_STATUSES, proposal_status

router = APIRouter(tags=["health"])


class PingResponse(BaseModel):
    ok: bool = True
    ts: float = Field(..., description="Server timestamp.")


class SummaryResponse(BaseModel):
    ok: bool = True
    total: int
    by_status: Dict[str, int]


@router.get("/health", response_model=PingResponse)
def health() -> PingResponse:
    return PingResponse(ts=time.time())


@router.get("/health/summary", response_model=SummaryResponse)
def health_summary(svc: GovernanceService = Depends(get_service)) -> SummaryResponse:
    now = svc.now()
    counts = {s: 0 for s in ALL_STATUSES}
    proposals = svc.store.list()
    for p in proposals:
        counts[proposal_status(p, now)] += 1
    return SummaryResponse(total=len(proposals), by_status=counts)
