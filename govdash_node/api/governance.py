"""
Governance HTTP surface.

Routes
------
- GET  /governance/proposals        list with status/proposer/voter filters
- GET  /governance/proposal?id=N    single proposal with derived status
- POST /governance/proposal         create (signed "Create Proposal: <title>")
- POST /governance/vote             vote (signed "Vote For|Against Proposal <id>")
- POST /governance/delegate         delegate voting power (signed)
- POST /governance/execute          execute a succeeded proposal (signed "Execute Proposal <id>")

Every response, success or failure, uses the envelope
``{success, data, error}``; errors are rendered by the handlers installed
in ``govdash_node.govdash_api``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from govdash_node.governance.service import GovernanceService

router = APIRouter(prefix="/governance", tags=["governance"])


def envelope(data: Any = None, error: Optional[str] = None) -> Dict[str, Any]:
    return {"success": error is None, "data": data, "error": error}


def get_service(request: Request) -> GovernanceService:
    return request.app.state.governance


@router.get("/proposals")
def list_proposals(request: Request, svc: GovernanceService = Depends(get_service)):
    return envelope(svc.list_proposals(request.query_params))


@router.get("/proposal")
def get_proposal(id: Optional[str] = None, svc: GovernanceService = Depends(get_service)):
    return envelope(svc.get_proposal(id))


@router.post("/proposal", status_code=201)
def create_proposal(payload: Any = Body(None), svc: GovernanceService = Depends(get_service)):
    return JSONResponse(status_code=201, content=envelope(svc.create_proposal(payload)))


@router.post("/vote")
def vote(payload: Any = Body(None), svc: GovernanceService = Depends(get_service)):
    return envelope(svc.vote(payload))


@router.post("/delegate")
def delegate(payload: Any = Body(None), svc: GovernanceService = Depends(get_service)):
    return envelope(svc.delegate(payload))


@router.post("/execute")
def execute(payload: Any = Body(None), svc: GovernanceService = Depends(get_service)):
    return envelope(svc.execute(payload))
