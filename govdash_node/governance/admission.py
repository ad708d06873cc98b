"""
Admission rules for the write endpoints.

Each request goes: required-field check -> shape/length validation
(pydantic) -> signature check against the canonical message. The canonical
messages are part of the wire protocol; wallets sign these exact strings.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, Field, StrictBool, StrictInt, ValidationError, field_validator

from govdash_node.crypto_utils import SignatureVerifier, is_valid_address, normalize_address
from govdash_node.governance.errors import InvalidInput, Unauthorized
from govdash_node.governance.models import PROPOSAL_TYPES, ProposalAction

log = logging.getLogger(__name__)

TITLE_MIN, TITLE_MAX = 5, 100
DESCRIPTION_MIN, DESCRIPTION_MAX = 100, 10000

CREATE_REQUIRED = ("title", "description", "proposalType", "address", "networkId", "signature")
VOTE_REQUIRED = ("proposalId", "support", "address", "networkId", "signature")
DELEGATE_REQUIRED = ("delegatee", "address", "networkId", "signature")
EXECUTE_REQUIRED = ("proposalId", "address", "networkId", "signature")


# ------------------------
# Canonical messages
# ------------------------
def create_message(title: str) -> str:
    return f"Create Proposal: {title}"


def vote_message(proposal_id: int, support: bool) -> str:
    return f"Vote {'For' if support else 'Against'} Proposal {proposal_id}"


def delegate_message(delegatee: str) -> str:
    return f"Delegate my voting power to {delegatee}"


def execute_message(proposal_id: int) -> str:
    return f"Execute Proposal {proposal_id}"


# ------------------------
# Request models
# ------------------------
class ActionIn(BaseModel):
    target: str = Field(..., min_length=1)
    value: str = "0"
    signature: str = ""
    calldata: str = "0x"

    @field_validator("value", mode="before")
    @classmethod
    def _value_as_decimal(cls, v: Any) -> str:
        # uint256 values may arrive as JSON numbers or decimal strings
        if isinstance(v, bool):
            raise ValueError("value must be a decimal amount")
        s = str(v).strip() if v is not None else "0"
        if not s.isdigit():
            raise ValueError("value must be a non-negative decimal amount")
        return s

    def to_action(self) -> ProposalAction:
        return ProposalAction(
            target=self.target, value=self.value, signature=self.signature, calldata=self.calldata
        )


class _Signed(BaseModel):
    address: str
    networkId: Union[StrictInt, str]
    signature: str

    @field_validator("address")
    @classmethod
    def _address_format(cls, v: str) -> str:
        if not is_valid_address(v):
            raise ValueError("Invalid address format")
        return v


class CreateProposalRequest(_Signed):
    title: str = Field(..., min_length=TITLE_MIN, max_length=TITLE_MAX)
    description: str = Field(..., min_length=DESCRIPTION_MIN, max_length=DESCRIPTION_MAX)
    proposalType: str
    actions: List[ActionIn] = Field(default_factory=list)

    @field_validator("proposalType")
    @classmethod
    def _known_type(cls, v: str) -> str:
        if v not in PROPOSAL_TYPES:
            raise ValueError(f"proposalType must be one of {', '.join(PROPOSAL_TYPES)}")
        return v


class VoteRequest(_Signed):
    proposalId: StrictInt = Field(..., ge=1)
    support: StrictBool


class ExecuteRequest(_Signed):
    proposalId: StrictInt = Field(..., ge=1)


class DelegateRequest(_Signed):
    delegatee: str

    @field_validator("delegatee")
    @classmethod
    def _delegatee_format(cls, v: str) -> str:
        if not is_valid_address(v):
            raise ValueError("Invalid address format")
        return v


M = TypeVar("M", bound=BaseModel)

_FIELD_MESSAGES = {
    "title": f"Title must be between {TITLE_MIN} and {TITLE_MAX} characters",
    "description": f"Description must be between {DESCRIPTION_MIN} and {DESCRIPTION_MAX} characters",
    "proposalId": "Invalid proposal ID",
}


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse(model: Type[M], payload: Any, required: tuple) -> M:
    if not isinstance(payload, Mapping):
        raise InvalidInput("Request body must be a JSON object")
    if any(_is_missing(payload.get(k)) for k in required):
        raise InvalidInput("Missing required fields")
    try:
        return model.model_validate(dict(payload))
    except ValidationError as e:
        first: Dict[str, Any] = e.errors()[0]
        loc = first.get("loc") or ("",)
        field = str(loc[0])
        msg = _FIELD_MESSAGES.get(field)
        if msg is None:
            detail = str(first.get("msg", "invalid value"))
            if first.get("type") == "value_error":
                # raised by our own validators; pydantic prefixes the text
                msg = detail.removeprefix("Value error, ")
            else:
                msg = f"{field}: {detail}" if field else detail
        raise InvalidInput(msg) from None


def parse_create(payload: Any) -> CreateProposalRequest:
    return _parse(CreateProposalRequest, payload, CREATE_REQUIRED)


def parse_vote(payload: Any) -> VoteRequest:
    return _parse(VoteRequest, payload, VOTE_REQUIRED)


def parse_delegate(payload: Any) -> DelegateRequest:
    return _parse(DelegateRequest, payload, DELEGATE_REQUIRED)


def parse_execute(payload: Any) -> ExecuteRequest:
    return _parse(ExecuteRequest, payload, EXECUTE_REQUIRED)


def require_signer(verifier: SignatureVerifier, address: str, message: str, signature: str) -> str:
    """
    Raise Unauthorized unless ``signature`` over ``message`` recovers to
    ``address``. Returns the normalized signer address.
    """
    if not verifier.verify(address, message, signature):
        log.warning("Signature mismatch for %s on %r", normalize_address(address), message)
        raise Unauthorized("Invalid signature")
    return normalize_address(address)


def authenticate_create(verifier: SignatureVerifier, req: CreateProposalRequest) -> str:
    return require_signer(verifier, req.address, create_message(req.title), req.signature)


def authenticate_vote(verifier: SignatureVerifier, req: VoteRequest) -> str:
    return require_signer(
        verifier, req.address, vote_message(req.proposalId, req.support), req.signature
    )


def authenticate_delegate(verifier: SignatureVerifier, req: DelegateRequest) -> str:
    return require_signer(verifier, req.address, delegate_message(req.delegatee), req.signature)


def authenticate_execute(verifier: SignatureVerifier, req: ExecuteRequest) -> str:
    return require_signer(verifier, req.address, execute_message(req.proposalId), req.signature)


def parse_proposal_id(raw: Optional[Any]) -> int:
    if _is_missing(raw):
        raise InvalidInput("Proposal ID is required")
    if isinstance(raw, bool):
        raise InvalidInput("Invalid proposal ID")
    try:
        pid = int(str(raw).strip())
    except ValueError:
        raise InvalidInput("Invalid proposal ID") from None
    if pid < 1:
        raise InvalidInput("Invalid proposal ID")
    return pid
