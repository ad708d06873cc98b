"""
Governance error taxonomy.

Every failure that can reach a client is one of these. The HTTP layer maps
them onto the response envelope using ``status_code`` and ``message``; the
``code`` token is what tests and logs key on.
"""

from __future__ import annotations


class GovernanceError(Exception):
    code = "backend-unavailable"
    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class MethodNotAllowed(GovernanceError):
    code = "method-not-allowed"
    status_code = 405
    default_message = "Method not allowed"


class InvalidInput(GovernanceError):
    code = "invalid-input"
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(GovernanceError):
    code = "unauthorized"
    status_code = 401
    default_message = "Invalid signature"


class NotFound(GovernanceError):
    code = "not-found"
    status_code = 404
    default_message = "Proposal not found"


class InvalidState(GovernanceError):
    code = "invalid-state"
    status_code = 400
    default_message = "Proposal is not active for voting"


class BackendUnavailable(GovernanceError):
    code = "backend-unavailable"
    status_code = 500


class DuplicateVote(InvalidState):
    """Raised by stores that refuse a second vote from the same voter."""

    default_message = "Already voted on this proposal"


__all__ = [
    "GovernanceError",
    "MethodNotAllowed",
    "InvalidInput",
    "Unauthorized",
    "NotFound",
    "InvalidState",
    "BackendUnavailable",
    "DuplicateVote",
]
