"""
Governance core: proposal status derivation, list queries, write admission
and the service that composes them over a ProposalStore.

Keep this module lightweight; import submodules directly.
"""

__all__ = []
