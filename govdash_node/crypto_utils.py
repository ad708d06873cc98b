# govdash_node/crypto_utils.py
"""
Wallet signature helpers for the governance API.

Requests are authenticated without a session: the client signs a canonical
message with its wallet (EIP-191 ``personal_sign``), and we recover the
signer address and compare it to the address the request claims.

- SignatureVerifier.recover / verify
- Address normalization (lowercase 0x-hex) and syntax checks
- sign_message for tests and local tooling
"""

from __future__ import annotations

import logging
from typing import Optional

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import is_address

log = logging.getLogger(__name__)


def normalize_address(address: str) -> str:
    """Lowercase 0x-prefixed hex form used for every address comparison."""
    a = (address or "").strip().lower()
    if a and not a.startswith("0x"):
        a = "0x" + a
    return a


def is_valid_address(address: Optional[str]) -> bool:
    if not isinstance(address, str):
        return False
    try:
        return bool(is_address(address.strip()))
    except (TypeError, ValueError):
        return False


def addresses_equal(a: str, b: str) -> bool:
    return normalize_address(a) == normalize_address(b)


def sign_message(private_key: str, message: str) -> str:
    """
    Sign ``message`` the way a browser wallet's personal_sign would.

    Returns the 65-byte signature as 0x-prefixed hex.
    """
    signed = Account.sign_message(encode_defunct(text=message), private_key=private_key)
    sig = signed.signature.hex()
    return sig if sig.startswith("0x") else "0x" + sig


class SignatureVerifier:
    """Recovers signers of personal_sign messages."""

    def recover(self, message: str, signature: str) -> str:
        """
        Return the lowercase address that produced ``signature`` over
        ``message``. Raises ValueError if the signature is malformed.
        """
        if not isinstance(signature, str) or not signature.strip():
            raise ValueError("signature required")
        signable = encode_defunct(text=message)
        recovered = Account.recover_message(signable, signature=signature.strip())
        return normalize_address(recovered)

    def verify(self, address: str, message: str, signature: str) -> bool:
        try:
            recovered = self.recover(message, signature)
        except Exception as e:
            # eth_account/eth_keys raise a mix of ValueError, BadSignature and
            # validation errors for garbage input; all of them mean "no".
            log.warning("Signature verification error: %s", type(e).__name__)
            return False
        return recovered == normalize_address(address)


__all__ = [
    "SignatureVerifier",
    "addresses_equal",
    "is_valid_address",
    "normalize_address",
    "sign_message",
]
