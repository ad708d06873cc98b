# tests/test_crypto_utils.py

import pytest

from conftest import Wallet
from govdash_node.crypto_utils import (
    SignatureVerifier,
    addresses_equal,
    is_valid_address,
    normalize_address,
    sign_message,
)


@pytest.mark.parametrize("message", ["Create Proposal: Hello world", "Vote For Proposal 1", "ünïcødé ✓"])
def test_recover_returns_signer_address(message):
    w = Wallet()
    sig = sign_message(w.key, message)
    assert SignatureVerifier().recover(message, sig) == w.address.lower()


def test_verify_is_case_insensitive(wallet):
    sig = wallet.sign("Vote Against Proposal 7")
    v = SignatureVerifier()
    assert v.verify(wallet.address.lower(), "Vote Against Proposal 7", sig)
    assert v.verify(wallet.address.upper().replace("0X", "0x"), "Vote Against Proposal 7", sig)


def test_verify_rejects_other_signer(wallet, other_wallet):
    sig = other_wallet.sign("Vote For Proposal 1")
    assert not SignatureVerifier().verify(wallet.address, "Vote For Proposal 1", sig)


def test_verify_rejects_altered_message(wallet):
    sig = wallet.sign("Vote For Proposal 1")
    assert not SignatureVerifier().verify(wallet.address, "Vote For Proposal 2", sig)


@pytest.mark.parametrize("sig", ["", "0x", "0xdeadbeef", "not-hex", "0x" + "00" * 65])
def test_verify_garbage_signature_is_false(wallet, sig):
    assert not SignatureVerifier().verify(wallet.address, "Vote For Proposal 1", sig)


def test_recover_rejects_empty_signature():
    with pytest.raises(ValueError):
        SignatureVerifier().recover("hello", "  ")


def test_address_helpers():
    a = "0x" + "Ab" * 20
    assert normalize_address(a) == "0x" + "ab" * 20
    assert normalize_address("AB" * 20) == "0x" + "ab" * 20
    assert addresses_equal(a, a.lower())
    assert is_valid_address("0x" + "ab" * 20)
    assert not is_valid_address("0x1234")
    assert not is_valid_address("0x" + "zz" * 20)
    assert not is_valid_address(None)
