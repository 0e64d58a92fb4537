import pytest
from eth_hash.auto import keccak
from coincurve import PublicKey

from errors import EncodingError, InvalidAddressError, InvalidKeyError, RangeError
from sign_core import (
    UINT256_MAX,
    addr,
    address_from_key,
    eip712_digest,
    load_private_key,
    normalize_address,
    sign_digest,
    to_bytes32,
    to_uint256,
    to_utf8,
    u256,
)

# --- deterministic test vectors ---

# Anvil / Hardhat account #0 (DO NOT USE IN PRODUCTION)
ANVIL_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
ANVIL_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


def test_u256_is_big_endian_word():
    assert u256(1) == b"\x00" * 31 + b"\x01"
    assert u256(UINT256_MAX) == b"\xff" * 32


def test_addr_left_pads_to_word():
    word = addr(ANVIL_ADDRESS.lower())
    assert len(word) == 32
    assert word[:12] == b"\x00" * 12
    assert word[12:] == bytes.fromhex(ANVIL_ADDRESS[2:])


@pytest.mark.parametrize("bad", [-1, 2**256, True, "1", 1.0, None])
def test_to_uint256_rejects_out_of_range(bad):
    with pytest.raises(RangeError):
        to_uint256(bad)


def test_normalize_address_accepts_lowercase_and_checksum():
    assert normalize_address(ANVIL_ADDRESS.lower()) == ANVIL_ADDRESS
    assert normalize_address(ANVIL_ADDRESS) == ANVIL_ADDRESS


@pytest.mark.parametrize("bad", [
    "0x123",
    "0x" + "ab" * 19,
    "0x" + "ab" * 21,
    "0xzz" + "00" * 19,
    "0xF39Fd6e51aad88F6F4ce6aB8827279cffFb92266",  # broken checksum
    None,
    bytes(20),
])
def test_normalize_address_rejects_malformed(bad):
    with pytest.raises(InvalidAddressError):
        normalize_address(bad, "receiver")


def test_to_bytes32():
    assert to_bytes32(bytes(32)) == bytes(32)
    assert to_bytes32("0x" + "11" * 32) == b"\x11" * 32
    for bad in ["0x0", "0x" + "11" * 31, bytes(31), "11" * 32, 0]:
        with pytest.raises(EncodingError):
            to_bytes32(bad)


def test_load_private_key_derives_known_address():
    assert address_from_key(load_private_key(ANVIL_KEY)) == ANVIL_ADDRESS
    assert address_from_key(load_private_key(ANVIL_KEY[2:])) == ANVIL_ADDRESS
    assert address_from_key(load_private_key(bytes.fromhex(ANVIL_KEY[2:]))) == ANVIL_ADDRESS


@pytest.mark.parametrize("bad", [
    "00" * 32,
    SECP256K1_N.to_bytes(32, "big").hex(),
    "ff" * 32,
    "0x1234",
    "zz" * 32,
    bytes(16),
    12345,
])
def test_load_private_key_rejects_invalid(bad):
    with pytest.raises(InvalidKeyError) as exc:
        load_private_key(bad)
    if isinstance(bad, str):
        assert bad not in str(exc.value)


def test_eip712_digest_frames_with_prefix():
    domain = keccak(b"domain:test:v1")
    struct = keccak(b"commit:test")
    assert eip712_digest(domain, struct) == keccak(b"\x19\x01" + domain + struct)


def test_sign_digest_is_deterministic_and_recoverable():
    pk = load_private_key(ANVIL_KEY)
    digest = eip712_digest(keccak(b"domain:test:v1"), keccak(b"commit:test"))

    sig = sign_digest(pk, digest)
    assert sig == sign_digest(pk, digest)
    assert len(sig) == 65
    assert sig[64] in (27, 28)

    # low-s
    assert int.from_bytes(sig[32:64], "big") <= SECP256K1_N // 2

    recoverable = sig[:64] + bytes([sig[64] - 27])
    recovered = PublicKey.from_signature_and_message(recoverable, digest, hasher=None)
    assert recovered.format(compressed=False) == pk.public_key.format(compressed=False)


def test_normalize_address_checksum_rules():
    # single-case bodies carry no checksum
    assert normalize_address("0x" + ANVIL_ADDRESS[2:].upper()) == ANVIL_ADDRESS

    wrong_case = "0xF" + ANVIL_ADDRESS[3:]
    assert wrong_case != ANVIL_ADDRESS
    with pytest.raises(InvalidAddressError, match="checksum"):
        normalize_address(wrong_case, "cosigner")


def test_to_utf8_rejects_lone_surrogate():
    assert to_utf8("héllo") == "héllo".encode("utf-8")
    with pytest.raises(EncodingError):
        to_utf8("\ud800", "orderHash")
