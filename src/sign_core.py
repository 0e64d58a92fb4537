from eth_hash.auto import keccak
from eth_utils import is_checksum_address, is_hex, is_hex_address, remove_0x_prefix, to_canonical_address, to_checksum_address
from coincurve import PrivateKey

from errors import EncodingError, InvalidAddressError, InvalidKeyError, RangeError

UINT256_MAX = 2**256 - 1

# ---------- input normalization ----------

def to_uint256(x, field: str = "value") -> int:
    # bool is an int subclass but never a valid amount
    if isinstance(x, bool) or not isinstance(x, int):
        raise RangeError(f"{field} must be an integer, got {type(x).__name__}")
    if x < 0 or x > UINT256_MAX:
        raise RangeError(f"{field} out of uint256 range: {x}")
    return x

def normalize_address(a, field: str = "address") -> str:
    # checksummed or single-case hex; mixed case must carry a valid checksum
    if not isinstance(a, str) or not is_hex_address(a):
        raise InvalidAddressError(f"Invalid address for {field}: {a!r}")
    body = remove_0x_prefix(a)
    if body != body.lower() and body != body.upper() and not is_checksum_address(a):
        raise InvalidAddressError(f"Bad checksum for {field}: {a!r}")
    return to_checksum_address(a)

def to_bytes32(x, field: str = "value") -> bytes:
    if isinstance(x, (bytes, bytearray, memoryview)):
        raw = bytes(x)
    elif isinstance(x, str) and x.startswith("0x"):
        if len(x) != 66 or not is_hex(x):
            raise EncodingError(f"{field} must be 0x followed by 64 hex digits")
        raw = bytes.fromhex(x[2:])
    else:
        raise EncodingError(f"{field} must be 32 raw bytes or a 0x-prefixed hex string")
    if len(raw) != 32:
        raise EncodingError(f"{field} must be exactly 32 bytes, got {len(raw)}")
    return raw

# ---------- fixed-width helpers ----------

def u256(x: int) -> bytes:
    return to_uint256(x).to_bytes(32, "big")

def addr(a: str) -> bytes:
    # EIP-712 / ABI `address` is 160-bit, left-padded to a 32-byte word
    return b"\x00" * 12 + to_canonical_address(normalize_address(a))

def b32(x: bytes) -> bytes:
    assert len(x) == 32
    return x

def to_utf8(s: str, field: str = "value") -> bytes:
    try:
        return s.encode("utf-8")
    except UnicodeEncodeError as e:
        # lone surrogates have no UTF-8 form
        raise EncodingError(f"{field} is not encodable as UTF-8: {e.reason}") from e

def keccak_text(s: str) -> bytes:
    # EIP-712 encodes dynamic `string` members by their hash
    return keccak(to_utf8(s))

# ---------- EIP-712 core ----------

EIP191_PREFIX = b"\x19\x01"

def eip712_digest(domain_separator: bytes, struct_hash: bytes) -> bytes:
    assert len(domain_separator) == 32
    assert len(struct_hash) == 32
    return keccak(EIP191_PREFIX + domain_separator + struct_hash)

# ---------- keys ----------

def load_private_key(key) -> PrivateKey:
    """
    Accepts 32 raw bytes or a hex string with or without the 0x prefix.
    Error messages never echo the key material.
    """
    if isinstance(key, (bytes, bytearray)):
        raw = bytes(key)
    elif isinstance(key, str):
        hexstr = remove_0x_prefix(key.strip())
        if len(hexstr) != 64 or not is_hex(hexstr):
            raise InvalidKeyError("Private key must be 32 bytes of hex")
        raw = bytes.fromhex(hexstr)
    else:
        raise InvalidKeyError(f"Unsupported private key type: {type(key).__name__}")

    if len(raw) != 32:
        raise InvalidKeyError(f"Private key must be 32 bytes, got {len(raw)}")
    try:
        return PrivateKey(raw)
    except ValueError:
        # zero or >= curve order
        raise InvalidKeyError("Private key is not a valid secp256k1 scalar") from None

def address_from_key(pk: PrivateKey) -> str:
    # keccak(uncompressed pubkey without 0x04 prefix)[12:]
    pub = pk.public_key.format(compressed=False)[1:]
    return to_checksum_address(keccak(pub)[12:])

# ---------- deterministic secp256k1 ----------

def sign_digest(pk: PrivateKey, digest_32: bytes) -> bytes:
    assert len(digest_32) == 32

    # coincurve uses libsecp256k1 RFC6979 deterministic nonce generation, low-s
    sig65 = pk.sign_recoverable(digest_32, hasher=None)

    r = sig65[:32]
    s = sig65[32:64]
    v = sig65[64] + 27  # raw recovery id (0 or 1) shifted to the Ethereum convention

    return r + s + bytes([v])
