from eth_abi import encode
from eth_hash.auto import keccak
from eth_utils import decode_hex

from errors import EncodingError
from sign_core import normalize_address, to_uint256, to_utf8

# Matches Solidity: keccak256(abi.encode(to, value, data, tokenAddress, tokenId))
ORDER_ABI_TYPES = ["address", "uint256", "bytes", "address", "uint256"]


def normalize_payload(data) -> bytes:
    """
    Three accepted forms:
      "0x..."  -> hex-decoded
      "hello"  -> UTF-8 bytes
      b"..."   -> passed through
    """
    if isinstance(data, str):
        if data.startswith("0x"):
            try:
                return decode_hex(data)
            except ValueError as e:
                # binascii.Error (odd length, bad digit) is a ValueError
                raise EncodingError(f"Invalid hex payload: {e}") from e
        return to_utf8(data, "data")
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise EncodingError(f"Unsupported payload type: {type(data).__name__}")


def encode_order(to, value, data, token_address, token_id) -> bytes:
    return encode(
        ORDER_ABI_TYPES,
        [
            normalize_address(to, "to"),
            to_uint256(value, "value"),
            normalize_payload(data),
            normalize_address(token_address, "token_address"),
            to_uint256(token_id, "token_id"),
        ],
    )


def hash_order(to, value, data, token_address, token_id) -> bytes:
    return keccak(encode_order(to, value, data, token_address, token_id))
