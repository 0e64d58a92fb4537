from dataclasses import dataclass
from typing import Tuple

from eth_abi import encode
from eth_hash.auto import keccak
from sign_core import u256, addr, b32, keccak_text

# EIP-712 Domain TypeHash (standard per EIP-712)
DOMAIN_TYPE_STR = b"EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
DOMAIN_TYPEHASH = keccak(DOMAIN_TYPE_STR)

PRIMARY_TYPE = "CommitData"


@dataclass(frozen=True)
class SchemaVariant:
    """
    One named configuration of the commit signer.
    `fields` is the ordered (name, solidity type) list; it defines both the
    EIP-712 struct type and the ABI call-data tuple, so it must match the
    consuming contract exactly.
    """
    key: str
    domain_name: str
    domain_version: str
    fields: Tuple[Tuple[str, str], ...]

    @property
    def abi_types(self) -> list:
        return [t for _, t in self.fields]

    @property
    def field_names(self) -> list:
        return [n for n, _ in self.fields]

    @property
    def type_string(self) -> str:
        members = ",".join(f"{t} {n}" for n, t in self.fields)
        return f"{PRIMARY_TYPE}({members})"

    @property
    def typehash(self) -> bytes:
        return keccak(self.type_string.encode("utf-8"))


_COMMON_FIELDS = (
    ("id", "uint256"),
    ("receiver", "address"),
    ("cosigner", "address"),
    ("seed", "uint256"),
    ("counter", "uint256"),
)

# CommitData(uint256 id,address receiver,address cosigner,uint256 seed,uint256 counter,bytes32 orderHash,uint256 amount,uint256 reward)
EXTENDED = SchemaVariant(
    key="extended",
    domain_name="LuckyBuy",
    domain_version="1",
    fields=_COMMON_FIELDS + (
        ("orderHash", "bytes32"),
        ("amount", "uint256"),
        ("reward", "uint256"),
    ),
)

# CommitData(uint256 id,address receiver,address cosigner,uint256 seed,uint256 counter,string orderHash)
BASIC = SchemaVariant(
    key="basic",
    domain_name="MagicSigner",
    domain_version="1",
    fields=_COMMON_FIELDS + (
        ("orderHash", "string"),
    ),
)

VARIANTS = {v.key: v for v in (EXTENDED, BASIC)}


def domain_separator(name: str, version: str, chain_id: int, verifying_contract: str) -> bytes:
    """
    Computes the EIP-712 Domain Separator.
    """
    return keccak(
        DOMAIN_TYPEHASH +
        keccak_text(name) +
        keccak_text(version) +
        u256(chain_id) +
        addr(verifying_contract)
    )


def encode_member(solidity_type: str, value) -> bytes:
    """
    encodeData rule for a single atomic/dynamic member.
    Values are expected to be normalized already (ints, checksummed
    addresses, 32-byte bytes32, str for string).
    """
    if solidity_type == "uint256":
        return u256(value)
    if solidity_type == "address":
        return addr(value)
    if solidity_type == "bytes32":
        return b32(value)
    if solidity_type == "string":
        return keccak_text(value)
    if solidity_type == "bytes":
        return keccak(value)
    raise ValueError(f"Unsupported member type: {solidity_type}")


def commit_struct_hash(variant: SchemaVariant, values: list) -> bytes:
    """
    Computes the EIP-712 structHash for a CommitData record.
    Every member is a 32-byte word: uint256 big-endian, addresses left-padded,
    bytes32 verbatim, string replaced by keccak256 of its UTF-8 bytes.
    """
    assert len(values) == len(variant.fields)
    encoded = b"".join(
        encode_member(t, v) for (_, t), v in zip(variant.fields, values)
    )
    return keccak(variant.typehash + encoded)


def commit_call_data(variant: SchemaVariant, values: list) -> bytes:
    # plain abi.encode of the tuple: no typehash, no domain
    return encode(variant.abi_types, list(values))
