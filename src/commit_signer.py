"""
CommitSigner: EIP-712 cosignatures for LuckyBuy commits.

A signer binds one private key to one (contract, chain) pair and one
schema variant. For every commit it returns the typed-data digest, a
65-byte recoverable signature over it, and the plain ABI call data for the
same fields.
"""

import threading
from dataclasses import astuple, dataclass
from typing import Optional, Union

from commit_struct import (
    BASIC,
    EXTENDED,
    PRIMARY_TYPE,
    SchemaVariant,
    commit_call_data,
    commit_struct_hash,
    domain_separator,
)
from errors import EncodingError
from order_hash import hash_order
from sign_core import (
    address_from_key,
    eip712_digest,
    load_private_key,
    normalize_address,
    sign_digest,
    to_bytes32,
    to_uint256,
    to_utf8,
)


@dataclass(frozen=True)
class SigningDomain:
    name: str
    version: str
    chain_id: int
    verifying_contract: str

    def as_typed_data(self) -> dict:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chain_id,
            "verifyingContract": self.verifying_contract,
        }


# Same field names on purpose: the two records are still distinct types,
# because orderHash is bytes32 in one and string in the other.

@dataclass(frozen=True)
class ExtendedCommit:
    id: int
    receiver: str
    cosigner: str
    seed: int
    counter: int
    orderHash: bytes
    amount: int
    reward: int


@dataclass(frozen=True)
class BasicCommit:
    id: int
    receiver: str
    cosigner: str
    seed: int
    counter: int
    orderHash: str


CommitRecord = Union[ExtendedCommit, BasicCommit]

_RECORD_TYPES = {
    EXTENDED.key: ExtendedCommit,
    BASIC.key: BasicCommit,
}


@dataclass(frozen=True)
class SignedCommit:
    commit: CommitRecord
    call_data: bytes
    signature: bytes
    digest: bytes


class CommitSigner:
    """
    Parameters
    ----------
    contract_address:
        Verifying contract. Validated and checksummed at construction.
    private_key:
        32 raw bytes or hex (``0x`` optional). Held in memory only.
    chain_id:
        EIP-155 chain id of the verifying contract.
    variant:
        ``commit_struct.EXTENDED`` (LuckyBuy, 8 fields) or
        ``commit_struct.BASIC`` (MagicSigner, 6 fields, string orderHash).
    """

    def __init__(
        self,
        contract_address: str,
        private_key,
        chain_id: int,
        variant: SchemaVariant = EXTENDED,
    ) -> None:
        self._key = load_private_key(private_key)
        self.contract_address = normalize_address(contract_address, "contract_address")
        self.chain_id = to_uint256(chain_id, "chain_id")
        self.variant = variant
        self._address = address_from_key(self._key)
        self._domain: Optional[SigningDomain] = None
        self._domain_separator: Optional[bytes] = None
        self._domain_lock = threading.Lock()

    def __repr__(self) -> str:
        return (
            f"CommitSigner(address={self._address}, contract={self.contract_address}, "
            f"chain_id={self.chain_id}, variant={self.variant.key})"
        )

    @property
    def address(self) -> str:
        return self._address

    # ── Domain ───────────────────────────────────────────────────

    def signing_domain(self) -> SigningDomain:
        """Computed on first use, then fixed for the lifetime of the signer."""
        if self._domain is not None:
            return self._domain

        with self._domain_lock:
            if self._domain is None:
                domain = SigningDomain(
                    name=self.variant.domain_name,
                    version=self.variant.domain_version,
                    chain_id=self.chain_id,
                    verifying_contract=self.contract_address,
                )
                self._domain_separator = domain_separator(
                    domain.name,
                    domain.version,
                    domain.chain_id,
                    domain.verifying_contract,
                )
                self._domain = domain
        return self._domain

    def domain_separator(self) -> bytes:
        self.signing_domain()
        return self._domain_separator

    # ── Records ──────────────────────────────────────────────────

    def build_commit(
        self,
        id: int,
        receiver: str,
        cosigner: str,
        seed: int,
        counter: int,
        order_hash,
        amount: Optional[int] = None,
        reward: Optional[int] = None,
    ) -> CommitRecord:
        """Normalize raw fields into the record type of this signer's variant."""
        receiver = normalize_address(receiver, "receiver")
        cosigner = normalize_address(cosigner, "cosigner")
        common = (
            to_uint256(id, "id"),
            receiver,
            cosigner,
            to_uint256(seed, "seed"),
            to_uint256(counter, "counter"),
        )

        if self.variant.key == EXTENDED.key:
            if amount is None or reward is None:
                raise EncodingError("LuckyBuy commits require amount and reward")
            return ExtendedCommit(
                *common,
                orderHash=to_bytes32(order_hash, "orderHash"),
                amount=to_uint256(amount, "amount"),
                reward=to_uint256(reward, "reward"),
            )

        if amount is not None or reward is not None:
            raise EncodingError("MagicSigner commits carry no amount or reward")
        if not isinstance(order_hash, str):
            # bytes32 vs string hash differently under EIP-712; never coerce
            raise EncodingError(
                f"MagicSigner orderHash must be a str, got {type(order_hash).__name__}"
            )
        to_utf8(order_hash, "orderHash")
        return BasicCommit(*common, orderHash=order_hash)

    def typed_data(self, commit: CommitRecord) -> dict:
        """Full EIP-712 message in the JSON shape wallets and libraries consume."""
        self._check_record(commit)
        message = dict(zip(self.variant.field_names, astuple(commit)))
        return {
            "types": {
                "EIP712Domain": [
                    {"name": "name", "type": "string"},
                    {"name": "version", "type": "string"},
                    {"name": "chainId", "type": "uint256"},
                    {"name": "verifyingContract", "type": "address"},
                ],
                PRIMARY_TYPE: [
                    {"name": n, "type": t} for n, t in self.variant.fields
                ],
            },
            "primaryType": PRIMARY_TYPE,
            "domain": self.signing_domain().as_typed_data(),
            "message": message,
        }

    # ── Signing ──────────────────────────────────────────────────

    def sign_commit(
        self,
        id: int,
        receiver: str,
        cosigner: str,
        seed: int,
        counter: int,
        order_hash,
        amount: Optional[int] = None,
        reward: Optional[int] = None,
    ) -> SignedCommit:
        commit = self.build_commit(
            id, receiver, cosigner, seed, counter, order_hash, amount, reward
        )
        return self._sign(commit)

    def sign(self, commit: CommitRecord) -> SignedCommit:
        """Sign a prebuilt record; its fields are re-normalized first."""
        self._check_record(commit)
        return self._sign(self.build_commit(*astuple(commit)))

    def _sign(self, commit: CommitRecord) -> SignedCommit:
        values = list(astuple(commit))

        digest = eip712_digest(
            self.domain_separator(),
            commit_struct_hash(self.variant, values),
        )
        signature = sign_digest(self._key, digest)
        call_data = commit_call_data(self.variant, values)

        return SignedCommit(
            commit=commit,
            call_data=call_data,
            signature=signature,
            digest=digest,
        )

    def hash_order(self, to, value, data, token_address, token_id) -> bytes:
        return hash_order(to, value, data, token_address, token_id)

    def _check_record(self, commit) -> None:
        expected = _RECORD_TYPES[self.variant.key]
        if type(commit) is not expected:
            raise EncodingError(
                f"{self.variant.domain_name} signer cannot sign {type(commit).__name__}"
            )
