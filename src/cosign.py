# ============================================================================
# PROJECT: LuckyBuy Cosigner
# MODULE: cosign.py
# PURPOSE: Manual smoke harness. Sources the cosigner key, signs one commit,
#          prints digest / signature / call data and appends an audit record.
# ============================================================================

import argparse
import os
import sys

import keyring
from keyring.errors import KeyringError

from audit_log import LOG, append as audit_append, commit_entry
from commit_struct import VARIANTS
from commit_signer import CommitSigner
from errors import CosignerError

KEYRING_SERVICE = "luckybuy-cosigner"
KEYRING_USER = "private_key"

DEFAULT_CONTRACT = "0x5615dEB798BB3E4dFa0139dFa1b3D433Cc23b72f"  # matches solidity tests
DEFAULT_CHAIN_ID = 31337  # Anvil
DEFAULT_RECEIVER = "0xE052c9CFe22B5974DC821cBa907F1DAaC7979c94"
ZERO_HASH = "0x" + "00" * 32


def load_key():
    """Environment first, then the system keyring (encrypted, per-user)."""
    key = os.getenv("COSIGNER_PRIVATE_KEY")
    if key:
        return key
    return keyring.get_password(KEYRING_SERVICE, KEYRING_USER)


def store_key():
    key = os.getenv("COSIGNER_PRIVATE_KEY")
    if not key:
        print("ERROR: Set COSIGNER_PRIVATE_KEY environment variable.")
        print("  export COSIGNER_PRIVATE_KEY=0x...")
        return 1
    try:
        keyring.set_password(KEYRING_SERVICE, KEYRING_USER, key)
    except KeyringError as e:
        print(f"[FATAL] Keyring write failed: {e}")
        return 1
    print("[OK] Cosigner key stored to system keyring")
    return 0


def build_parser():
    p = argparse.ArgumentParser(description="Sign a LuckyBuy commit with the cosigner key.")
    p.add_argument("--variant", choices=sorted(VARIANTS), default="extended")
    p.add_argument("--contract", default=os.getenv("COSIGNER_CONTRACT", DEFAULT_CONTRACT))
    p.add_argument("--chain-id", type=int, default=os.getenv("COSIGNER_CHAIN_ID", str(DEFAULT_CHAIN_ID)))
    p.add_argument("--audit-log", default=os.getenv("COSIGNER_AUDIT_LOG", LOG))
    p.add_argument("--store-key", action="store_true", help="save COSIGNER_PRIVATE_KEY to the keyring and exit")

    p.add_argument("--id", type=int, default=1)
    p.add_argument("--receiver", default=DEFAULT_RECEIVER)
    p.add_argument("--cosigner", default=None, help="defaults to the signer address")
    p.add_argument("--seed", type=int, default=1)
    p.add_argument("--counter", type=int, default=1)
    p.add_argument("--order-hash", default=None)
    p.add_argument("--amount", type=int, default=1)
    p.add_argument("--reward", type=int, default=100)
    return p


def main(argv=None):
    args = build_parser().parse_args(argv)

    if args.store_key:
        return store_key()

    try:
        private_key = load_key()
    except KeyringError as e:
        print(f"[FATAL] Keyring lookup failed: {e}")
        return 1
    if not private_key:
        print("ERROR: No cosigner key. Set COSIGNER_PRIVATE_KEY or run with --store-key.")
        return 1

    variant = VARIANTS[args.variant]
    extended = variant.key == "extended"

    try:
        signer = CommitSigner(args.contract, private_key, args.chain_id, variant)
        print(f"[OK] Signer address: {signer.address}")

        order_hash = args.order_hash
        if order_hash is None:
            order_hash = ZERO_HASH

        signed = signer.sign_commit(
            args.id,
            args.receiver,
            args.cosigner or signer.address,
            args.seed,
            args.counter,
            order_hash,
            args.amount if extended else None,
            args.reward if extended else None,
        )
        audit_append(commit_entry(signer, signed), args.audit_log)

    except CosignerError as e:
        print(f"[FATAL] Commit signing failed: {e}")
        return 1

    print(f"Commit:    {signed.commit}")
    print(f"Digest:    0x{signed.digest.hex()}")
    print(f"Signature: 0x{signed.signature.hex()}")
    print(f"Call Data: 0x{signed.call_data.hex()}")
    print(f"[OK] Audit record appended to {args.audit_log}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
