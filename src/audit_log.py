import json
import time
import os
from dataclasses import asdict

LOG = "audit.jsonl"

def _jsonable(v):
    # uint256 values overflow JSON doubles; keep them as decimal strings
    if isinstance(v, bool):
        return v
    if isinstance(v, int):
        return str(v)
    if isinstance(v, (bytes, bytearray)):
        return "0x" + bytes(v).hex()
    return v

def commit_entry(signer, signed) -> dict:
    """Audit record for one issued commit. Carries no key material."""
    return {
        "event": "commit_signed",
        "variant": signer.variant.key,
        "signer": signer.address,
        "contract": signer.contract_address,
        "chain_id": signer.chain_id,
        "commit": {k: _jsonable(v) for k, v in asdict(signed.commit).items()},
        "digest": _jsonable(signed.digest),
        "signature": _jsonable(signed.signature),
    }

def append(entry: dict, path: str = LOG):
    entry = {**entry, "ts_ns": time.time_ns()}
    # Serialize with minimal separators to be byte-dense and JSONL format
    entry_line = json.dumps(entry, separators=(",", ":")) + "\n"

    with open(path, "a", buffering=1) as f:
        f.write(entry_line)
        f.flush()
        os.fsync(f.fileno())
