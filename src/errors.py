class CosignerError(Exception):
    """Base class for every error raised by the cosigner core."""


class InvalidKeyError(CosignerError, ValueError):
    """Private key is not a usable secp256k1 scalar."""


class InvalidAddressError(CosignerError, ValueError):
    """Value is not a well-formed 20-byte address."""


class RangeError(CosignerError, ValueError):
    """Integer does not fit the declared unsigned bit width."""


class EncodingError(CosignerError, ValueError):
    """Value cannot be normalized to the bytes its ABI type expects."""
