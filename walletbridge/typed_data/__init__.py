"""
EIP-712 typed data support.

Only hashing lives here; signing is the wallet host's job.
"""

from walletbridge.typed_data.eip712 import TypedDataEncoder, TypedDataField, keccak256

__all__ = [
    "TypedDataEncoder",
    "TypedDataField",
    "keccak256",
]
