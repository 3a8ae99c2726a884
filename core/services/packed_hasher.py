"""
Tight (non-padded) packing of typed values, Solidity `abi.encodePacked` style,
followed by keccak-256.

Widths:
- address: 20 bytes
- uint256 / int256: 32 bytes big-endian (int256 as two's complement)
- bytes / string: raw bytes, no length prefix, no padding
- bool: 1 byte

Only these six types are accepted. The packing itself is eth-abi's packed
codec; values it rejects (wrong type, out of range) come back as
BadParamsError.
"""

from __future__ import annotations

from typing import Any, List, Sequence

from eth_abi.exceptions import EncodingError
from eth_abi.packed import encode_packed as abi_encode_packed
from eth_utils import is_hex, keccak, to_bytes

from core.services.exceptions import BadParamsError, UnsupportedTypeError

UINT256_MAX = 2**256 - 1

SUPPORTED_TYPES = frozenset({"address", "bytes", "uint256", "int256", "string", "bool"})


def _normalize(type_name: str, value: Any) -> Any:
    # eth-abi only takes raw bytes for `bytes`; callers may hand over 0x hex
    if type_name == "bytes" and isinstance(value, str) and value.startswith("0x") and is_hex(value):
        return to_bytes(hexstr=value)
    if type_name == "bytes" and isinstance(value, bytearray):
        return bytes(value)
    return value


def encode_packed(types: Sequence[str], values: Sequence[Any]) -> bytes:
    """
    Concatenate `values` using the tight encoding of `types`.

    Raises:
        UnsupportedTypeError: a type outside the supported set.
        BadParamsError: arity mismatch or a value that does not fit its type.
    """
    if len(types) != len(values):
        raise BadParamsError(
            f"encode_packed got {len(types)} types for {len(values)} values"
        )

    normalized: List[Any] = []
    for type_name, value in zip(types, values):
        if type_name not in SUPPORTED_TYPES:
            raise UnsupportedTypeError(type_name)
        normalized.append(_normalize(type_name, value))

    try:
        return abi_encode_packed(list(types), normalized)
    except EncodingError as exc:
        raise BadParamsError(str(exc)) from exc


def solidity_keccak256(types: Sequence[str], values: Sequence[Any]) -> bytes:
    """keccak256(abi.encodePacked(values...))"""
    return keccak(encode_packed(types, values))
