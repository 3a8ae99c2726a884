# core/services/utils.py
from typing import Any
from collections.abc import Mapping

from eth_utils import is_hex_address
from hexbytes import HexBytes
from web3 import Web3

from core.services.exceptions import BadAddressError, BadParamsError
from core.services.packed_hasher import UINT256_MAX


def to_json_safe(obj: Any) -> Any:
    """
    Recursively convert web3 / HexBytes-heavy structures (receipts, logs) into
    plain JSON-serializable primitives.

    - HexBytes / bytes -> "0x..." str
    - Mapping          -> {k: to_json_safe(v)}   (covers AttributeDict)
    - list/tuple       -> [to_json_safe(v), ...]
    - everything else  -> unchanged if primitive, else str(obj)
    """
    if isinstance(obj, (HexBytes, bytes, bytearray)):
        return Web3.to_hex(obj)

    if isinstance(obj, (str, int, float, bool)) or obj is None:
        return obj

    if isinstance(obj, Mapping):
        return {str(k): to_json_safe(v) for (k, v) in obj.items()}

    if isinstance(obj, (list, tuple, set)):
        return [to_json_safe(v) for v in obj]

    return str(obj)


def parse_address(value: Any, *, field: str = "address") -> str:
    """
    Parse a 0x-prefixed 20-byte hex address (any letter case) into its
    checksummed form.
    """
    s = (value or "").strip() if isinstance(value, str) else ""
    if not is_hex_address(s) or not s.lower().startswith("0x"):
        raise BadAddressError(f"{field} {value!r}")
    return Web3.to_checksum_address(s)


def parse_uint256(value: Any, *, field: str) -> int:
    """
    Parse a decimal string into a uint256. Signs, whitespace, hex and
    non-ASCII digits are rejected.
    """
    s = value if isinstance(value, str) else ""
    if not s or not (s.isascii() and s.isdigit()):
        raise BadParamsError(f"{field} {value!r} is not a non-negative decimal integer")
    n = int(s)
    if n > UINT256_MAX:
        raise BadParamsError(f"{field} {value!r} does not fit in uint256")
    return n


def parse_hex_bytes(value: Any, *, field: str) -> bytes:
    """Accepts bytes, a "0x..." hex string or a list of byte values."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        s = value.strip()
        # HexBytes left-pads odd-length input, a half byte is a client error here
        if len(s) % 2:
            raise BadParamsError(f"{field} has an odd number of hex digits")
        try:
            return bytes(HexBytes(s))
        except ValueError as exc:
            raise BadParamsError(f"{field} is not valid hex") from exc
    if isinstance(value, (list, tuple)):
        try:
            return bytes(value)
        except (TypeError, ValueError) as exc:
            raise BadParamsError(f"{field} must hold byte values 0-255") from exc
    raise BadParamsError(f"{field} must be a hex string or a list of bytes")
