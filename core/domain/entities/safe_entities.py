# core/domain/entities/safe_entities.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Union

from pydantic import BaseModel, ConfigDict

from core.domain.enums.safe_enums import Operation

RawBytes = Union[bytes, str, List[int]]


class WalletTemplateConfig(BaseModel):
    """
    Addresses and salt shared by every Safe this backend derives or deploys.

    Built once at startup and never mutated; all addresses are checksummed.
    """

    fallback_handler: str
    master_copy: str
    proxy_factory: str
    salt_nonce: bytes

    model_config = ConfigDict(frozen=True)

    @property
    def salt_nonce_int(self) -> int:
        return int.from_bytes(self.salt_nonce, "big")


class SafeInfo(BaseModel):
    address: str
    is_deployed: bool


class SafeReceipt(BaseModel):
    """Identifiers of a mined deployment / execution."""

    block_hash: str
    transaction_hash: str


class SafeTxRequest(BaseModel):
    """
    Caller-supplied `execTransaction` parameters, still unvalidated.

    Numeric fields are decimal strings, addresses are plain strings and byte
    payloads are raw bytes, a 0x hex string or a list of byte values, so that
    validation can name the offending field.
    """

    to: str
    value: str
    data: RawBytes = b""
    operation: int
    safe_tx_gas: str
    base_gas: str
    gas_price: str
    gas_token: str
    refund_receiver: str
    signatures: RawBytes = b""


@dataclass(frozen=True)
class SafeTransaction:
    """Validated `execTransaction` arguments, ready for ABI encoding."""

    to: str
    value: int
    data: bytes
    operation: Operation
    safe_tx_gas: int
    base_gas: int
    gas_price: int
    gas_token: str
    refund_receiver: str
    signatures: bytes

    def to_abi_args(self) -> list:
        # MUST match Safe.execTransaction argument order
        return [
            self.to,
            self.value,
            self.data,
            int(self.operation),
            self.safe_tx_gas,
            self.base_gas,
            self.gas_price,
            self.gas_token,
            self.refund_receiver,
            self.signatures,
        ]
