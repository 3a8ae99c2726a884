from __future__ import annotations

from typing import Any, Dict, Optional


class SafeError(Exception):
    """
    Base class for every error the Safe core can raise.

    Each subclass carries the HTTP status it maps to, so the entry layer
    never has to know the taxonomy:
    - client faults (bad input, wrong deployment state) -> 400
    - chain / transport failures -> 503
    """

    status_code: int = 400
    prefix: str = ""

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(self.message)

    @property
    def message(self) -> str:
        if self.prefix and self.detail:
            return f"{self.prefix}: {self.detail}"
        return self.prefix or self.detail

    def as_dict(self) -> Dict[str, Any]:
        return {"code": self.status_code, "message": self.message}


class BadAddressError(SafeError):
    prefix = "Invalid address"


class BadParamsError(SafeError):
    prefix = "Bad parameters passed"


class UnsupportedTypeError(BadParamsError):
    """
    Raised by the packed hasher when asked to pack a type outside
    address / bytes / uint256 / int256 / string / bool.
    """

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f"unsupported packed type {type_name!r}")


class AlreadyExistsError(SafeError):
    prefix = "Safe is already deployed"


class NotDeployedError(SafeError):
    prefix = "Safe is not deployed"


class RpcError(SafeError):
    status_code = 503
    prefix = "Rpc unavailable"


class TransactionRevertedError(RpcError):
    """
    Mined with status == 0. Surfaces as an RpcError so that a lost deployment
    race shows up as a chain-level failure.
    """

    def __init__(self, tx_hash: str, receipt: Optional[Dict[str, Any]] = None):
        self.tx_hash = tx_hash
        self.receipt = receipt
        super().__init__(f"transaction {tx_hash} reverted (status=0)")
