from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

from core.domain.entities.safe_entities import SafeTransaction


class SafeChainGatewayInterface(ABC):
    """
    Chain operations the Safe core needs.

    Every method translates transport / node failures into `RpcError`.
    Transaction methods sign with the backend key, wait until mined and return
    the receipt as a plain dict (`status`, `blockHash`, `transactionHash`,
    `logs`).
    """

    @abstractmethod
    async def get_code(self, address: str) -> bytes:
        raise NotImplementedError

    @abstractmethod
    async def proxy_creation_code(self) -> bytes:
        raise NotImplementedError

    @abstractmethod
    async def create_proxy_with_nonce(
        self, master_copy: str, initializer: bytes, salt_nonce: int
    ) -> Dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    async def exec_transaction(self, safe_address: str, tx: SafeTransaction) -> Dict[str, Any]:
        raise NotImplementedError
