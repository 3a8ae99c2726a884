from __future__ import annotations

from abc import ABC, abstractmethod

from core.domain.entities.safe_entities import SafeInfo, SafeReceipt, SafeTxRequest


class SafeInterface(ABC):
    """
    Per-user Safe capability.

    Implementations raise `core.services.exceptions.SafeError` subclasses.
    """

    @abstractmethod
    async def info(self, owner_address: str) -> SafeInfo:
        raise NotImplementedError

    @abstractmethod
    async def deploy(self, owner_address: str) -> SafeReceipt:
        raise NotImplementedError

    @abstractmethod
    async def exec(self, owner_address: str, request: SafeTxRequest) -> SafeReceipt:
        raise NotImplementedError
