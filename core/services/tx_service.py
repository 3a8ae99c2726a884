from __future__ import annotations

import logging
from typing import Any, Awaitable, Dict, TypeVar

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3
from web3.contract.async_contract import AsyncContractFunction

from core.services.exceptions import RpcError, SafeError, TransactionRevertedError
from core.services.utils import to_json_safe

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def rpc_guard(awaitable: Awaitable[T], what: str) -> T:
    """
    Await a web3 call, turning any node / transport / timeout failure into
    RpcError. Cancellation is not an Exception and propagates untouched.
    """
    try:
        return await awaitable
    except SafeError:
        raise
    except Exception as exc:
        raise RpcError(f"{what}: {exc}") from exc


class TxService:
    """
    Transaction sender for backend-signed contract calls.

    Responsibilities:
    - Build the tx for a parameterized contract function (nonce, chain id,
      gas and fee fields are filled by web3).
    - Sign with the backend key and broadcast.
    - Wait for the receipt and reject reverted transactions.
    """

    def __init__(self, w3: AsyncWeb3, private_key: str):
        self.w3 = w3
        self.account: LocalAccount = Account.from_key(private_key)

    def sender_address(self) -> str:
        return self.account.address

    # ---------- internal helpers ----------

    async def _next_nonce(self) -> int:
        return await rpc_guard(
            self.w3.eth.get_transaction_count(self.account.address, "pending"),
            "nonce lookup failed",
        )

    async def _build_tx_dict(self, fn: AsyncContractFunction, value_wei: int) -> dict:
        base_tx = {
            "from": self.account.address,
            "nonce": await self._next_nonce(),
            "value": int(value_wei or 0),
        }
        return await rpc_guard(fn.build_transaction(base_tx), "transaction build failed")

    async def _sign_and_send(self, tx: dict) -> str:
        signed = self.account.sign_transaction(tx)
        txh = await rpc_guard(
            self.w3.eth.send_raw_transaction(signed.raw_transaction),
            "transaction submission failed",
        )
        return self.w3.to_hex(txh)

    async def _wait_receipt(self, tx_hash: str) -> Dict[str, Any]:
        rcpt = await rpc_guard(
            self.w3.eth.wait_for_transaction_receipt(tx_hash),
            f"waiting for receipt of {tx_hash} failed",
        )
        return dict(rcpt)

    # ---------- public API ----------

    async def send(self, fn: AsyncContractFunction, *, value: int = 0) -> Dict[str, Any]:
        """
        Broadcast a state-changing call and block (asynchronously) until mined.

        Returns:
            The receipt as a dict (web3 AttributeDict unwrapped one level).

        Raises:
            RpcError: build / submission / confirmation failed.
            TransactionRevertedError: mined with status == 0.
        """
        tx = await self._build_tx_dict(fn, value_wei=value)
        tx_hash = await self._sign_and_send(tx)
        logger.info("Submitted %s from %s: %s", fn.fn_name, self.account.address, tx_hash)

        rcpt = await self._wait_receipt(tx_hash)
        logger.debug("Receipt of %s: %s", fn.fn_name, to_json_safe(rcpt))

        if int(rcpt.get("status", 0)) == 0:
            raise TransactionRevertedError(tx_hash=tx_hash, receipt=to_json_safe(rcpt))
        return rcpt
