import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from web3 import AsyncWeb3

from config import ConfigError, Settings, get_settings, load_wallet_template
from adapters.chain.safe_contracts import Web3SafeChainGateway
from core.domain.entities.safe_entities import SafeTxRequest
from core.domain.interfaces.safe_interface import SafeInterface
from core.services.safe_service import SafeService
from core.services.tx_service import TxService
from core.services.web3_cache import get_async_web3

logger = logging.getLogger(__name__)


@dataclass
class SafeUseCase:
    """
    Entry point used by the HTTP layer. Returns JSON-ready dicts (camelCase
    keys, as served to the front).
    """

    safe: SafeInterface
    w3: Optional[AsyncWeb3] = None
    signer_address: Optional[str] = None

    @classmethod
    def from_settings(cls, s: Optional[Settings] = None) -> "SafeUseCase":
        s = s or get_settings()
        if not (s.RPC_URL or "").strip():
            raise ConfigError("RPC_URL must be set")
        if not (s.BACKEND_PRIVATE_KEY or "").strip():
            raise ConfigError("BACKEND_PRIVATE_KEY must be set")

        template = load_wallet_template(s)
        w3 = get_async_web3(s.RPC_URL, timeout_sec=s.RPC_TIMEOUT_SEC)
        try:
            txs = TxService(w3=w3, private_key=s.BACKEND_PRIVATE_KEY)
        except Exception as exc:
            raise ConfigError("BACKEND_PRIVATE_KEY is not a valid private key") from exc
        gateway = Web3SafeChainGateway(w3=w3, proxy_factory=template.proxy_factory, txs=txs)
        safe = SafeService(config=template, gateway=gateway)
        return cls(safe=safe, w3=w3, signer_address=txs.sender_address())

    async def log_chain_info(self) -> None:
        """Startup diagnostics; an unreachable node is not fatal here."""
        if self.w3 is None:
            return
        try:
            chain_id = await self.w3.eth.chain_id
        except Exception as exc:
            logger.warning("Could not read chain id from RPC: %s", exc)
            return
        logger.info("Provider's chain id is %s, backend signer is %s", chain_id, self.signer_address)

    # ---------------- views ----------------

    async def info(self, owner_address: str) -> Dict[str, Any]:
        res = await self.safe.info(owner_address)
        return {"address": res.address, "isDeployed": res.is_deployed}

    # ---------------- tx runners (signed by backend PK) ----------------

    async def deploy(self, owner_address: str) -> Dict[str, Any]:
        res = await self.safe.deploy(owner_address)
        return {"blockHash": res.block_hash, "transactionHash": res.transaction_hash}

    async def exec(self, owner_address: str, request: SafeTxRequest) -> Dict[str, Any]:
        res = await self.safe.exec(owner_address, request)
        return {"blockHash": res.block_hash, "transactionHash": res.transaction_hash}
