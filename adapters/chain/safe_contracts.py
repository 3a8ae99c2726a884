# adapters/chain/safe_contracts.py
from __future__ import annotations

from typing import Any, Dict

from web3 import AsyncWeb3, Web3
from web3.contract import AsyncContract
from web3.contract.async_contract import AsyncContractFunction

from core.domain.entities.safe_entities import SafeTransaction
from core.domain.interfaces.chain_gateway_interface import SafeChainGatewayInterface
from core.services.tx_service import TxService, rpc_guard


ABI_PROXY_FACTORY = [
    {
        "name": "proxyCreationCode",
        "inputs": [],
        "outputs": [{"internalType": "bytes", "name": "", "type": "bytes"}],
        "stateMutability": "pure",
        "type": "function",
    },
    {
        "name": "createProxyWithNonce",
        "inputs": [
            {"internalType": "address", "name": "_singleton", "type": "address"},
            {"internalType": "bytes", "name": "initializer", "type": "bytes"},
            {"internalType": "uint256", "name": "saltNonce", "type": "uint256"},
        ],
        "outputs": [
            {"internalType": "contract GnosisSafeProxy", "name": "proxy", "type": "address"},
        ],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "name": "ProxyCreation",
        "anonymous": False,
        "inputs": [
            {"indexed": False, "internalType": "contract GnosisSafeProxy", "name": "proxy", "type": "address"},
            {"indexed": False, "internalType": "address", "name": "singleton", "type": "address"},
        ],
        "type": "event",
    },
]


ABI_SAFE = [
    {
        "name": "setup",
        "inputs": [
            {"internalType": "address[]", "name": "_owners", "type": "address[]"},
            {"internalType": "uint256", "name": "_threshold", "type": "uint256"},
            {"internalType": "address", "name": "to", "type": "address"},
            {"internalType": "bytes", "name": "data", "type": "bytes"},
            {"internalType": "address", "name": "fallbackHandler", "type": "address"},
            {"internalType": "address", "name": "paymentToken", "type": "address"},
            {"internalType": "uint256", "name": "payment", "type": "uint256"},
            {"internalType": "address payable", "name": "paymentReceiver", "type": "address"},
        ],
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "name": "execTransaction",
        "inputs": [
            {"internalType": "address", "name": "to", "type": "address"},
            {"internalType": "uint256", "name": "value", "type": "uint256"},
            {"internalType": "bytes", "name": "data", "type": "bytes"},
            {"internalType": "enum Enum.Operation", "name": "operation", "type": "uint8"},
            {"internalType": "uint256", "name": "safeTxGas", "type": "uint256"},
            {"internalType": "uint256", "name": "baseGas", "type": "uint256"},
            {"internalType": "uint256", "name": "gasPrice", "type": "uint256"},
            {"internalType": "address", "name": "gasToken", "type": "address"},
            {"internalType": "address payable", "name": "refundReceiver", "type": "address"},
            {"internalType": "bytes", "name": "signatures", "type": "bytes"},
        ],
        "outputs": [{"internalType": "bool", "name": "success", "type": "bool"}],
        "stateMutability": "payable",
        "type": "function",
    },
    {
        "name": "ExecutionSuccess",
        "anonymous": False,
        "inputs": [
            {"indexed": False, "internalType": "bytes32", "name": "txHash", "type": "bytes32"},
            {"indexed": False, "internalType": "uint256", "name": "payment", "type": "uint256"},
        ],
        "type": "event",
    },
]


class ProxyFactoryAdapter:
    """
    Thin wrapper for the on-chain SafeProxyFactory.
    """

    def __init__(self, w3: AsyncWeb3, address: str):
        if not address:
            raise RuntimeError("ProxyFactoryAdapter: address not configured")
        self.w3 = w3
        self.address = Web3.to_checksum_address(address)
        self.contract: AsyncContract = w3.eth.contract(address=self.address, abi=ABI_PROXY_FACTORY)

    async def proxy_creation_code(self) -> bytes:
        code = await self.contract.functions.proxyCreationCode().call()
        return bytes(code)

    # ---------------- fn builders (for TxService.send) ----------------

    def fn_create_proxy_with_nonce(self, singleton: str, initializer: bytes, salt_nonce: int) -> AsyncContractFunction:
        return self.contract.functions.createProxyWithNonce(
            Web3.to_checksum_address(singleton), bytes(initializer), int(salt_nonce)
        )


class SafeAdapter:
    """
    Thin wrapper for one deployed Safe proxy (Safe singleton ABI).
    """

    def __init__(self, w3: AsyncWeb3, address: str):
        self.w3 = w3
        self.address = Web3.to_checksum_address(address)
        self.contract: AsyncContract = w3.eth.contract(address=self.address, abi=ABI_SAFE)

    def fn_exec_transaction(self, tx: SafeTransaction) -> AsyncContractFunction:
        return self.contract.functions.execTransaction(*tx.to_abi_args())


class Web3SafeChainGateway(SafeChainGatewayInterface):
    """
    SafeChainGatewayInterface over web3.py (AsyncWeb3) and the backend signer.
    """

    def __init__(self, w3: AsyncWeb3, proxy_factory: str, txs: TxService):
        self.w3 = w3
        self.factory = ProxyFactoryAdapter(w3=w3, address=proxy_factory)
        self.txs = txs

    async def get_code(self, address: str) -> bytes:
        code = await rpc_guard(self.w3.eth.get_code(Web3.to_checksum_address(address)), "eth_getCode failed")
        return bytes(code)

    async def proxy_creation_code(self) -> bytes:
        return await rpc_guard(self.factory.proxy_creation_code(), "proxyCreationCode call failed")

    async def create_proxy_with_nonce(
        self, master_copy: str, initializer: bytes, salt_nonce: int
    ) -> Dict[str, Any]:
        fn = self.factory.fn_create_proxy_with_nonce(master_copy, initializer, salt_nonce)
        return await self.txs.send(fn)

    async def exec_transaction(self, safe_address: str, tx: SafeTransaction) -> Dict[str, Any]:
        fn = SafeAdapter(w3=self.w3, address=safe_address).fn_exec_transaction(tx)
        return await self.txs.send(fn)
