from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from web3 import Web3

from core.domain.entities.safe_entities import (
    SafeInfo,
    SafeReceipt,
    SafeTransaction,
    SafeTxRequest,
    WalletTemplateConfig,
)
from core.domain.enums.safe_enums import Operation
from core.domain.interfaces.chain_gateway_interface import SafeChainGatewayInterface
from core.domain.interfaces.safe_interface import SafeInterface
from core.services.exceptions import (
    AlreadyExistsError,
    BadParamsError,
    NotDeployedError,
    RpcError,
)
from core.services.safe_address_service import SafeAddressService
from core.services.safe_initializer import build_initializer
from core.services.utils import parse_address, parse_hex_bytes, parse_uint256

logger = logging.getLogger(__name__)


def parse_operation(value: Any) -> Operation:
    if isinstance(value, bool) or not isinstance(value, int):
        raise BadParamsError(f"Unknown Operation enum variant {value!r}")
    try:
        return Operation(value)
    except ValueError as exc:
        raise BadParamsError(f"Unknown Operation enum variant {value}") from exc


def validate_tx_request(request: SafeTxRequest) -> SafeTransaction:
    """
    Field-by-field validation of an execTransaction request.

    Raises BadParamsError for the operation, numeric and byte fields and
    BadAddressError for the address fields, naming the field.
    """
    operation = parse_operation(request.operation)
    return SafeTransaction(
        to=parse_address(request.to, field="to"),
        value=parse_uint256(request.value, field="value"),
        data=parse_hex_bytes(request.data, field="data"),
        operation=operation,
        safe_tx_gas=parse_uint256(request.safe_tx_gas, field="safeTxGas"),
        base_gas=parse_uint256(request.base_gas, field="baseGas"),
        gas_price=parse_uint256(request.gas_price, field="gasPrice"),
        gas_token=parse_address(request.gas_token, field="gasToken"),
        refund_receiver=parse_address(request.refund_receiver, field="refundReceiver"),
        signatures=parse_hex_bytes(request.signatures, field="signatures"),
    )


def receipt_identifiers(receipt: Mapping[str, Any]) -> SafeReceipt:
    """
    Block hash and transaction hash of the first log emitted by a mined tx.

    createProxyWithNonce and execTransaction both emit at least one event
    (ProxyCreation / ExecutionSuccess); a receipt without logs means the call
    did not do what was expected.
    """
    logs = receipt.get("logs") or []
    if not logs:
        raise RpcError(f"receipt of {_hex(receipt.get('transactionHash'))} carries no logs")

    first = logs[0]
    block_hash = first.get("blockHash")
    tx_hash = first.get("transactionHash")
    if block_hash is None or tx_hash is None:
        raise RpcError("first receipt log is missing blockHash / transactionHash (pending log?)")

    return SafeReceipt(block_hash=_hex(block_hash), transaction_hash=_hex(tx_hash))


def _hex(value: Any) -> str:
    if value is None:
        return "<unknown>"
    if isinstance(value, str):
        return value if value.startswith("0x") else "0x" + value
    return Web3.to_hex(value)


@dataclass
class SafeService(SafeInterface):
    """
    Production Safe implementation.

    State machine per owner: Undeployed -> (deploy) -> Deployed -> (exec) -> Deployed.
    The chain is the only source of truth; nothing is cached between calls.
    """

    config: WalletTemplateConfig
    gateway: SafeChainGatewayInterface

    def __post_init__(self) -> None:
        self.addresses = SafeAddressService(config=self.config, gateway=self.gateway)

    async def is_deployed(self, address: str) -> bool:
        code = await self.gateway.get_code(address)
        logger.debug("Code at %s: %d bytes", address, len(code))
        return len(code) > 0

    async def info(self, owner_address: str) -> SafeInfo:
        owner = parse_address(owner_address, field="owner")
        address = await self.addresses.derive(owner)
        return SafeInfo(address=address, is_deployed=await self.is_deployed(address))

    async def deploy(self, owner_address: str) -> SafeReceipt:
        owner = parse_address(owner_address, field="owner")
        info = await self.info(owner)
        if info.is_deployed:
            logger.warning("Deploy rejected, Safe %s of owner %s already exists", info.address, owner)
            raise AlreadyExistsError()

        # Not atomic with the check above: a concurrent deploy for the same
        # owner loses on chain and comes back as a reverted tx (RpcError).
        receipt = await self.gateway.create_proxy_with_nonce(
            self.config.master_copy,
            build_initializer(owner, self.config),
            self.config.salt_nonce_int,
        )
        result = receipt_identifiers(receipt)
        logger.info("Safe %s deployed for owner %s in tx %s", info.address, owner, result.transaction_hash)
        return result

    async def exec(self, owner_address: str, request: SafeTxRequest) -> SafeReceipt:
        info = await self.info(owner_address)
        if not info.is_deployed:
            logger.warning("Exec rejected, Safe %s is not deployed", info.address)
            raise NotDeployedError()

        tx = validate_tx_request(request)
        receipt = await self.gateway.exec_transaction(info.address, tx)
        result = receipt_identifiers(receipt)
        logger.info(
            "execTransaction on Safe %s (to=%s op=%s) mined in tx %s",
            info.address,
            tx.to,
            tx.operation.name,
            result.transaction_hash,
        )
        return result
