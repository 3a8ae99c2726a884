"""
Deterministic Safe address derivation.

Mirrors what `SafeProxyFactory.createProxyWithNonce` does on chain:

    salt           = keccak256(abi.encodePacked(keccak256(initializer), saltNonce))
    deploymentData = abi.encodePacked(proxyCreationCode, uint256(uint160(singleton)))
    address        = keccak256(0xff ++ factory ++ salt ++ keccak256(deploymentData))[12:]

so the address is known before the proxy exists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from eth_utils import keccak, to_bytes, to_checksum_address

from core.domain.entities.safe_entities import WalletTemplateConfig
from core.domain.interfaces.chain_gateway_interface import SafeChainGatewayInterface
from core.services.exceptions import BadParamsError
from core.services.packed_hasher import solidity_keccak256
from core.services.safe_initializer import build_initializer

logger = logging.getLogger(__name__)


def compute_create2_address(deployer: str, salt: bytes, init_code_hash: bytes) -> str:
    """EIP-1014 address for `deployer`, `salt` and `keccak256(init_code)`."""
    if len(salt) != 32:
        raise BadParamsError(f"salt must be 32 bytes, got {len(salt)}")
    if len(init_code_hash) != 32:
        raise BadParamsError(f"init code hash must be 32 bytes, got {len(init_code_hash)}")

    digest = keccak(b"\xff" + to_bytes(hexstr=deployer) + salt + init_code_hash)
    return to_checksum_address(digest[12:])


def compute_salt(initializer: bytes, salt_nonce: int) -> bytes:
    return solidity_keccak256(["bytes", "uint256"], [keccak(initializer), salt_nonce])


def compute_init_code_hash(proxy_creation_code: bytes, master_copy: str) -> bytes:
    # the singleton goes in as a uint256, i.e. left-padded to 32 bytes
    return solidity_keccak256(
        ["bytes", "uint256"],
        [proxy_creation_code, int.from_bytes(to_bytes(hexstr=master_copy), "big")],
    )


@dataclass
class SafeAddressService:
    config: WalletTemplateConfig
    gateway: SafeChainGatewayInterface

    async def derive(self, owner: str) -> str:
        """
        Checksummed CREATE2 address of the Safe owned by `owner`.

        `owner` must already be a parsed, checksummed address. One RPC call
        (`proxyCreationCode`) is made; it raises RpcError on failure.
        """
        initializer = build_initializer(owner, self.config)
        logger.debug("Initializer hash: 0x%s", keccak(initializer).hex())

        salt = compute_salt(initializer, self.config.salt_nonce_int)
        logger.debug("Salt: 0x%s", salt.hex())

        init_code = await self.gateway.proxy_creation_code()
        init_code_hash = compute_init_code_hash(init_code, self.config.master_copy)
        logger.debug("Init code hash: 0x%s", init_code_hash.hex())

        address = compute_create2_address(self.config.proxy_factory, salt, init_code_hash)
        logger.debug("Create2 address for owner %s: %s", owner, address)
        return address
