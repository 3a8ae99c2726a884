"""Shared fixtures: a fixed wallet template and an in-memory chain."""
from __future__ import annotations

import pytest
from eth_utils import to_checksum_address

from core.domain.entities.safe_entities import WalletTemplateConfig
from core.services.safe_service import SafeService
from tests.fakes import FakeChainGateway

# Safe v1.3.0 mainnet deployments
FALLBACK_HANDLER = to_checksum_address("0xf48f2B2d2a534e402487b3ee7C18c33Aec0Fe5e4")
MASTER_COPY = to_checksum_address("0xd9Db270c1B5E3Bd161E8c8503c55cEABeE709552")
PROXY_FACTORY = to_checksum_address("0xa6B71E26C5e0845f74c812102Ca7114b6a896AB2")
SALT_NONCE = bytes.fromhex("0badc0de")

OWNER = to_checksum_address("0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed")
OTHER_OWNER = to_checksum_address("0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359")


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def template() -> WalletTemplateConfig:
    return WalletTemplateConfig(
        fallback_handler=FALLBACK_HANDLER,
        master_copy=MASTER_COPY,
        proxy_factory=PROXY_FACTORY,
        salt_nonce=SALT_NONCE,
    )


@pytest.fixture
def gateway() -> FakeChainGateway:
    return FakeChainGateway(proxy_factory=PROXY_FACTORY)


@pytest.fixture
def service(template: WalletTemplateConfig, gateway: FakeChainGateway) -> SafeService:
    return SafeService(config=template, gateway=gateway)
