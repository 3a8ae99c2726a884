from __future__ import annotations

import asyncio

import pytest
from hexbytes import HexBytes

from core.domain.entities.safe_entities import SafeReceipt, SafeTxRequest
from core.domain.enums.safe_enums import Operation
from core.services.exceptions import (
    AlreadyExistsError,
    BadAddressError,
    BadParamsError,
    NotDeployedError,
    RpcError,
    TransactionRevertedError,
)
from core.services.safe_service import receipt_identifiers, validate_tx_request
from tests.conftest import OTHER_OWNER, OWNER

pytestmark = pytest.mark.anyio

ZERO = "0x0000000000000000000000000000000000000000"


def make_request(**overrides) -> SafeTxRequest:
    fields = dict(
        to=OTHER_OWNER,
        value="1000",
        data=b"\xa9\x05\x9c\xbb",
        operation=0,
        safe_tx_gas="0",
        base_gas="0",
        gas_price="0",
        gas_token=ZERO,
        refund_receiver=ZERO,
        signatures=b"\x01" * 65,
    )
    fields.update(overrides)
    return SafeTxRequest(**fields)


# ---------------------------------------------------------------------------
# info / deployment status
# ---------------------------------------------------------------------------


async def test_info_rejects_bad_address_before_any_rpc(service, gateway):
    with pytest.raises(BadAddressError) as ei:
        await service.info("not-an-address")
    assert ei.value.message.startswith("Invalid address")
    assert gateway.calls == []


async def test_info_accepts_lowercase_owner(service):
    a = await service.info(OWNER)
    b = await service.info(OWNER.lower())
    assert a.address == b.address


async def test_info_reports_undeployed(service, gateway):
    info = await service.info(OWNER)
    assert info.is_deployed is False
    assert gateway.call_names() == ["proxy_creation_code", "get_code"]
    assert gateway.calls[-1][1] == (info.address,)


async def test_address_is_stable_across_deployment(service):
    before = await service.info(OWNER)
    await service.deploy(OWNER)
    after = await service.info(OWNER)

    assert before.address == after.address
    assert (before.is_deployed, after.is_deployed) == (False, True)


async def test_rpc_failure_surfaces_as_rpc_error(service, gateway):
    gateway.fail_rpc = True
    with pytest.raises(RpcError) as ei:
        await service.info(OWNER)
    assert ei.value.status_code == 503
    assert ei.value.message.startswith("Rpc unavailable")


# ---------------------------------------------------------------------------
# deploy
# ---------------------------------------------------------------------------


async def test_deploy_then_already_exists(service, gateway, template):
    receipt = await service.deploy(OWNER)
    assert receipt.block_hash.startswith("0x") and len(receipt.block_hash) == 66
    assert receipt.transaction_hash.startswith("0x") and len(receipt.transaction_hash) == 66

    with pytest.raises(AlreadyExistsError):
        await service.deploy(OWNER)

    creates = [args for name, args in gateway.calls if name == "create_proxy_with_nonce"]
    assert len(creates) == 1
    master_copy, initializer, salt_nonce = creates[0]
    assert master_copy == template.master_copy
    assert salt_nonce == 0x0BADC0DE
    assert initializer[:4].hex() == "b63e800d"


async def test_deploy_bad_owner(service, gateway):
    with pytest.raises(BadAddressError):
        await service.deploy("0x123")
    assert gateway.calls == []


async def test_deploy_is_per_owner(service):
    await service.deploy(OWNER)
    assert (await service.info(OTHER_OWNER)).is_deployed is False
    await service.deploy(OTHER_OWNER)


async def test_concurrent_first_deploys_race_on_chain(service, gateway):
    results = await asyncio.gather(
        service.deploy(OWNER), service.deploy(OWNER), return_exceptions=True
    )

    assert sum(isinstance(r, SafeReceipt) for r in results) == 1
    losers = [r for r in results if not isinstance(r, SafeReceipt)]
    assert len(losers) == 1
    assert isinstance(losers[0], TransactionRevertedError)
    assert isinstance(losers[0], RpcError)
    assert not isinstance(losers[0], AlreadyExistsError)


async def test_deploy_without_logs_is_an_error(service, gateway):
    gateway.log_count = 0
    with pytest.raises(RpcError):
        await service.deploy(OWNER)


# ---------------------------------------------------------------------------
# exec
# ---------------------------------------------------------------------------


async def test_exec_requires_deployment_whatever_the_request(service, gateway):
    garbage = make_request(
        to="nope", value="-5", data="0xzz", operation=9, gas_token="x", signatures=[999]
    )
    with pytest.raises(NotDeployedError) as ei:
        await service.exec(OWNER, garbage)
    assert ei.value.message == "Safe is not deployed"
    assert "exec_transaction" not in gateway.call_names()


@pytest.mark.parametrize("operation", [0, 1])
async def test_exec_accepts_call_and_delegate_call(service, gateway, operation):
    await service.deploy(OWNER)
    receipt = await service.exec(OWNER, make_request(operation=operation))
    assert receipt.transaction_hash.startswith("0x")

    name, (safe_address, tx) = gateway.calls[-1]
    assert name == "exec_transaction"
    assert safe_address == (await service.info(OWNER)).address
    assert tx.operation == Operation(operation)
    assert tx.value == 1000
    assert tx.signatures == b"\x01" * 65


async def test_exec_rejects_unknown_operation(service, gateway):
    await service.deploy(OWNER)
    with pytest.raises(BadParamsError) as ei:
        await service.exec(OWNER, make_request(operation=2))
    assert "Operation" in ei.value.message
    assert "exec_transaction" not in gateway.call_names()


@pytest.mark.parametrize(
    "field, attr, bad",
    [
        ("value", "value", "abc"),
        ("value", "value", "-1"),
        ("safeTxGas", "safe_tx_gas", "1.5"),
        ("baseGas", "base_gas", ""),
        ("gasPrice", "gas_price", str(2**256)),
    ],
)
async def test_exec_rejects_bad_numbers(service, field, attr, bad):
    await service.deploy(OWNER)
    with pytest.raises(BadParamsError) as ei:
        await service.exec(OWNER, make_request(**{attr: bad}))
    assert field in ei.value.message


@pytest.mark.parametrize(
    "field, attr",
    [("to", "to"), ("gasToken", "gas_token"), ("refundReceiver", "refund_receiver")],
)
async def test_exec_rejects_bad_addresses(service, field, attr):
    await service.deploy(OWNER)
    with pytest.raises(BadAddressError) as ei:
        await service.exec(OWNER, make_request(**{attr: "0xnothex"}))
    assert field in ei.value.message


@pytest.mark.parametrize(
    "attr, bad",
    [("data", "0xzz"), ("data", "0x123"), ("signatures", [1, 256])],
)
async def test_exec_rejects_bad_byte_payloads(service, gateway, attr, bad):
    await service.deploy(OWNER)
    with pytest.raises(BadParamsError) as ei:
        await service.exec(OWNER, make_request(**{attr: bad}))
    assert attr in ei.value.message
    assert "exec_transaction" not in gateway.call_names()


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------


def test_validate_tx_request_normalizes():
    tx = validate_tx_request(make_request(to=OTHER_OWNER.lower(), value=str(2**256 - 1)))
    assert tx.to == OTHER_OWNER
    assert tx.value == 2**256 - 1
    assert tx.to_abi_args()[3] == 0


def test_receipt_identifiers_uses_first_log():
    receipt = {
        "logs": [
            {"blockHash": HexBytes(b"\x01" * 32), "transactionHash": HexBytes(b"\x02" * 32)},
            {"blockHash": HexBytes(b"\x03" * 32), "transactionHash": HexBytes(b"\x04" * 32)},
        ]
    }
    out = receipt_identifiers(receipt)
    assert out.block_hash == "0x" + "01" * 32
    assert out.transaction_hash == "0x" + "02" * 32


def test_receipt_identifiers_without_logs():
    with pytest.raises(RpcError):
        receipt_identifiers({"logs": [], "transactionHash": HexBytes(b"\x05" * 32)})
