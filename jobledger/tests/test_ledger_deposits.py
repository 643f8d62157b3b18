from datetime import datetime, timezone
from decimal import Decimal

import pytest

from jobledger.common.enums import ContractStatus
from jobledger.common.exceptions import BadRequestError, NotFoundError, PermissionDeniedError
from jobledger.core.ledger.service import LedgerService
from jobledger.db.models import Profile
from jobledger.tests.factories import caller_for


@pytest.fixture
async def client_with_open_work(factory):
    """Client with 400.00 of unpaid work, so deposits are capped at 100.00."""
    client = await factory.client(balance="50")
    contractor = await factory.contractor()
    contract = await factory.contract(client, contractor)
    await factory.job(contract, "150")
    await factory.job(contract, "250")
    return client


async def _balance(factory, profile):
    return (await factory.reload(Profile, profile.id)).balance


@pytest.mark.asyncio
async def test_deposit_up_to_cap_is_credited(ledger, factory, client_with_open_work):
    receipt = await ledger.deposit(caller_for(client_with_open_work), client_with_open_work.id, "100")

    assert receipt.outstanding == Decimal("400.00")
    assert receipt.cap == Decimal("100.00")
    assert receipt.balance == Decimal("150.00")
    assert await _balance(factory, client_with_open_work) == Decimal("150.00")


@pytest.mark.asyncio
async def test_deposit_over_cap_is_forbidden(ledger, factory, client_with_open_work):
    with pytest.raises(PermissionDeniedError):
        await ledger.deposit(caller_for(client_with_open_work), client_with_open_work.id, "100.01")

    assert await _balance(factory, client_with_open_work) == Decimal("50.00")


@pytest.mark.asyncio
async def test_deposit_without_outstanding_work_is_forbidden(ledger, factory):
    client = await factory.client(balance="10")

    with pytest.raises(PermissionDeniedError):
        await ledger.deposit(caller_for(client), client.id, "0.01")
    assert await _balance(factory, client) == Decimal("10.00")


@pytest.mark.asyncio
async def test_outstanding_ignores_paid_jobs_and_terminated_contracts(ledger, factory):
    client = await factory.client()
    contractor = await factory.contractor()
    open_contract = await factory.contract(client, contractor)
    closed_contract = await factory.contract(client, contractor, status=ContractStatus.TERMINATED)
    other_client = await factory.client()
    other_contract = await factory.contract(other_client, contractor)

    await factory.job(open_contract, "80")
    await factory.job(open_contract, "1000", paid_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
    await factory.job(closed_contract, "1000")
    await factory.job(other_contract, "1000")

    assert await ledger.outstanding_for(client.id) == Decimal("80.00")

    await ledger.deposit(caller_for(client), client.id, "20")
    with pytest.raises(PermissionDeniedError):
        await ledger.deposit(caller_for(client), client.id, "20.01")


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", ["0", "-5"])
async def test_non_positive_deposit_is_forbidden(ledger, factory, client_with_open_work, amount):
    with pytest.raises(PermissionDeniedError):
        await ledger.deposit(caller_for(client_with_open_work), client_with_open_work.id, amount)
    assert await _balance(factory, client_with_open_work) == Decimal("50.00")


@pytest.mark.asyncio
async def test_cannot_deposit_into_another_client(ledger, factory, client_with_open_work):
    other = await factory.client()

    with pytest.raises(PermissionDeniedError):
        await ledger.deposit(caller_for(other), client_with_open_work.id, "10")


@pytest.mark.asyncio
async def test_admin_override_allows_deposit_for_others(ledger, factory, client_with_open_work):
    admin = await factory.client(first_name="Admin")

    receipt = await ledger.deposit(
        caller_for(admin, can_deposit_for_others=True), client_with_open_work.id, "60"
    )
    assert receipt.balance == Decimal("110.00")


@pytest.mark.asyncio
async def test_deposit_into_contractor_is_forbidden(ledger, factory):
    admin = await factory.client(first_name="Admin")
    contractor = await factory.contractor()

    with pytest.raises(PermissionDeniedError):
        await ledger.deposit(caller_for(admin, can_deposit_for_others=True), contractor.id, "10")


@pytest.mark.asyncio
async def test_deposit_into_missing_profile_is_not_found(ledger, factory):
    admin = await factory.client(first_name="Admin")

    with pytest.raises(NotFoundError):
        await ledger.deposit(caller_for(admin, can_deposit_for_others=True), 999999, "10")


@pytest.mark.asyncio
async def test_cap_divisor_is_configurable(session_factory, factory, client_with_open_work):
    ledger = LedgerService(session_factory, deposit_cap_divisor=2)

    receipt = await ledger.deposit(caller_for(client_with_open_work), client_with_open_work.id, "200")
    assert receipt.cap == Decimal("200.00")


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", ["0.005", "100.004", "1e30", "NaN", "Infinity", "lots"])
async def test_unusable_amount_is_rejected_without_rounding(
    ledger, factory, client_with_open_work, amount
):
    with pytest.raises(BadRequestError):
        await ledger.deposit(caller_for(client_with_open_work), client_with_open_work.id, amount)
    assert await _balance(factory, client_with_open_work) == Decimal("50.00")


@pytest.mark.asyncio
async def test_trailing_zeros_are_whole_cents(ledger, factory, client_with_open_work):
    receipt = await ledger.deposit(
        caller_for(client_with_open_work), client_with_open_work.id, Decimal("99.9900")
    )
    assert receipt.amount == Decimal("99.99")
    assert await _balance(factory, client_with_open_work) == Decimal("149.99")
