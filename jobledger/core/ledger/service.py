"""Balance-moving transactions: job payment and capped deposits.

Each attempt of an operation is one database transaction. Rows are locked
in a fixed order (job, contract, profiles by ascending id) and every
mutated table carries a version column, so a concurrent writer either
blocks on the lock or makes our flush fail with ``StaleDataError``. A
failed attempt is rolled back and re-run from scratch against fresh rows.
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from jobledger.common.enums import ContractStatus, ProfileRole
from jobledger.common.exceptions import (
    BadRequestError,
    ConflictError,
    IntegrityViolationError,
    NotFoundError,
    PermissionDeniedError,
    StoreUnavailableError,
)
from jobledger.common.logging import get_logger
from jobledger.config import settings
from jobledger.core.access.schemas import Caller
from jobledger.core.ledger.schemas import DepositReceipt, PaymentReceipt
from jobledger.db.models.contract import Contract
from jobledger.db.models.job import Job
from jobledger.db.models.profile import Profile

logger = get_logger("ledger.service")

T = TypeVar("T")

CENTS = Decimal("0.01")

# Numeric(12, 2) leaves ten digits before the point
MAX_AMOUNT = Decimal("9999999999.99")


def to_money(value: Any) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_amount(value: Any) -> Decimal:
    """Read a caller-supplied money amount without rounding it.

    Raises BadRequestError for anything that is not a finite number of whole
    cents within the range a balance column can hold.
    """
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise BadRequestError(f"'{value}' is not a valid amount")
    if not amount.is_finite():
        raise BadRequestError("Amount must be a finite number")
    if abs(amount) > MAX_AMOUNT:
        raise BadRequestError(f"Amount must not exceed {MAX_AMOUNT}")
    if amount != amount.quantize(CENTS):
        raise BadRequestError("Amount must be a whole number of cents")
    return amount.quantize(CENTS)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LedgerService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        clock: Callable[[], datetime] | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_backoff: float | None = None,
        deposit_cap_divisor: int | None = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or _utcnow
        self._timeout = settings.LEDGER_OPERATION_TIMEOUT_SECONDS if timeout is None else timeout
        self._max_retries = max(1, settings.LEDGER_MAX_RETRIES if max_retries is None else max_retries)
        self._retry_backoff = (
            settings.LEDGER_RETRY_BACKOFF_SECONDS if retry_backoff is None else retry_backoff
        )
        self._deposit_cap_divisor = (
            settings.DEPOSIT_CAP_DIVISOR if deposit_cap_divisor is None else deposit_cap_divisor
        )

    # ---------- Public operations ----------

    async def pay_job(
        self, caller: Caller, job_id: int, *, timeout: float | None = None
    ) -> PaymentReceipt:
        """Move the job price from client to contractor and settle the job.

        Raises NotFoundError, PermissionDeniedError, ConflictError (job already
        paid), IntegrityViolationError or StoreUnavailableError. Nothing is
        written unless every step succeeds.
        """
        return await self._run(
            f"pay job {job_id}",
            lambda session: self._pay_job(session, caller, job_id),
            timeout,
        )

    async def deposit(
        self,
        caller: Caller,
        target_client_id: int,
        amount: Decimal | int | str,
        *,
        timeout: float | None = None,
    ) -> DepositReceipt:
        """Credit a client balance, capped by a fraction of its outstanding jobs."""
        amount = parse_amount(amount)
        if amount <= 0:
            raise PermissionDeniedError("Deposit amount must be greater than zero")
        if not caller.may_deposit_into(target_client_id):
            raise PermissionDeniedError("You can only deposit into your own balance")

        return await self._run(
            f"deposit into profile {target_client_id}",
            lambda session: self._deposit(session, target_client_id, amount),
            timeout,
        )

    async def outstanding_for(self, client_id: int) -> Decimal:
        async with self._session_factory() as session:
            return await self._outstanding(session, client_id)

    # ---------- Transaction bodies ----------

    async def _pay_job(self, session: AsyncSession, caller: Caller, job_id: int) -> PaymentReceipt:
        job = await self._locked(session, select(Job).where(Job.id == job_id))
        if job is None:
            raise NotFoundError("Job", job_id)

        contract = await self._locked(session, select(Contract).where(Contract.id == job.contract_id))
        if contract is None:
            raise IntegrityViolationError(f"job {job.id} references missing contract {job.contract_id}")
        if contract.client_id != caller.profile_id:
            raise PermissionDeniedError("Only the client on the contract can pay for this job")
        if job.paid:
            raise ConflictError(f"Job '{job.id}' is already paid")
        if contract.status == ContractStatus.TERMINATED.value:
            raise PermissionDeniedError(f"Contract '{contract.id}' is terminated")

        profiles = await self._lock_profiles(session, contract.client_id, contract.contractor_id)
        client = profiles.get(contract.client_id)
        contractor = profiles.get(contract.contractor_id)
        if client is None:
            raise NotFoundError("Client profile", contract.client_id)
        if client.role != ProfileRole.CLIENT.value:
            raise PermissionDeniedError("Only client profiles can pay for jobs")
        if contractor is None:
            raise NotFoundError("Contractor profile", contract.contractor_id)
        if contractor.role != ProfileRole.CONTRACTOR.value:
            raise IntegrityViolationError(
                f"contract {contract.id} names profile {contractor.id} as contractor "
                f"but its role is '{contractor.role}'"
            )

        price = to_money(job.price)
        client_balance = to_money(client.balance)
        if client_balance < price:
            logger.info(
                "Rejected payment of job %s: balance %s below price %s", job.id, client_balance, price
            )
            raise PermissionDeniedError("Insufficient balance to pay for this job")

        paid_at = self._clock()
        client.balance = client_balance - price
        contractor.balance = to_money(contractor.balance) + price
        job.paid = True
        job.payment_date = paid_at
        contract.status = ContractStatus.TERMINATED.value
        await session.flush()

        logger.info(
            "Job %s paid: %s moved from client %s to contractor %s, contract %s terminated",
            job.id,
            price,
            client.id,
            contractor.id,
            contract.id,
        )
        return PaymentReceipt(
            job_id=job.id,
            contract_id=contract.id,
            client_id=client.id,
            contractor_id=contractor.id,
            amount=price,
            paid_at=paid_at,
            client_balance=client.balance,
            contractor_balance=contractor.balance,
        )

    async def _deposit(self, session: AsyncSession, client_id: int, amount: Decimal) -> DepositReceipt:
        client = await self._locked(session, select(Profile).where(Profile.id == client_id))
        if client is None:
            raise NotFoundError("Profile", client_id)
        if client.role != ProfileRole.CLIENT.value:
            raise PermissionDeniedError("Deposits are only accepted into client profiles")

        outstanding = await self._outstanding(session, client.id)
        # amount > outstanding / divisor, kept exact by multiplying instead
        if amount * self._deposit_cap_divisor > outstanding:
            logger.info(
                "Rejected deposit of %s into profile %s: outstanding jobs total %s",
                amount,
                client.id,
                outstanding,
            )
            raise PermissionDeniedError(
                f"Deposit exceeds 1/{self._deposit_cap_divisor} of the outstanding job total"
            )

        client.balance = to_money(client.balance) + amount
        await session.flush()

        logger.info("Deposited %s into profile %s", amount, client.id)
        return DepositReceipt(
            client_id=client.id,
            amount=amount,
            balance=client.balance,
            outstanding=outstanding,
            cap=(outstanding / self._deposit_cap_divisor).quantize(CENTS, rounding=ROUND_DOWN),
        )

    # ---------- Helpers ----------

    async def _run(
        self,
        operation: str,
        work: Callable[[AsyncSession], Awaitable[T]],
        timeout: float | None,
    ) -> T:
        limit = self._timeout if timeout is None else timeout
        try:
            return await asyncio.wait_for(self._with_retries(operation, work), timeout=limit)
        except asyncio.TimeoutError:
            logger.warning("Gave up after %.2fs trying to %s", limit, operation)
            raise StoreUnavailableError(f"Timed out trying to {operation}")

    async def _with_retries(
        self, operation: str, work: Callable[[AsyncSession], Awaitable[T]]
    ) -> T:
        for attempt in range(1, self._max_retries + 1):
            try:
                async with self._session_factory() as session:
                    async with session.begin():
                        return await work(session)
            except (StaleDataError, OperationalError) as exc:
                logger.warning(
                    "Attempt %d/%d to %s hit a concurrent writer: %s",
                    attempt,
                    self._max_retries,
                    operation,
                    exc,
                )
                if attempt < self._max_retries:
                    await asyncio.sleep(self._retry_backoff * attempt)
            except IntegrityError as exc:
                logger.error("Store rejected write while trying to %s: %s", operation, exc)
                raise IntegrityViolationError(f"store constraint violated while trying to {operation}") from exc

        raise StoreUnavailableError(f"Could not get exclusive access to {operation}")

    @staticmethod
    async def _locked(session: AsyncSession, query: Select) -> Any:
        result = await session.execute(
            query.with_for_update().execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def _lock_profiles(session: AsyncSession, *profile_ids: int) -> dict[int, Profile]:
        result = await session.execute(
            select(Profile)
            .where(Profile.id.in_(profile_ids))
            .order_by(Profile.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return {profile.id: profile for profile in result.scalars().all()}

    @staticmethod
    async def _outstanding(session: AsyncSession, client_id: int) -> Decimal:
        result = await session.execute(
            select(func.coalesce(func.sum(Job.price), 0))
            .select_from(Job)
            .join(Contract, Job.contract_id == Contract.id)
            .where(
                Contract.client_id == client_id,
                Contract.status != ContractStatus.TERMINATED.value,
                Job.paid.is_(False),
            )
        )
        return to_money(result.scalar_one())
