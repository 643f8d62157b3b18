"""Earnings rankings over settled jobs.

Only paid jobs whose payment date falls inside the requested window are
counted. Equal totals are ordered by profession name, or by client id,
so repeated calls return the same ranking.
"""

from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from jobledger.common.exceptions import BadRequestError
from jobledger.common.logging import get_logger
from jobledger.config import settings
from jobledger.core.ledger.service import to_money
from jobledger.core.reporting.schemas import ClientEarnings, ProfessionEarnings
from jobledger.db.models.contract import Contract
from jobledger.db.models.job import Job
from jobledger.db.models.profile import Profile

logger = get_logger("reporting.service")


def payment_window(start: date | datetime, end: date | datetime) -> tuple[datetime, datetime]:
    """Turn inclusive ``start``/``end`` bounds into a half-open ``[lower, upper)`` range.

    A plain date as ``end`` covers that whole day. Naive datetimes are taken as UTC.
    """
    lower = _as_datetime(start)
    if isinstance(end, datetime):
        upper = _as_datetime(end) + timedelta(microseconds=1)
    else:
        upper = _as_datetime(end + timedelta(days=1))

    if upper <= lower:
        raise BadRequestError("end must not be earlier than start")
    return lower, upper


def _as_datetime(value: date | datetime) -> datetime:
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ReportingService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def best_profession(
        self, start: date | datetime, end: date | datetime
    ) -> ProfessionEarnings | None:
        lower, upper = payment_window(start, end)
        total_earned = func.sum(Job.price).label("total_earned")

        query = (
            select(Profile.profession, total_earned)
            .select_from(Job)
            .join(Contract, Job.contract_id == Contract.id)
            .join(Profile, Contract.contractor_id == Profile.id)
            .where(Job.paid.is_(True), Job.payment_date >= lower, Job.payment_date < upper)
            .group_by(Profile.profession)
            .order_by(total_earned.desc(), Profile.profession.asc())
            .limit(1)
        )
        async with self._session_factory() as session:
            row = (await session.execute(query)).first()

        if row is None:
            logger.info("No paid jobs between %s and %s", lower, upper)
            return None
        return ProfessionEarnings(profession=row.profession, total_earned=to_money(row.total_earned))

    async def best_clients(
        self,
        start: date | datetime,
        end: date | datetime,
        limit: int | None = None,
    ) -> list[ClientEarnings]:
        limit = settings.BEST_CLIENTS_DEFAULT_LIMIT if limit is None else limit
        if limit < 1:
            raise BadRequestError("limit must be at least 1")
        lower, upper = payment_window(start, end)
        total_paid = func.sum(Job.price).label("total_paid")

        query = (
            select(Profile.id, Profile.first_name, Profile.last_name, total_paid)
            .select_from(Job)
            .join(Contract, Job.contract_id == Contract.id)
            .join(Profile, Contract.client_id == Profile.id)
            .where(Job.paid.is_(True), Job.payment_date >= lower, Job.payment_date < upper)
            .group_by(Profile.id, Profile.first_name, Profile.last_name)
            .order_by(total_paid.desc(), Profile.id.asc())
            .limit(limit)
        )
        async with self._session_factory() as session:
            rows = (await session.execute(query)).all()

        return [
            ClientEarnings(
                id=row.id,
                full_name=f"{row.first_name} {row.last_name}",
                paid=to_money(row.total_paid),
            )
            for row in rows
        ]
