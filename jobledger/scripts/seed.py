"""
Seed script for JobLedger.

Creates the tables if they are missing and populates the database with a
small demo marketplace: clients, contractors, contracts in every status,
and a mix of paid and unpaid jobs.

Usage:
    python -m jobledger.scripts.seed
"""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import func, select

from jobledger.common.enums import ContractStatus, ProfileRole
from jobledger.db.base import Base
from jobledger.db.models import Contract, Job, Profile
from jobledger.db.session import async_session_factory, engine


def _paid_on(year: int, month: int, day: int, hour: int = 12) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


async def main() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as session:
        # ------------------------------------------------------------------
        # Guard: skip if already seeded
        # ------------------------------------------------------------------
        existing = (await session.execute(select(func.count(Profile.id)))).scalar_one()
        if existing:
            print("Database already seeded -- skipping.")
            return

        # ==================================================================
        # PROFILES
        # ==================================================================
        harry = Profile(
            first_name="Harry", last_name="Potter", profession="Wizard",
            balance=Decimal("1150.00"), role=ProfileRole.CLIENT.value,
        )
        robot = Profile(
            first_name="Mr", last_name="Robot", profession="Hacker",
            balance=Decimal("231.11"), role=ProfileRole.CLIENT.value,
        )
        snow = Profile(
            first_name="John", last_name="Snow", profession="Knows nothing",
            balance=Decimal("451.30"), role=ProfileRole.CLIENT.value,
        )
        ash = Profile(
            first_name="Ash", last_name="Kethcum", profession="Pokemon master",
            balance=Decimal("1.30"), role=ProfileRole.CLIENT.value,
        )
        lennon = Profile(
            first_name="John", last_name="Lenon", profession="Musician",
            balance=Decimal("64.00"), role=ProfileRole.CONTRACTOR.value,
        )
        torvalds = Profile(
            first_name="Linus", last_name="Torvalds", profession="Programmer",
            balance=Decimal("1214.00"), role=ProfileRole.CONTRACTOR.value,
        )
        turing = Profile(
            first_name="Alan", last_name="Turing", profession="Programmer",
            balance=Decimal("22.00"), role=ProfileRole.CONTRACTOR.value,
        )
        aragorn = Profile(
            first_name="Aragorn", last_name="II Elessar Telcontarvalds", profession="Fighter",
            balance=Decimal("314.00"), role=ProfileRole.CONTRACTOR.value,
        )

        profiles = [harry, robot, snow, ash, lennon, torvalds, turing, aragorn]
        session.add_all(profiles)
        await session.flush()

        # ==================================================================
        # CONTRACTS
        # ==================================================================
        contracts_data = [
            (harry, lennon, ContractStatus.TERMINATED),
            (harry, torvalds, ContractStatus.IN_PROGRESS),
            (robot, turing, ContractStatus.IN_PROGRESS),
            (robot, torvalds, ContractStatus.IN_PROGRESS),
            (snow, aragorn, ContractStatus.NEW),
            (snow, torvalds, ContractStatus.IN_PROGRESS),
            (ash, turing, ContractStatus.IN_PROGRESS),
            (ash, torvalds, ContractStatus.IN_PROGRESS),
            (ash, aragorn, ContractStatus.IN_PROGRESS),
        ]
        contracts = [
            Contract(
                terms="bla bla bla",
                client_id=client.id,
                contractor_id=contractor.id,
                status=status.value,
            )
            for client, contractor, status in contracts_data
        ]
        session.add_all(contracts)
        await session.flush()

        # ==================================================================
        # JOBS  (index into contracts, description, price, payment date)
        # ==================================================================
        jobs_data = [
            (0, "work", "200.00", None),
            (1, "work", "201.00", None),
            (2, "work", "202.00", None),
            (3, "work", "200.00", None),
            (6, "work", "200.00", None),
            (6, "work", "2020.00", _paid_on(2020, 8, 15, 19)),
            (1, "work", "200.00", _paid_on(2020, 8, 15, 19)),
            (2, "work", "200.00", _paid_on(2020, 8, 16, 19)),
            (2, "work", "200.00", _paid_on(2020, 8, 17, 19)),
            (4, "work", "200.00", _paid_on(2020, 8, 17, 19)),
            (4, "work", "21.00", _paid_on(2020, 8, 10, 19)),
            (1, "work", "21.00", _paid_on(2020, 8, 15, 19)),
            (2, "work", "121.00", _paid_on(2020, 8, 15, 19)),
            (2, "work", "121.00", _paid_on(2020, 8, 14, 23)),
        ]
        session.add_all([
            Job(
                description=description,
                price=Decimal(price),
                paid=paid_at is not None,
                payment_date=paid_at,
                contract_id=contracts[idx].id,
            )
            for idx, description, price, paid_at in jobs_data
        ])

        await session.commit()
        print(f"Seeded {len(profiles)} profiles, {len(contracts)} contracts, {len(jobs_data)} jobs.")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
