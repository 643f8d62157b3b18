from collections.abc import Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from jobledger.common.enums import ContractStatus, ProfileRole
from jobledger.common.exceptions import AuthenticationError, NotFoundError
from jobledger.common.logging import get_logger
from jobledger.config import settings
from jobledger.core.access.schemas import Caller
from jobledger.db.models.contract import Contract
from jobledger.db.models.job import Job
from jobledger.db.models.profile import Profile

logger = get_logger("access.service")


def _is_party(caller: Caller):
    return or_(Contract.client_id == caller.profile_id, Contract.contractor_id == caller.profile_id)


class AccessService:
    """Resolves callers and scopes contract/job reads to the parties of each contract."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        admin_profile_ids: Sequence[int] | None = None,
    ):
        self._session_factory = session_factory
        self._admin_profile_ids = frozenset(
            settings.ADMIN_PROFILE_IDS if admin_profile_ids is None else admin_profile_ids
        )

    async def resolve_caller(self, profile_id: int) -> Caller:
        async with self._session_factory() as session:
            profile = await session.get(Profile, profile_id)
        if profile is None:
            logger.info("Rejected unknown caller profile %s", profile_id)
            raise AuthenticationError()

        return Caller(
            profile_id=profile.id,
            role=ProfileRole(profile.role),
            full_name=profile.full_name,
            can_deposit_for_others=profile.id in self._admin_profile_ids,
        )

    async def get_contract(self, caller: Caller, contract_id: int) -> Contract:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Contract).where(Contract.id == contract_id, _is_party(caller))
            )
            contract = result.scalar_one_or_none()
        if contract is None:
            raise NotFoundError("Contract", contract_id)
        return contract

    async def list_contracts(self, caller: Caller) -> list[Contract]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Contract)
                .where(_is_party(caller), Contract.status != ContractStatus.TERMINATED.value)
                .order_by(Contract.id)
            )
            return list(result.scalars().all())

    async def list_unpaid_jobs(self, caller: Caller) -> list[Job]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Job)
                .join(Contract, Job.contract_id == Contract.id)
                .where(
                    Job.paid.is_(False),
                    _is_party(caller),
                    Contract.status != ContractStatus.TERMINATED.value,
                )
                .order_by(Job.id)
            )
            return list(result.scalars().all())
