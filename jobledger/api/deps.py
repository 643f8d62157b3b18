from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from jobledger.core.access.schemas import Caller
from jobledger.core.access.service import AccessService
from jobledger.core.ledger.service import LedgerService
from jobledger.core.reporting.service import ReportingService
from jobledger.db.session import async_session_factory


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_session_factory


def get_access_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> AccessService:
    return AccessService(session_factory)


def get_ledger_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> LedgerService:
    return LedgerService(session_factory)


def get_reporting_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> ReportingService:
    return ReportingService(session_factory)


async def get_current_caller(
    profile_id: int = Header(..., convert_underscores=False, description="Id of the calling profile"),
    access: AccessService = Depends(get_access_service),
) -> Caller:
    return await access.resolve_caller(profile_id)
