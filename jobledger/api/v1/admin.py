from datetime import date, datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from jobledger.api.deps import get_current_caller, get_reporting_service
from jobledger.config import settings
from jobledger.core.access.schemas import Caller
from jobledger.core.reporting.schemas import ClientEarnings
from jobledger.core.reporting.service import ReportingService

router = APIRouter(prefix="/admin", tags=["Admin"])


# ---------- Schemas ----------


class BestProfessionResponse(BaseModel):
    profession: str | None
    total_earned: Decimal | None = None


# ---------- Endpoints ----------


@router.get("/best-profession", response_model=BestProfessionResponse)
async def best_profession(
    start: date | datetime = Query(..., description="First payment day or instant included"),
    end: date | datetime = Query(..., description="Last payment day or instant included"),
    caller: Caller = Depends(get_current_caller),
    reporting: ReportingService = Depends(get_reporting_service),
):
    best = await reporting.best_profession(start, end)
    if best is None:
        return BestProfessionResponse(profession=None)
    return BestProfessionResponse(profession=best.profession, total_earned=best.total_earned)


@router.get("/best-clients", response_model=list[ClientEarnings])
async def best_clients(
    start: date | datetime = Query(..., description="First payment day or instant included"),
    end: date | datetime = Query(..., description="Last payment day or instant included"),
    limit: int = Query(
        settings.BEST_CLIENTS_DEFAULT_LIMIT, ge=1, le=settings.BEST_CLIENTS_MAX_LIMIT
    ),
    caller: Caller = Depends(get_current_caller),
    reporting: ReportingService = Depends(get_reporting_service),
):
    return await reporting.best_clients(start, end, limit)
