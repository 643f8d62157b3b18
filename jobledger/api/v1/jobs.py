from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from jobledger.api.deps import get_access_service, get_current_caller, get_ledger_service
from jobledger.core.access.schemas import Caller
from jobledger.core.access.service import AccessService
from jobledger.core.ledger.service import LedgerService
from jobledger.db.models.job import Job

router = APIRouter(prefix="/jobs", tags=["Jobs"])


# ---------- Schemas ----------


class JobResponse(BaseModel):
    id: int
    description: str
    price: Decimal
    paid: bool
    payment_date: str | None
    contract_id: int


class PaymentResponse(BaseModel):
    job_id: int
    contract_id: int
    amount: Decimal
    paid_at: datetime
    client_balance: Decimal


# ---------- Endpoints ----------


@router.get("/unpaid", response_model=list[JobResponse])
async def list_unpaid_jobs(
    caller: Caller = Depends(get_current_caller),
    access: AccessService = Depends(get_access_service),
):
    jobs = await access.list_unpaid_jobs(caller)
    return [_job_to_response(j) for j in jobs]


@router.post("/{job_id}/pay", response_model=PaymentResponse)
async def pay_job(
    job_id: int,
    caller: Caller = Depends(get_current_caller),
    ledger: LedgerService = Depends(get_ledger_service),
):
    receipt = await ledger.pay_job(caller, job_id)
    return PaymentResponse(
        job_id=receipt.job_id,
        contract_id=receipt.contract_id,
        amount=receipt.amount,
        paid_at=receipt.paid_at,
        client_balance=receipt.client_balance,
    )


def _job_to_response(job: Job) -> JobResponse:
    return JobResponse(
        id=job.id,
        description=job.description,
        price=job.price,
        paid=job.paid,
        payment_date=job.payment_date.isoformat() if job.payment_date else None,
        contract_id=job.contract_id,
    )
