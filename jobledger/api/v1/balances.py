from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from jobledger.api.deps import get_current_caller, get_ledger_service
from jobledger.core.access.schemas import Caller
from jobledger.core.ledger.service import LedgerService

router = APIRouter(prefix="/balances", tags=["Balances"])


# ---------- Schemas ----------


class DepositRequest(BaseModel):
    amount: Decimal = Field(max_digits=12, decimal_places=2)


class DepositResponse(BaseModel):
    client_id: int
    amount: Decimal
    balance: Decimal


# ---------- Endpoints ----------


@router.post("/deposit/{user_id}", response_model=DepositResponse)
async def deposit(
    user_id: int,
    body: DepositRequest,
    caller: Caller = Depends(get_current_caller),
    ledger: LedgerService = Depends(get_ledger_service),
):
    receipt = await ledger.deposit(caller, user_id, body.amount)
    return DepositResponse(client_id=receipt.client_id, amount=receipt.amount, balance=receipt.balance)
