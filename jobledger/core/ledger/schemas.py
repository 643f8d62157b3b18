from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class PaymentReceipt(BaseModel):
    job_id: int
    contract_id: int
    client_id: int
    contractor_id: int
    amount: Decimal
    paid_at: datetime
    client_balance: Decimal
    contractor_balance: Decimal


class DepositReceipt(BaseModel):
    client_id: int
    amount: Decimal
    balance: Decimal
    outstanding: Decimal
    cap: Decimal
