from decimal import Decimal

from pydantic import BaseModel


class ProfessionEarnings(BaseModel):
    profession: str
    total_earned: Decimal


class ClientEarnings(BaseModel):
    id: int
    full_name: str
    paid: Decimal
