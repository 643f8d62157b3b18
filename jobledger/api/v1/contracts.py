from fastapi import APIRouter, Depends
from pydantic import BaseModel

from jobledger.api.deps import get_access_service, get_current_caller
from jobledger.core.access.schemas import Caller
from jobledger.core.access.service import AccessService
from jobledger.db.models.contract import Contract

router = APIRouter(prefix="/contracts", tags=["Contracts"])


# ---------- Schemas ----------


class ContractResponse(BaseModel):
    id: int
    terms: str
    status: str
    client_id: int
    contractor_id: int
    created_at: str


# ---------- Endpoints ----------


@router.get("/{contract_id}", response_model=ContractResponse)
async def get_contract(
    contract_id: int,
    caller: Caller = Depends(get_current_caller),
    access: AccessService = Depends(get_access_service),
):
    contract = await access.get_contract(caller, contract_id)
    return _contract_to_response(contract)


@router.get("", response_model=list[ContractResponse])
async def list_contracts(
    caller: Caller = Depends(get_current_caller),
    access: AccessService = Depends(get_access_service),
):
    contracts = await access.list_contracts(caller)
    return [_contract_to_response(c) for c in contracts]


def _contract_to_response(contract: Contract) -> ContractResponse:
    return ContractResponse(
        id=contract.id,
        terms=contract.terms,
        status=contract.status,
        client_id=contract.client_id,
        contractor_id=contract.contractor_id,
        created_at=contract.created_at.isoformat(),
    )
