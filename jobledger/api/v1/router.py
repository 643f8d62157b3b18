from fastapi import APIRouter

from jobledger.api.v1.admin import router as admin_router
from jobledger.api.v1.balances import router as balances_router
from jobledger.api.v1.contracts import router as contracts_router
from jobledger.api.v1.jobs import router as jobs_router

v1_router = APIRouter()

v1_router.include_router(contracts_router)
v1_router.include_router(jobs_router)
v1_router.include_router(balances_router)
v1_router.include_router(admin_router)
