from fastapi import APIRouter
from rxledger.api.v1.endpoints import commands, expenses, ledger, settlements

api_router = APIRouter()

api_router.include_router(ledger.router, prefix="/ledger", tags=["ledger"])
api_router.include_router(expenses.router, prefix="/expenses", tags=["expenses"])
api_router.include_router(settlements.router, prefix="/settlements", tags=["settlements"])
api_router.include_router(commands.router, prefix="/commands", tags=["commands"])
