from fastapi import APIRouter

from walletledger.api.routes import transactions, wallet


def get_api_router() -> APIRouter:
    router = APIRouter()
    router.include_router(wallet.router)
    router.include_router(transactions.router)
    return router
