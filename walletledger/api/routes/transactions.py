from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from walletledger.db.session import get_session
from walletledger.dependencies.auth import get_current_identity
from walletledger.dependencies.services import get_transfer_engine
from walletledger.schemas.transaction import TransactionRecord
from walletledger.schemas.wallet import TransferRequest
from walletledger.services import QueryService, TransferEngine

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.post("/transfer", response_model=TransactionRecord)
async def transfer(
    payload: TransferRequest,
    identity: str = Depends(get_current_identity),
    engine: TransferEngine = Depends(get_transfer_engine),
):
    return await engine.transfer(identity, payload.to_phone, payload.amount)


@router.get("/history", response_model=list[TransactionRecord])
async def transaction_history(
    identity: str = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
):
    return await QueryService(session).history(identity)


@router.get("/sent", response_model=list[TransactionRecord])
async def sent_transactions(
    identity: str = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
):
    return await QueryService(session).sent(identity)


@router.get("/received", response_model=list[TransactionRecord])
async def received_transactions(
    identity: str = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
):
    return await QueryService(session).received(identity)


@router.get("/{transaction_id}", response_model=TransactionRecord)
async def transaction_detail(
    transaction_id: int,
    identity: str = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session),
):
    return await QueryService(session).get(identity, transaction_id)
