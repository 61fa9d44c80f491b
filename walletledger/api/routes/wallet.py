from fastapi import APIRouter, Depends

from walletledger.dependencies.auth import get_current_identity
from walletledger.dependencies.services import get_account_service
from walletledger.schemas.wallet import WalletOut
from walletledger.services import AccountService

router = APIRouter(prefix="/wallet", tags=["wallet"])


@router.get("/balance", response_model=WalletOut)
async def wallet_balance(
    identity: str = Depends(get_current_identity),
    accounts: AccountService = Depends(get_account_service),
):
    return await accounts.balance(identity)
