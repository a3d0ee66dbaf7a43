from fastapi import APIRouter, Depends, HTTPException, status, Response
from dependencies.rbac import require_internal_secret
from .repository import DonorRepository, get_donor_repository
from .schemas import (
    DonorCreate, DonorCreateResponse, DonorBalanceResponse, ExchangeRateUpdate, ExchangeRateResponse
)
import requests
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/donors", tags=["Donors"])


@router.post("", response_model=DonorCreateResponse)
async def create_donor(
    donor_data: DonorCreate,
    response: Response,
    _: bool = Depends(require_internal_secret),
    repository: DonorRepository = Depends(get_donor_repository)
):
    """Register the AA account of a donor after its first deposit"""
    created, exists = await repository.create_account_if_not_exists(donor_data)

    if not created and not exists:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Donor could not be created"
        )

    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return DonorCreateResponse(created=created, exists=exists)


@router.get("/balance/{aa_account}", response_model=DonorBalanceResponse)
async def get_donor_balance(
    aa_account: str,
    repository: DonorRepository = Depends(get_donor_repository)
):
    try:
        ok, status_code, balance = await repository.get_donor_balance(aa_account)
    except requests.RequestException as e:
        logger.error(f"Chatbot unreachable for donor {aa_account}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Balance service is unavailable"
        )

    if not ok:
        raise HTTPException(
            status_code=status_code,
            detail="Could not get the donor balance"
        )

    return balance


@router.put("/exchangerate", response_model=ExchangeRateResponse)
async def update_exchange_rate(
    rate_data: ExchangeRateUpdate,
    _: bool = Depends(require_internal_secret),
    repository: DonorRepository = Depends(get_donor_repository)
):
    if not await repository.update_exchange_rate(rate_data.gbyte_usd):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update exchange rate"
        )

    return ExchangeRateResponse(gbyte_usd=rate_data.gbyte_usd)


@router.delete("/{aa_account}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_donor(
    aa_account: str,
    _: bool = Depends(require_internal_secret),
    repository: DonorRepository = Depends(get_donor_repository)
):
    if not await repository.delete(aa_account):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Donor not found"
        )

    return Response(status_code=status.HTTP_204_NO_CONTENT)
