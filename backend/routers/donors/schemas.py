from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional


class DonorCreate(BaseModel):
    aa_account: str = Field(..., min_length=1, max_length=128)
    wallet_address: str = Field(..., min_length=1, max_length=34)


class DonorCreateResponse(BaseModel):
    created: bool
    exists: bool


class DonorBalanceResponse(BaseModel):
    balance_in_bytes: int = 0
    balance_in_usd: Optional[Decimal] = None


class ExchangeRateUpdate(BaseModel):
    gbyte_usd: Decimal = Field(..., ge=0)


class ExchangeRateResponse(BaseModel):
    gbyte_usd: Decimal
