from pydantic import BaseModel, Field
from typing import Optional, List
from models import ApplicationStatusEnum


class ApplicationCreate(BaseModel):
    user_id: int
    product_id: int
    motivation: Optional[str] = Field(None, max_length=255)


class ApplicationUpdate(BaseModel):
    application_id: int
    status: ApplicationStatusEnum
    unit_id: Optional[str] = None


class ApplicationResponse(BaseModel):
    application_id: int
    receiver_id: int
    receiver_name: str
    country: Optional[str] = None
    thumbnail: Optional[str] = None
    product_id: int
    product_title: str
    product_price: int
    producer_id: int
    motivation: Optional[str] = None
    status: ApplicationStatusEnum
    unit_id: Optional[str] = None
    creation_date: Optional[str] = None
    date_of_donation: Optional[str] = None


class ApplicationListResponse(BaseModel):
    count: int
    list: List[ApplicationResponse]


class ApplicationUpdateResponse(BaseModel):
    status_changed: bool
    email_sent: bool
    email_error: Optional[str] = None


class ContractInformationResponse(BaseModel):
    producer_device: Optional[str] = None
    producer_wallet: Optional[str] = None
    price: int
