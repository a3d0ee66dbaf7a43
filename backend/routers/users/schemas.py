from pydantic import BaseModel, Field
from typing import Optional, Literal, Union, Annotated
from enum import Enum


class UserCreateStatus(str, Enum):
    NULL_INPUT = "NULL_INPUT"
    MISSING_NAME = "MISSING_NAME"
    MISSING_EMAIL = "MISSING_EMAIL"
    EMAIL_TAKEN = "EMAIL_TAKEN"
    MISSING_PASSWORD = "MISSING_PASSWORD"
    PASSWORD_TOO_SHORT = "PASSWORD_TOO_SHORT"
    MISSING_COUNTRY = "MISSING_COUNTRY"
    INVALID_ROLE = "INVALID_ROLE"
    UNKNOWN_FAILURE = "UNKNOWN_FAILURE"
    SUCCESS = "SUCCESS"


class UserAuthStatus(str, Enum):
    MISSING_EMAIL = "MISSING_EMAIL"
    MISSING_PASSWORD = "MISSING_PASSWORD"
    NO_USER = "NO_USER"
    WRONG_PASSWORD = "WRONG_PASSWORD"
    SUCCESS = "SUCCESS"


# Request schemas
class UserCreate(BaseModel):
    """Fields are optional here so the repository can report which one is missing"""
    first_name: Optional[str] = Field(None, max_length=255)
    sur_name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=191)
    password: Optional[str] = Field(None, max_length=255)
    country: Optional[str] = Field(None, max_length=255)
    user_role: Optional[str] = None
    street: Optional[str] = None
    street_number: Optional[str] = None
    zipcode: Optional[str] = None
    city: Optional[str] = None


class UserUpdate(BaseModel):
    user_id: int
    email: str
    password: str
    new_password: Optional[str] = None
    first_name: str = Field(..., max_length=255)
    sur_name: str = Field(..., max_length=255)
    country: str = Field(..., max_length=255)
    description: Optional[str] = None
    user_role: str
    wallet: Optional[str] = None
    street: Optional[str] = None
    street_number: Optional[str] = None
    zipcode: Optional[str] = None
    city: Optional[str] = None


class UserPairing(BaseModel):
    pairing_secret: str
    device_address: str
    wallet_address: str


# Response schemas
class DetailedReceiverResponse(BaseModel):
    user_role: Literal["Receiver"] = "Receiver"
    user_id: int
    first_name: str
    sur_name: str
    email: str
    country: str
    description: Optional[str] = None
    thumbnail: Optional[str] = None


class DetailedProducerResponse(BaseModel):
    user_role: Literal["Producer"] = "Producer"
    user_id: int
    first_name: str
    sur_name: str
    email: str
    country: str
    description: Optional[str] = None
    thumbnail: Optional[str] = None

    wallet: Optional[str] = None
    device: Optional[str] = None
    pairing_link: Optional[str] = None
    street: Optional[str] = None
    street_number: Optional[str] = None
    zipcode: Optional[str] = None
    city: Optional[str] = None

    completed_donations_past_week_no: int = 0
    completed_donations_past_week_price: int = 0
    completed_donations_past_month_no: int = 0
    completed_donations_past_month_price: int = 0
    completed_donations_all_time_no: int = 0
    completed_donations_all_time_price: int = 0
    pending_donations_past_week_no: int = 0
    pending_donations_past_week_price: int = 0
    pending_donations_past_month_no: int = 0
    pending_donations_past_month_price: int = 0
    pending_donations_all_time_no: int = 0
    pending_donations_all_time_price: int = 0


DetailedUserResponse = Annotated[
    Union[DetailedProducerResponse, DetailedReceiverResponse],
    Field(discriminator="user_role")
]


class ProfileImageUpload(BaseModel):
    """Response schema for profile image upload"""
    thumbnail: str
    message: str


class CountResponse(BaseModel):
    count: int
