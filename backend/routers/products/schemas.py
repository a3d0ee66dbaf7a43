from pydantic import BaseModel, Field
from typing import Optional, List


class ProductCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255, pattern=r"\S+")
    user_id: int
    price: int = Field(..., ge=0)
    description: Optional[str] = Field(None, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    available: bool = True
    rank: int = 0


class ProductUpdate(BaseModel):
    id: int
    available: bool
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[int] = Field(None, ge=0)
    description: Optional[str] = Field(None, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    rank: Optional[int] = None


class ProductResponse(BaseModel):
    product_id: int
    title: str
    user_id: int
    price: int
    description: Optional[str] = None
    country: Optional[str] = None
    location: Optional[str] = None
    available: bool
    rank: int = 0
    thumbnail: Optional[str] = None
    creation_date: Optional[str] = None


class ProductListResponse(BaseModel):
    count: int
    list: List[ProductResponse]


class ProductImageUpload(BaseModel):
    thumbnail: str
    message: str
