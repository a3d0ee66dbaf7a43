from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Form, Query, Response
from routers.auth.auth import get_current_user, get_current_user_id
from dependencies.rbac import require_product_write
from routers.products.repository import ProductRepository, get_product_repository
from routers.products.schemas import (
    ProductCreate, ProductUpdate, ProductResponse, ProductListResponse, ProductImageUpload
)
from typing import List
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])


async def _get_owned_product(repository: ProductRepository, product_id: int, current_user: dict) -> ProductResponse:
    product = await repository.find(product_id)
    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )

    if product.user_id != get_current_user_id(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only change your own products"
        )

    return product


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    current_user: dict = Depends(get_current_user),
    _: bool = Depends(require_product_write),
    repository: ProductRepository = Depends(get_product_repository)
):
    """Create a new product (producers only)"""
    if product_data.user_id != get_current_user_id(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Products can only be created for yourself"
        )

    product = await repository.create(product_data)

    if product is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Product could not be created"
        )

    return product


@router.get("", response_model=ProductListResponse)
async def get_products(
    first: int = Query(0, ge=0),
    last: int = Query(0, ge=0),
    repository: ProductRepository = Depends(get_product_repository)
):
    """Available products; `last` of 0 means no limit"""
    products = await repository.read(offset=first, limit=last or None)

    return ProductListResponse(
        count=await repository.count(),
        list=products
    )


@router.get("/producer/{producer_id}", response_model=List[ProductResponse])
async def get_products_by_producer(
    producer_id: int,
    repository: ProductRepository = Depends(get_product_repository)
):
    products = await repository.read_by_producer(producer_id)

    if not products:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No products found for this producer"
        )

    return products


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    repository: ProductRepository = Depends(get_product_repository)
):
    product = await repository.find(product_id)

    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )

    return product


@router.put("/image", response_model=ProductImageUpload)
async def upload_product_image(
    product_id: int = Form(...),
    file: UploadFile = File(...),
    current_user: dict = Depends(get_current_user),
    _: bool = Depends(require_product_write),
    repository: ProductRepository = Depends(get_product_repository)
):
    await _get_owned_product(repository, product_id, current_user)

    try:
        thumbnail = await repository.update_image(product_id, file)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Product image upload failed for product {product_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Upload failed: {str(e)}"
        )

    if thumbnail is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )

    return ProductImageUpload(thumbnail=thumbnail, message="Product image updated")


@router.put("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_product(
    product_id: int,
    product_data: ProductUpdate,
    current_user: dict = Depends(get_current_user),
    _: bool = Depends(require_product_write),
    repository: ProductRepository = Depends(get_product_repository)
):
    if product_data.id != product_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Product id in path and body differ"
        )

    await _get_owned_product(repository, product_id, current_user)

    if not await repository.update(product_data):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )

    return Response(status_code=status.HTTP_204_NO_CONTENT)
