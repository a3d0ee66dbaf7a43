from fastapi import Depends, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from config import get_db
from models import User, Product
from routers.users.helpers import ImageWriter, get_image_writer
from utils.response_helpers import product_to_dict
from .schemas import ProductCreate, ProductUpdate, ProductResponse
from typing import Optional, List
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class ProductRepository:

    IMAGE_FOLDER = "products"

    def __init__(self, db: AsyncSession, image_writer: Optional[ImageWriter] = None):
        self.db = db
        self.image_writer = image_writer

    async def create(self, dto: Optional[ProductCreate]) -> Optional[ProductResponse]:
        """Create a product for an existing producer; None if it cannot be created"""
        if dto is None:
            return None

        owner = await self.db.get(User, dto.user_id)
        if owner is None:
            return None

        product = Product(
            title=dto.title,
            user_id=dto.user_id,
            price=dto.price,
            description=dto.description,
            location=dto.location,
            country=owner.country,
            available=dto.available,
            rank=dto.rank,
            created=datetime.utcnow()
        )

        try:
            self.db.add(product)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Product creation failed: {str(e)}")
            return None

        return ProductResponse(**product_to_dict(product))

    async def find(self, product_id: int) -> Optional[ProductResponse]:
        product = await self.db.get(Product, product_id)
        if product is None:
            return None
        return ProductResponse(**product_to_dict(product))

    async def read(self, offset: int = 0, limit: Optional[int] = None) -> List[ProductResponse]:
        """Available products, highest rank first"""
        query = (
            select(Product)
            .where(Product.available == True)
            .order_by(Product.rank.desc(), Product.created.desc(), Product.id.desc())
            .offset(offset)
        )
        if limit is not None:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return [ProductResponse(**product_to_dict(p)) for p in result.scalars().all()]

    async def count(self) -> int:
        result = await self.db.execute(
            select(func.count(Product.id)).where(Product.available == True)
        )
        return result.scalar_one()

    async def read_by_producer(self, producer_id: int) -> List[ProductResponse]:
        """All products of a producer, available or not"""
        result = await self.db.execute(
            select(Product)
            .where(Product.user_id == producer_id)
            .order_by(Product.rank.desc(), Product.created.desc(), Product.id.desc())
        )
        return [ProductResponse(**product_to_dict(p)) for p in result.scalars().all()]

    async def update(self, dto: ProductUpdate) -> bool:
        product = await self.db.get(Product, dto.id)
        if product is None:
            return False

        product.available = dto.available

        for field in ("title", "price", "description", "location", "rank"):
            value = getattr(dto, field)
            if value is not None:
                setattr(product, field, value)

        try:
            await self.db.commit()
            return True
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Product update failed for {dto.id}: {str(e)}")
            return False

    async def update_image(self, product_id: int, image: UploadFile) -> Optional[str]:
        """Same contract as the user profile picture"""
        product = await self.db.get(Product, product_id)
        if product is None:
            return None

        old_thumbnail = product.thumbnail

        file_name = await self.image_writer.upload_image(self.IMAGE_FOLDER, image)

        product.thumbnail = file_name
        await self.db.commit()

        if old_thumbnail is not None:
            self.image_writer.delete_image(self.IMAGE_FOLDER, old_thumbnail)

        return file_name


def get_product_repository(
    db: AsyncSession = Depends(get_db),
    image_writer: ImageWriter = Depends(get_image_writer)
) -> ProductRepository:
    return ProductRepository(db, image_writer)
