"""Tests for the product repository."""

import io
import pytest
from fastapi import UploadFile

from routers.products.schemas import ProductCreate, ProductUpdate


@pytest.mark.asyncio
async def test_create_product_copies_owner_country(product_repository, make_user):
    """Test the product takes the country of the producer."""
    producer = await make_user(email="p@b.com", role="Producer", country="Kenya")

    product = await product_repository.create(ProductCreate(
        user_id=producer.user_dto.user_id,
        title="Chickens",
        price=42,
        description="Two chickens",
        location="Nairobi",
    ))

    assert product.product_id == 1
    assert product.title == "Chickens"
    assert product.price == 42
    assert product.description == "Two chickens"
    assert product.location == "Nairobi"
    assert product.country == "Kenya"
    assert product.available is True
    assert product.creation_date is not None


@pytest.mark.asyncio
async def test_create_product_without_input(product_repository):
    """Test creating a product from nothing."""
    assert await product_repository.create(None) is None


@pytest.mark.asyncio
async def test_create_product_unknown_owner(product_repository):
    """Test creating a product for a user that does not exist."""
    assert await product_repository.create(ProductCreate(user_id=7, title="Goat", price=10)) is None


@pytest.mark.asyncio
async def test_find_product(product_repository, make_user, make_product):
    """Test finding products by id."""
    producer = await make_user(email="p@b.com", role="Producer")
    product = await make_product(producer.user_dto.user_id)

    assert (await product_repository.find(product.product_id)).title == "Chickens"
    assert await product_repository.find(999) is None


@pytest.mark.asyncio
async def test_read_orders_by_rank_and_skips_unavailable(product_repository, make_user, make_product):
    """Test available products come highest rank first."""
    producer = await make_user(email="p@b.com", role="Producer")
    user_id = producer.user_dto.user_id
    low = await make_product(user_id, title="Low", rank=1)
    high = await make_product(user_id, title="High", rank=5)
    await make_product(user_id, title="Hidden", rank=9, available=False)

    products = await product_repository.read()

    assert [p.product_id for p in products] == [high.product_id, low.product_id]
    assert await product_repository.count() == 2


@pytest.mark.asyncio
async def test_read_paginates(product_repository, make_user, make_product):
    """Test offset and limit on the product list."""
    producer = await make_user(email="p@b.com", role="Producer")
    for rank in range(5):
        await make_product(producer.user_dto.user_id, title=f"Product {rank}", rank=rank)

    page = await product_repository.read(offset=1, limit=2)

    assert [p.title for p in page] == ["Product 3", "Product 2"]


@pytest.mark.asyncio
async def test_read_by_producer_includes_unavailable(product_repository, make_user, make_product):
    """Test a producer sees all of its own products."""
    producer = await make_user(email="p@b.com", role="Producer")
    other = await make_user(email="o@b.com", role="Producer")
    await make_product(producer.user_dto.user_id, title="Visible")
    await make_product(producer.user_dto.user_id, title="Hidden", available=False)
    await make_product(other.user_dto.user_id, title="Someone else's")

    products = await product_repository.read_by_producer(producer.user_dto.user_id)

    assert sorted(p.title for p in products) == ["Hidden", "Visible"]


@pytest.mark.asyncio
async def test_read_by_unknown_producer_is_empty(product_repository):
    """Test listing products of a producer that does not exist."""
    assert await product_repository.read_by_producer(123) == []


@pytest.mark.asyncio
async def test_update_product(product_repository, make_user, make_product):
    """Test only the given fields change besides availability."""
    producer = await make_user(email="p@b.com", role="Producer")
    product = await make_product(producer.user_dto.user_id, description="Old description")

    assert await product_repository.update(ProductUpdate(id=product.product_id, available=False, rank=3))

    updated = await product_repository.find(product.product_id)
    assert updated.available is False
    assert updated.rank == 3
    assert updated.title == "Chickens"
    assert updated.description == "Old description"


@pytest.mark.asyncio
async def test_update_unknown_product(product_repository):
    """Test updating a product that does not exist."""
    assert not await product_repository.update(ProductUpdate(id=5, available=True))


@pytest.mark.asyncio
async def test_update_product_image(product_repository, make_user, make_product, image_writer):
    """Test replacing the product picture."""
    producer = await make_user(email="p@b.com", role="Producer")
    product = await make_product(producer.user_dto.user_id)

    first = await product_repository.update_image(
        product.product_id, UploadFile(file=io.BytesIO(b"a"), filename="a.png")
    )
    second = await product_repository.update_image(
        product.product_id, UploadFile(file=io.BytesIO(b"b"), filename="b.png")
    )

    assert image_writer.deleted == [first]
    assert (await product_repository.find(product.product_id)).thumbnail == second
    assert await product_repository.update_image(999, UploadFile(file=io.BytesIO(b"c"))) is None
