from fastapi import Depends, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from config import get_db, get_security_config, SecurityConfig, PASSWORD_MIN_LENGTH
from models import User, UserRole, Producer, Receiver, Product, Application, UserRoleEnum, ApplicationStatusEnum
from routers.auth.helpers import AuthHelpers, hash_password, verify_password
from routers.auth.schemas import TokenResponse
from routers.users.helpers import ImageWriter, get_image_writer
from .schemas import (
    UserCreate,
    UserUpdate,
    UserPairing,
    UserCreateStatus,
    UserAuthStatus,
    DetailedProducerResponse,
    DetailedReceiverResponse,
)
from typing import Optional, Tuple, Union
from datetime import datetime, timedelta
import logging
import time
import uuid

logger = logging.getLogger(__name__)

ROLES = [role.value for role in UserRoleEnum]

# (prefix, status, days) for the producer donation statistics, None days means all time
DONATION_WINDOWS = [
    ("completed_donations_past_week", ApplicationStatusEnum.COMPLETED, 7),
    ("completed_donations_past_month", ApplicationStatusEnum.COMPLETED, 30),
    ("completed_donations_all_time", ApplicationStatusEnum.COMPLETED, None),
    ("pending_donations_past_week", ApplicationStatusEnum.PENDING, 7),
    ("pending_donations_past_month", ApplicationStatusEnum.PENDING, 30),
    ("pending_donations_all_time", ApplicationStatusEnum.PENDING, None),
]


def generate_pairing_secret() -> str:
    return f"{uuid.uuid4()}_{time.time_ns() // 100}"


class UserRepository:
    """Users together with their Producer or Receiver role entity"""

    IMAGE_FOLDER = "static"

    def __init__(self, config: SecurityConfig, image_writer: ImageWriter, db: AsyncSession):
        self.config = config
        self.image_writer = image_writer
        self.db = db
        self.auth = AuthHelpers(config)

    async def create(self, dto: Optional[UserCreate]) -> Tuple[UserCreateStatus, Optional[TokenResponse]]:
        """
        Create a user with a role and the role entity, then log the user in.
        Checks run in a fixed order and the first failing one is reported.
        """
        if dto is None:
            return UserCreateStatus.NULL_INPUT, None
        if not dto.first_name or not dto.sur_name:
            return UserCreateStatus.MISSING_NAME, None
        if not dto.email:
            return UserCreateStatus.MISSING_EMAIL, None

        existing = await self.db.execute(select(User.id).where(User.email == dto.email))
        if existing.first() is not None:
            return UserCreateStatus.EMAIL_TAKEN, None

        if not dto.password:
            return UserCreateStatus.MISSING_PASSWORD, None
        if len(dto.password) < PASSWORD_MIN_LENGTH:
            return UserCreateStatus.PASSWORD_TOO_SHORT, None
        if not dto.country:
            return UserCreateStatus.MISSING_COUNTRY, None
        if dto.user_role not in ROLES:
            return UserCreateStatus.INVALID_ROLE, None

        try:
            user = User(
                first_name=dto.first_name,
                sur_name=dto.sur_name,
                email=dto.email,
                password=hash_password(dto.password),
                country=dto.country,
                created=datetime.utcnow()
            )
            self.db.add(user)
            await self.db.flush()

            self.db.add(UserRole(user_id=user.id, user_role_enum=dto.user_role))

            if dto.user_role == UserRoleEnum.PRODUCER.value:
                self.db.add(Producer(
                    user_id=user.id,
                    street=dto.street,
                    street_number=dto.street_number,
                    zipcode=dto.zipcode,
                    city=dto.city,
                    pairing_secret=generate_pairing_secret()
                ))
            else:
                self.db.add(Receiver(user_id=user.id))

            await self.db.commit()
            logger.info(f"Created {dto.user_role} user {user.id}")

        except Exception as e:
            await self.db.rollback()
            logger.error(f"User creation failed: {str(e)}")
            return UserCreateStatus.UNKNOWN_FAILURE, None

        auth_status, user_dto, token = await self.authenticate(dto.email, dto.password)
        if auth_status != UserAuthStatus.SUCCESS:
            logger.error(f"Authentication of new user {dto.email} failed: {auth_status.value}")
            return UserCreateStatus.UNKNOWN_FAILURE, None

        return UserCreateStatus.SUCCESS, TokenResponse(token=token, user_dto=user_dto)

    async def find(self, user_id: int) -> Optional[Union[DetailedProducerResponse, DetailedReceiverResponse]]:
        """
        Full profile of a user, shaped by its role. None if the user or its role link is missing.
        """
        user = await self.db.get(User, user_id)
        if user is None:
            return None

        role_result = await self.db.execute(select(UserRole).where(UserRole.user_id == user_id))
        user_role = role_result.scalar_one_or_none()
        if user_role is None:
            return None

        common = {
            "user_id": user.id,
            "first_name": user.first_name,
            "sur_name": user.sur_name,
            "email": user.email,
            "country": user.country,
            "description": user.description,
            "thumbnail": user.thumbnail,
        }

        if user_role.user_role_enum == UserRoleEnum.RECEIVER.value:
            return DetailedReceiverResponse(**common)

        if user_role.user_role_enum == UserRoleEnum.PRODUCER.value:
            producer_result = await self.db.execute(select(Producer).where(Producer.user_id == user_id))
            producer = producer_result.scalar_one_or_none()

            statistics = {}
            for prefix, status, days in DONATION_WINDOWS:
                count, price = await self._get_donation_count_and_price(user_id, status, days)
                statistics[f"{prefix}_no"] = count
                statistics[f"{prefix}_price"] = price

            if producer is None:
                return DetailedProducerResponse(**common, **statistics)

            return DetailedProducerResponse(
                **common,
                **statistics,
                wallet=producer.wallet_address,
                device=producer.device_address,
                pairing_link=self._pairing_link(producer.pairing_secret),
                street=producer.street,
                street_number=producer.street_number,
                zipcode=producer.zipcode,
                city=producer.city,
            )

        return None

    async def _get_donation_count_and_price(
        self,
        user_id: int,
        status: ApplicationStatusEnum,
        days: Optional[int] = None
    ) -> Tuple[int, int]:
        """Number and total price of applications with `status` on the producer's products"""
        query = (
            select(func.count(Application.id), func.coalesce(func.sum(Product.price), 0))
            .join(Product, Application.product_id == Product.id)
            .where(Product.user_id == user_id)
            .where(Application.status == status.value)
        )
        if days is not None:
            since = datetime.utcnow() - timedelta(days=days)
            query = query.where(Application.last_modified >= since)

        count, total = (await self.db.execute(query)).one()
        return count, int(total)

    def _pairing_link(self, pairing_secret: Optional[str]) -> Optional[str]:
        if not pairing_secret:
            return None
        return f"byteball:{self.config.device_address}@{self.config.obyte_hub}#{pairing_secret}"

    async def update(self, dto: UserUpdate) -> bool:
        """
        Update a user after checking its current password
        """
        result = await self.db.execute(
            select(User).where(User.id == dto.user_id).where(User.email == dto.email)
        )
        user = result.scalar_one_or_none()

        if user is None or not verify_password(dto.password, user.password):
            return False

        if dto.new_password and len(dto.new_password) < PASSWORD_MIN_LENGTH:
            return False

        if dto.user_role not in ROLES:
            return False

        producer = None
        if dto.user_role == UserRoleEnum.PRODUCER.value:
            producer_result = await self.db.execute(select(Producer).where(Producer.user_id == user.id))
            producer = producer_result.scalar_one_or_none()

        user.first_name = dto.first_name
        user.sur_name = dto.sur_name
        user.country = dto.country
        user.description = dto.description

        if dto.new_password:
            user.password = hash_password(dto.new_password)

        if producer is not None:
            if dto.wallet:
                producer.wallet_address = dto.wallet
            producer.street = dto.street
            producer.street_number = dto.street_number
            producer.city = dto.city
            if dto.zipcode:
                producer.zipcode = dto.zipcode

        try:
            await self.db.commit()
            return True
        except Exception as e:
            await self.db.rollback()
            logger.error(f"User update failed for {dto.user_id}: {str(e)}")
            return False

    async def update_device_address(self, dto: UserPairing) -> bool:
        """
        Pair a producer with its Obyte device, looked up by pairing secret
        """
        result = await self.db.execute(
            select(Producer).where(Producer.pairing_secret == dto.pairing_secret)
        )
        producer = result.scalar_one_or_none()
        if producer is None:
            return False

        role_result = await self.db.execute(select(UserRole).where(UserRole.user_id == producer.user_id))
        user_role = role_result.scalar_one_or_none()
        if user_role is None or user_role.user_role_enum != UserRoleEnum.PRODUCER.value:
            return False

        producer.device_address = dto.device_address
        producer.wallet_address = dto.wallet_address

        try:
            await self.db.commit()
            return True
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Device pairing failed for producer {producer.id}: {str(e)}")
            return False

    async def update_image(self, user_id: int, image: UploadFile) -> Optional[str]:
        """
        Store a new profile picture and remove the previous one.
        Upload errors are raised to the caller.
        """
        user = await self.db.get(User, user_id)
        if user is None:
            return None

        old_thumbnail = user.thumbnail

        file_name = await self.image_writer.upload_image(self.IMAGE_FOLDER, image)

        user.thumbnail = file_name
        await self.db.commit()

        if old_thumbnail is not None:
            self.image_writer.delete_image(self.IMAGE_FOLDER, old_thumbnail)

        return file_name

    async def authenticate(self, email: Optional[str], password: Optional[str]):
        """
        Returns (status, profile, token)
        """
        if not email:
            return UserAuthStatus.MISSING_EMAIL, None, None
        if not password:
            return UserAuthStatus.MISSING_PASSWORD, None, None

        result = await self.db.execute(select(User.id, User.password).where(User.email == email))
        row = result.first()
        if row is None:
            return UserAuthStatus.NO_USER, None, None

        if not verify_password(password, row.password):
            return UserAuthStatus.WRONG_PASSWORD, None, None

        user_dto = await self.find(row.id)
        if user_dto is None:
            return UserAuthStatus.NO_USER, None, None

        token = self.auth.create_access_token(
            row.id,
            f"{user_dto.first_name} {user_dto.sur_name}",
            user_dto.user_role
        )

        return UserAuthStatus.SUCCESS, user_dto, token

    async def get_count_producers(self) -> int:
        result = await self.db.execute(select(func.count(Producer.id)))
        return result.scalar_one()

    async def get_count_receivers(self) -> int:
        result = await self.db.execute(select(func.count(Receiver.id)))
        return result.scalar_one()


def get_user_repository(
    db: AsyncSession = Depends(get_db),
    image_writer: ImageWriter = Depends(get_image_writer)
) -> UserRepository:
    return UserRepository(get_security_config(), image_writer, db)
