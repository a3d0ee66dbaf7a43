from fastapi import Depends
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, distinct
from sqlalchemy.orm import aliased
from config import get_db
from models import User, Producer, Product, Application, Contract, ApplicationStatusEnum
from utils.notifications import (
    EmailClient, get_email_client,
    get_donation_email, get_thank_you_email, get_producer_confirmation_email
)
from utils.response_helpers import application_to_dict
from .schemas import (
    ApplicationCreate, ApplicationUpdate, ApplicationResponse, ContractInformationResponse
)
from typing import Optional, List, Tuple
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

FILTER_ALL = "ALL"

ProducerUser = aliased(User, name="producer_user")


def format_producer_address(producer: Producer) -> str:
    if producer.zipcode is not None:
        return f"{producer.street} {producer.street_number}, {producer.zipcode} {producer.city}"
    return f"{producer.street} {producer.street_number}, {producer.city}"


class ApplicationRepository:
    """Applications of receivers for products and their Open -> Pending -> Completed workflow"""

    def __init__(self, email_client: EmailClient, db: AsyncSession):
        self.email_client = email_client
        self.db = db

    def _base_query(self):
        return (
            select(Application, User, Product)
            .join(User, Application.user_id == User.id)
            .join(Product, Application.product_id == Product.id)
        )

    def _to_responses(self, rows) -> List[ApplicationResponse]:
        return [
            ApplicationResponse(**application_to_dict(application, receiver, product))
            for application, receiver, product in rows
        ]

    async def create(self, dto: Optional[ApplicationCreate]) -> Optional[ApplicationResponse]:
        """Open a new application; None when it cannot be created"""
        if dto is None:
            return None

        receiver = await self.db.get(User, dto.user_id)
        product = await self.db.get(Product, dto.product_id)
        if receiver is None or product is None:
            return None

        application = Application(
            user_id=dto.user_id,
            product_id=dto.product_id,
            motivation=dto.motivation,
            created=datetime.utcnow(),
            status=ApplicationStatusEnum.OPEN.value
        )

        try:
            self.db.add(application)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Application creation failed: {str(e)}")
            return None

        return ApplicationResponse(**application_to_dict(application, receiver, product))

    async def find(self, application_id: int) -> Optional[ApplicationResponse]:
        result = await self.db.execute(self._base_query().where(Application.id == application_id))
        row = result.first()
        if row is None:
            return None
        application, receiver, product = row
        return ApplicationResponse(**application_to_dict(application, receiver, product))

    async def update(self, dto: ApplicationUpdate) -> Tuple[bool, Tuple[bool, Optional[str]]]:
        """
        Move an application to dto.status and notify the people involved.

        Returns (status changed, (email sent, email error)). A failed email
        does not undo the status change.
        """
        application = await self.db.get(Application, dto.application_id)
        if application is None:
            return False, (False, None)

        now = datetime.utcnow()
        application.status = dto.status.value
        application.last_modified = now
        if dto.unit_id is not None:
            application.unit_id = dto.unit_id

        if dto.status == ApplicationStatusEnum.PENDING:
            application.date_of_donation = now
        elif dto.status == ApplicationStatusEnum.OPEN:
            application.date_of_donation = None

        try:
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Status change of application {dto.application_id} failed: {str(e)}")
            return False, (False, None)

        logger.info(f"Application {application.id} is now {application.status}")

        if dto.status == ApplicationStatusEnum.PENDING:
            return True, await self._send_donation_email(application)
        if dto.status == ApplicationStatusEnum.COMPLETED:
            return True, await self._send_completed_emails(application)

        return True, (False, None)

    async def _send_donation_email(self, application: Application) -> Tuple[bool, Optional[str]]:
        receiver = await self.db.get(User, application.user_id)
        product = await self.db.get(Product, application.product_id)
        result = await self.db.execute(select(Producer).where(Producer.user_id == product.user_id))
        producer = result.scalar_one_or_none()

        if producer is None:
            logger.error(f"No producer found for product {product.id}")
            return False, "Producer not found"

        subject, body = get_donation_email(product.title, format_producer_address(producer))
        return await run_in_threadpool(self.email_client.send_email, receiver.email, subject, body)

    async def _send_completed_emails(self, application: Application) -> Tuple[bool, Optional[str]]:
        receiver = await self.db.get(User, application.user_id)
        subject, body = get_thank_you_email()
        email_result = await run_in_threadpool(self.email_client.send_email, receiver.email, subject, body)

        product = await self.db.get(Product, application.product_id)
        producer_user = await self.db.get(User, product.user_id)
        contract = await self.db.get(Contract, application.id)

        if contract is None:
            logger.warning(f"No contract for application {application.id}, producer is not notified")
            return email_result

        subject, body = get_producer_confirmation_email(
            f"{receiver.first_name} {receiver.sur_name}",
            application.id,
            product.title,
            contract.bytes,
            contract.price,
            contract.shared_address or ""
        )
        producer_sent, producer_error = await run_in_threadpool(
            self.email_client.send_email, producer_user.email, subject, body
        )
        if not producer_sent:
            logger.error(f"Producer confirmation for application {application.id} failed: {producer_error}")

        return email_result

    async def read_open(self) -> List[ApplicationResponse]:
        result = await self.db.execute(
            self._base_query()
            .where(Application.status == ApplicationStatusEnum.OPEN.value)
            .order_by(Application.created.desc(), Application.id.desc())
        )
        return self._to_responses(result.all())

    async def read_filtered(self, country: str = FILTER_ALL, city: str = FILTER_ALL) -> List[ApplicationResponse]:
        """Open applications for products of producers in `country` / `city`; "ALL" disables a filter"""
        query = (
            self._base_query()
            .join(ProducerUser, Product.user_id == ProducerUser.id)
            .outerjoin(Producer, Producer.user_id == Product.user_id)
            .where(Application.status == ApplicationStatusEnum.OPEN.value)
        )
        if country != FILTER_ALL:
            query = query.where(ProducerUser.country == country)
        if city != FILTER_ALL:
            query = query.where(Producer.city == city)

        result = await self.db.execute(query.order_by(Application.created.desc(), Application.id.desc()))
        return self._to_responses(result.all())

    async def read_completed(self) -> List[ApplicationResponse]:
        result = await self.db.execute(
            self._base_query()
            .where(Application.status == ApplicationStatusEnum.COMPLETED.value)
            .order_by(Application.date_of_donation.desc(), Application.id.desc())
        )
        return self._to_responses(result.all())

    async def read(self, receiver_id: int) -> List[ApplicationResponse]:
        """All applications of a receiver"""
        result = await self.db.execute(
            self._base_query()
            .where(Application.user_id == receiver_id)
            .order_by(Application.created.desc(), Application.id.desc())
        )
        return self._to_responses(result.all())

    async def get_contract_information(self, application_id: int) -> Optional[ContractInformationResponse]:
        """Producer device, wallet and product price needed to set up the escrow contract"""
        result = await self.db.execute(
            select(Product.price, Product.user_id)
            .join(Application, Application.product_id == Product.id)
            .where(Application.id == application_id)
        )
        row = result.first()
        if row is None:
            return None

        producer_result = await self.db.execute(select(Producer).where(Producer.user_id == row.user_id))
        producer = producer_result.scalar_one_or_none()

        return ContractInformationResponse(
            producer_device=producer.device_address if producer else None,
            producer_wallet=producer.wallet_address if producer else None,
            price=row.price
        )

    async def delete(self, user_id: int, application_id: int) -> bool:
        """Only the receiver who owns an Open application may delete it"""
        application = await self.db.get(Application, application_id)

        if application is None:
            return False
        if application.user_id != user_id:
            return False
        if application.status != ApplicationStatusEnum.OPEN.value:
            return False

        await self.db.delete(application)
        await self.db.commit()

        return True

    async def get_countries(self) -> List[str]:
        """Countries of producers that have open applications"""
        result = await self.db.execute(
            select(distinct(ProducerUser.country))
            .select_from(Application)
            .join(Product, Application.product_id == Product.id)
            .join(ProducerUser, Product.user_id == ProducerUser.id)
            .where(Application.status == ApplicationStatusEnum.OPEN.value)
            .order_by(ProducerUser.country)
        )
        return [country for country in result.scalars().all() if country is not None]

    async def get_cities(self, country: str) -> List[str]:
        """Producer cities with open applications for products located in `country`"""
        result = await self.db.execute(
            select(distinct(Producer.city))
            .select_from(Application)
            .join(Product, Application.product_id == Product.id)
            .join(Producer, Producer.user_id == Product.user_id)
            .where(Application.status == ApplicationStatusEnum.OPEN.value)
            .where(Product.country == country)
            .order_by(Producer.city)
        )
        return [city for city in result.scalars().all() if city is not None]


def get_application_repository(
    db: AsyncSession = Depends(get_db),
    email_client: EmailClient = Depends(get_email_client)
) -> ApplicationRepository:
    return ApplicationRepository(email_client, db)
