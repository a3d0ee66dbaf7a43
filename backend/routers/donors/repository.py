from fastapi import Depends
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from config import get_db
from models import Donor, ByteExchangeRate
from utils.chatbot import ChatbotClient, get_chatbot_client
from .schemas import DonorCreate, DonorBalanceResponse
from typing import Optional, Tuple
from decimal import Decimal, ROUND_HALF_UP
import logging

logger = logging.getLogger(__name__)

BYTES_PER_GBYTE = Decimal(10) ** 9


def bytes_to_usd(amount_bytes: int, gbyte_usd: Decimal) -> Decimal:
    """Convert bytes to USD with the GBYTE rate, rounded to cents"""
    usd = Decimal(amount_bytes) / BYTES_PER_GBYTE * Decimal(gbyte_usd)
    return usd.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class DonorRepository:
    """Donor accounts backed by Obyte Autonomous Agents"""

    def __init__(self, chatbot: ChatbotClient, db: AsyncSession):
        self.chatbot = chatbot
        self.db = db

    async def check_account_exists(self, dto: DonorCreate) -> bool:
        result = await self.db.execute(
            select(func.count(Donor.id)).where(Donor.aa_account == dto.aa_account)
        )
        return result.scalar_one() > 0

    async def create_account_if_not_exists(self, dto: DonorCreate) -> Tuple[bool, bool]:
        """Returns (created, exists)"""
        exists = await self.check_account_exists(dto)
        if exists:
            return False, True

        try:
            self.db.add(Donor(aa_account=dto.aa_account, wallet_address=dto.wallet_address))
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Donor creation failed for {dto.aa_account}: {str(e)}")
            return False, False

        logger.info(f"Created donor account {dto.aa_account}")
        return True, False

    async def get_donor_balance(self, aa_account: str) -> Tuple[bool, int, DonorBalanceResponse]:
        """
        Ask the chatbot for the AA balance of a donor.

        Returns (success, HTTP status of the chatbot, balance). The balance is
        only filled in on success.
        """
        response = await run_in_threadpool(self.chatbot.get_donor_balance, aa_account)

        balance = DonorBalanceResponse()

        if response.ok:
            balance.balance_in_bytes = int(response.json())
            rate = await self.get_exchange_rate()
            if rate is not None:
                balance.balance_in_usd = bytes_to_usd(balance.balance_in_bytes, rate)
            else:
                logger.warning("No GBYTE exchange rate stored, balance in USD is unknown")
        else:
            logger.warning(f"Chatbot returned {response.status_code} for donor {aa_account}")

        return response.ok, response.status_code, balance

    async def delete(self, aa_account: str) -> bool:
        result = await self.db.execute(select(Donor).where(Donor.aa_account == aa_account))
        donor = result.scalars().first()

        if donor is None:
            return False

        await self.db.delete(donor)
        await self.db.commit()

        return True

    async def get_exchange_rate(self) -> Optional[Decimal]:
        result = await self.db.execute(select(ByteExchangeRate).order_by(ByteExchangeRate.id).limit(1))
        rate = result.scalar_one_or_none()
        return rate.gbyte_usd if rate is not None else None

    async def update_exchange_rate(self, gbyte_usd: Decimal) -> bool:
        """Overwrite the single stored rate, creating it on first use"""
        result = await self.db.execute(select(ByteExchangeRate).order_by(ByteExchangeRate.id).limit(1))
        rate = result.scalar_one_or_none()

        if rate is None:
            self.db.add(ByteExchangeRate(gbyte_usd=gbyte_usd))
        else:
            rate.gbyte_usd = gbyte_usd

        try:
            await self.db.commit()
            return True
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Exchange rate update failed: {str(e)}")
            return False


def get_donor_repository(
    db: AsyncSession = Depends(get_db),
    chatbot: ChatbotClient = Depends(get_chatbot_client)
) -> DonorRepository:
    return DonorRepository(chatbot, db)
