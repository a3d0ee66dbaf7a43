from sqlalchemy import (
    Boolean,
    String,
    Text,
    DateTime,
    Numeric,
    PrimaryKeyConstraint,
    ForeignKey,
    Integer
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.ext.declarative import declarative_base
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from enum import Enum

Base = declarative_base()


class UserRoleEnum(str, Enum):
    PRODUCER = "Producer"
    RECEIVER = "Receiver"


class ApplicationStatusEnum(str, Enum):
    OPEN = "Open"
    PENDING = "Pending"
    COMPLETED = "Completed"


class User(Base):
    """
    Identity record shared by producers and receivers.
    Exactly one of `producer` / `receiver` exists, matching `user_role`.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    sur_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(191), unique=True, index=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    country: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    thumbnail: Mapped[Optional[str]] = mapped_column(String(500))

    created: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    user_role: Mapped[Optional["UserRole"]] = relationship(
        "UserRole",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True
    )
    producer: Mapped[Optional["Producer"]] = relationship(
        "Producer",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True
    )
    receiver: Mapped[Optional["Receiver"]] = relationship(
        "Receiver",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True
    )
    products: Mapped[List["Product"]] = relationship(
        "Product",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True
    )
    applications: Mapped[List["Application"]] = relationship(
        "Application",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True
    )


class UserRole(Base):
    __tablename__ = "user_roles"
    __table_args__ = (
        PrimaryKeyConstraint("user_id", "user_role_enum", name="user_roles_pkey"),
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )
    user_role_enum: Mapped[str] = mapped_column(String(50), nullable=False)  # "Producer", "Receiver"

    user: Mapped["User"] = relationship("User", back_populates="user_role")


class Producer(Base):
    """
    Role extension for shops. The pairing secret links the account
    with an Obyte wallet device through the chatbot.
    """
    __tablename__ = "producers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )

    street: Mapped[Optional[str]] = mapped_column(String(255))
    street_number: Mapped[Optional[str]] = mapped_column(String(255))
    zipcode: Mapped[Optional[str]] = mapped_column(String(255))
    city: Mapped[Optional[str]] = mapped_column(String(255))

    pairing_secret: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    device_address: Mapped[Optional[str]] = mapped_column(String(255))
    wallet_address: Mapped[Optional[str]] = mapped_column(String(255))

    user: Mapped["User"] = relationship("User", back_populates="producer")


class Receiver(Base):
    __tablename__ = "receivers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )

    user: Mapped["User"] = relationship("User", back_populates="receiver")


class Product(Base):
    """
    Products offered by producers
    """
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)  # smallest currency unit
    description: Mapped[Optional[str]] = mapped_column(Text)
    location: Mapped[Optional[str]] = mapped_column(String(255))
    country: Mapped[Optional[str]] = mapped_column(String(255))
    available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    rank: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    thumbnail: Mapped[Optional[str]] = mapped_column(String(500))

    created: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="products")
    applications: Mapped[List["Application"]] = relationship(
        "Application",
        back_populates="product",
        cascade="all, delete-orphan",
        passive_deletes=True
    )


class Application(Base):
    """
    A receiver's request for a product: Open -> Pending -> Completed
    """
    __tablename__ = "applications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )
    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )

    motivation: Mapped[Optional[str]] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(50), default=ApplicationStatusEnum.OPEN.value, nullable=False)

    created: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    last_modified: Mapped[Optional[datetime]] = mapped_column(DateTime)
    date_of_donation: Mapped[Optional[datetime]] = mapped_column(DateTime)

    # Donation currency unit, e.g. an Obyte asset id
    unit_id: Mapped[Optional[str]] = mapped_column(String(255))

    user: Mapped["User"] = relationship("User", back_populates="applications")
    product: Mapped["Product"] = relationship("Product", back_populates="applications")
    contract: Mapped[Optional["Contract"]] = relationship(
        "Contract",
        back_populates="application",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True
    )


class Contract(Base):
    """
    Escrow record created by the chatbot once a donation is made
    """
    __tablename__ = "contracts"

    application_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("applications.id", ondelete="CASCADE"),
        primary_key=True
    )
    creation_time: Mapped[Optional[datetime]] = mapped_column(DateTime)
    confirm_key: Mapped[Optional[str]] = mapped_column(String(255))
    shared_address: Mapped[Optional[str]] = mapped_column(String(255))
    donor_device: Mapped[Optional[str]] = mapped_column(String(255))
    donor_wallet: Mapped[Optional[str]] = mapped_column(String(255))
    producer_device: Mapped[Optional[str]] = mapped_column(String(255))
    producer_wallet: Mapped[Optional[str]] = mapped_column(String(255))
    price: Mapped[Optional[int]] = mapped_column(Integer)
    bytes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    completed: Mapped[Optional[int]] = mapped_column(Integer)

    application: Mapped["Application"] = relationship("Application", back_populates="contract")


class Donor(Base):
    __tablename__ = "donors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    aa_account: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    wallet_address: Mapped[str] = mapped_column(String(34), nullable=False)
    device_address: Mapped[Optional[str]] = mapped_column(String(34))
    email: Mapped[Optional[str]] = mapped_column(String(256))


class ByteExchangeRate(Base):
    """
    Single row holding the current GBYTE -> USD rate
    """
    __tablename__ = "byte_exchange_rate"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    gbyte_usd: Mapped[Decimal] = mapped_column(Numeric(18, 8), nullable=False)
