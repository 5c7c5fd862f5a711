"""SQLAlchemy ORM models."""
import uuid

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from smm_broker.infrastructure.database.base import Base

MONEY = Numeric(18, 4, asdecimal=True)


def generate_uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Service(Base):
    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    provider_service_id = Column(Integer, unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)
    type = Column(String(100), nullable=False)
    category = Column(String(255), nullable=False, index=True)
    # Provider values are strings; rate already carries the platform markup.
    rate = Column(String(32), nullable=False)
    min = Column(String(32), nullable=False)
    max = Column(String(32), nullable=False)
    refill = Column(Boolean, default=False)
    cancel = Column(Boolean, default=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    last_synced_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        Index("ix_orders_user_status", "user_id", "status"),
        Index("ix_orders_user_created", "user_id", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    order_id = Column(BigInteger, unique=True, nullable=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    service_id = Column(String(36), ForeignKey("services.id"), nullable=False, index=True)
    link = Column(Text, nullable=False)
    quantity = Column(Integer, nullable=False)
    charge = Column(MONEY, nullable=False)
    start_count = Column(Integer, nullable=False, default=0)
    remains = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="Pending", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User")
    service = relationship("Service")


class OrderPlacement(Base):
    __tablename__ = "order_placements"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    service_id = Column(String(36), ForeignKey("services.id"), nullable=False)
    provider_service_id = Column(Integer, nullable=False)
    link = Column(Text, nullable=False)
    quantity = Column(Integer, nullable=False)
    charge = Column(MONEY, nullable=False)
    status = Column(String(20), nullable=False, default="submitting", index=True)  # submitting, failed, recorded, unrecorded
    external_order_id = Column(BigInteger)
    error_message = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Wallet(Base):
    __tablename__ = "wallets"

    user_id = Column(String(36), ForeignKey("users.id"), primary_key=True)
    balance = Column(MONEY, nullable=False, default=0)
    total_spent = Column(MONEY, nullable=False, default=0)
    account_level = Column(Integer, nullable=False, default=1)
    version = Column(Integer, nullable=False, default=0)
    currency = Column(String(10), nullable=False, default="NGN")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User")


class FundsTransaction(Base):
    __tablename__ = "funds_transactions"
    __table_args__ = (Index("ix_funds_transactions_user_created", "user_id", "created_at"),)

    transaction_id = Column(BigInteger, primary_key=True, autoincrement=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(10), nullable=False, index=True)  # credit, debit
    status = Column(String(20), nullable=False, default="successful", index=True)
    amount = Column(MONEY, nullable=False)
    balance_before = Column(MONEY, nullable=False)
    balance_after = Column(MONEY, nullable=False)
    payment_method = Column(String(30), nullable=False)
    reference = Column(String(120), unique=True)
    description = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class IdSequence(Base):
    __tablename__ = "id_sequences"

    name = Column(String(50), primary_key=True)
    value = Column(BigInteger, nullable=False)


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    action = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
