"""
SQLAlchemy models for Coffre persistence.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from coffre.domain.clock import utcnow


class Base(DeclarativeBase):
    """Base class for all models."""


class UserModel(Base):
    """User database model - wallet-keyed identity."""

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    wallet_address: Mapped[str] = mapped_column(
        String(42), unique=True, index=True, nullable=False
    )
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True)
    username: Mapped[Optional[str]] = mapped_column(String(30), unique=True)

    # Profile
    first_name: Mapped[Optional[str]] = mapped_column(String(100))
    last_name: Mapped[Optional[str]] = mapped_column(String(100))
    bio: Mapped[Optional[str]] = mapped_column(Text)
    avatar: Mapped[Optional[str]] = mapped_column(String(500))

    preferences: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)

    # Security
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime)
    login_attempts: Mapped[int] = mapped_column(Integer, default=0)
    lock_until: Mapped[Optional[datetime]] = mapped_column(DateTime)
    two_factor_enabled: Mapped[bool] = mapped_column(Boolean, default=False)

    # Wallet data
    last_balance: Mapped[Optional[str]] = mapped_column(String(80))
    last_balance_update: Mapped[Optional[datetime]] = mapped_column(DateTime)
    transaction_count: Mapped[int] = mapped_column(Integer, default=0)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    # Relationships
    sessions: Mapped[list["UserSessionModel"]] = relationship(
        "UserSessionModel",
        back_populates="user",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="UserSessionModel.created_at",
    )


class UserSessionModel(Base):
    """Active session row; only the token hash is stored."""

    __tablename__ = "user_sessions"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    token_hash: Mapped[str] = mapped_column(
        String(64), unique=True, index=True, nullable=False
    )
    ip_address: Mapped[Optional[str]] = mapped_column(String(45))
    user_agent: Mapped[Optional[str]] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Relationships
    user: Mapped["UserModel"] = relationship(
        "UserModel", back_populates="sessions", lazy="select"
    )


class TransferSimulationModel(Base):
    """Transfer simulation database model."""

    __tablename__ = "transfer_simulations"
    __table_args__ = (
        Index("ix_transfer_simulations_wallet_created", "wallet_address", "created_at"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    simulation_id: Mapped[str] = mapped_column(
        String(40), unique=True, index=True, nullable=False
    )
    wallet_address: Mapped[str] = mapped_column(String(42), nullable=False)
    user_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), index=True
    )

    # Transfer parameters
    from_address: Mapped[str] = mapped_column(String(42), nullable=False)
    to_address: Mapped[str] = mapped_column(String(42), nullable=False)
    amount: Mapped[str] = mapped_column(String(80), nullable=False)
    amount_wei: Mapped[str] = mapped_column(String(80), nullable=False)
    gas_limit: Mapped[str] = mapped_column(String(40), nullable=False)
    gas_price: Mapped[str] = mapped_column(String(80), nullable=False)
    gas_price_wei: Mapped[str] = mapped_column(String(80), nullable=False)
    max_fee_per_gas: Mapped[Optional[str]] = mapped_column(String(80))
    max_priority_fee_per_gas: Mapped[Optional[str]] = mapped_column(String(80))

    status: Mapped[str] = mapped_column(String(20), index=True, nullable=False)
    result: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON)
    errors: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    warnings: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    # Network context
    chain_id: Mapped[int] = mapped_column(Integer, nullable=False)
    network_name: Mapped[str] = mapped_column(String(40), nullable=False)
    block_number: Mapped[Optional[int]] = mapped_column(BigInteger)
    block_timestamp: Mapped[Optional[datetime]] = mapped_column(DateTime)

    # Request metadata
    source: Mapped[str] = mapped_column(String(20), nullable=False)
    session_id: Mapped[Optional[str]] = mapped_column(String(64))
    ip_address: Mapped[Optional[str]] = mapped_column(String(45))
    user_agent: Mapped[Optional[str]] = mapped_column(String(500))

    executed_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, index=True, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
