from datetime import datetime
from decimal import Decimal
from typing import List, Optional
import uuid

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ticketing_core.platform.database.orm_db_setting import Base


class BookingModel(Base):
    __tablename__ = 'booking'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    booking_reference: Mapped[str] = mapped_column(
        String(20), nullable=False, unique=True, index=True
    )
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    event_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('event.id'), nullable=False, index=True
    )
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    booking_status: Mapped[str] = mapped_column(String(20), nullable=False, default='pending')
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default='pending')
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    payment_reference: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    payment_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    attendee_info: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    line_items: Mapped[List['BookingLineItemModel']] = relationship(
        'BookingLineItemModel',
        order_by='BookingLineItemModel.position',
        cascade='all, delete-orphan',
        lazy='selectin',
    )


class BookingLineItemModel(Base):
    __tablename__ = 'booking_line_item'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey('booking.id', ondelete='CASCADE'), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    ticket_type_name: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
