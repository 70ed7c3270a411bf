from datetime import datetime
from decimal import Decimal
from typing import List

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from ticketing_core.platform.database.orm_db_setting import Base


class EventModel(Base):
    __tablename__ = 'event'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default='')
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    ticket_types: Mapped[List['TicketTypeModel']] = relationship(
        'TicketTypeModel',
        back_populates='event',
        order_by='TicketTypeModel.position',
        cascade='all, delete-orphan',
        lazy='selectin',
    )


class TicketTypeModel(Base):
    __tablename__ = 'ticket_type'
    __table_args__ = (
        UniqueConstraint('event_id', 'name', name='uq_ticket_type_event_name'),
        CheckConstraint('available >= 0', name='ck_ticket_type_available_non_negative'),
        CheckConstraint('available <= quantity', name='ck_ticket_type_available_within_quantity'),
        CheckConstraint('price >= 0', name='ck_ticket_type_price_non_negative'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('event.id', ondelete='CASCADE'), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    available: Mapped[int] = mapped_column(Integer, nullable=False)

    event: Mapped['EventModel'] = relationship('EventModel', back_populates='ticket_types')
