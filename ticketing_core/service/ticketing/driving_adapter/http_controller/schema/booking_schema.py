from datetime import datetime
from decimal import Decimal
from typing import List, Optional
import uuid

from pydantic import BaseModel, EmailStr, Field

from ticketing_core.service.ticketing.domain.entity.booking_entity import Booking
from ticketing_core.service.ticketing.domain.enum.payment_method import PaymentMethod


class TicketLineRequest(BaseModel):
    ticket_type: str = Field(min_length=1, max_length=100)
    quantity: int


class AttendeeInfoSchema(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None


class BookingCreateRequest(BaseModel):
    event_id: int
    tickets: List[TicketLineRequest]
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD
    attendee_info: Optional[AttendeeInfoSchema] = None

    model_config = {
        'json_schema_extra': {
            'example': {
                'event_id': 1,
                'tickets': [{'ticket_type': 'General', 'quantity': 2}],
                'payment_method': 'credit_card',
                'attendee_info': {'name': 'Ada', 'email': 'ada@example.com'},
            }
        },
    }


class LineItemResponse(BaseModel):
    ticket_type: str
    quantity: int
    unit_price: Decimal


class BookingResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'id': '01936d8f-5e73-7c4e-a9c5-123456789abc',  # UUID7
                'booking_reference': 'BK-4821937',
                'user_id': 2,
                'event_id': 1,
                'line_items': [{'ticket_type': 'General', 'quantity': 2, 'unit_price': '50.00'}],
                'total_amount': '100.00',
                'booking_status': 'pending',
                'payment_status': 'pending',
            }
        },
    }

    id: uuid.UUID
    booking_reference: str
    user_id: int
    event_id: int
    line_items: List[LineItemResponse]
    total_amount: Decimal
    booking_status: str
    payment_status: str
    payment_method: str
    payment_reference: Optional[str] = None
    attendee_info: Optional[AttendeeInfoSchema] = None
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, booking: Booking) -> 'BookingResponse':
        return cls(
            id=booking.id,
            booking_reference=booking.booking_reference,
            user_id=booking.user_id,
            event_id=booking.event_id,
            line_items=[
                LineItemResponse(
                    ticket_type=item.ticket_type_name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )
                for item in booking.line_items
            ],
            total_amount=booking.total_amount,
            booking_status=booking.booking_status.value,
            payment_status=booking.payment_status.value,
            payment_method=booking.payment_method.value,
            payment_reference=booking.payment_reference,
            attendee_info=(
                AttendeeInfoSchema(**booking.attendee_info.to_dict())
                if booking.attendee_info
                else None
            ),
            created_at=booking.created_at,
            paid_at=booking.paid_at,
            cancelled_at=booking.cancelled_at,
        )


class CancelBookingResponse(BaseModel):
    booking: BookingResponse
    already_cancelled: bool
