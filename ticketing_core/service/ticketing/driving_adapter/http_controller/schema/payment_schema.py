from datetime import datetime
from decimal import Decimal
from typing import Optional
import uuid

from pydantic import BaseModel, Field

from ticketing_core.service.ticketing.driving_adapter.http_controller.schema.booking_schema import (
    BookingResponse,
)


class PaymentRequest(BaseModel):
    booking_id: uuid.UUID
    payment_method_token: str = Field(min_length=1)

    model_config = {
        'json_schema_extra': {
            'example': {
                'booking_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'payment_method_token': 'tok_visa',
            }
        },
    }


class PaymentResponse(BaseModel):
    outcome: str
    failure_reason: Optional[str] = None
    booking: BookingResponse


class PaymentIntentRequest(BaseModel):
    booking_id: uuid.UUID


class PaymentIntentResponse(BaseModel):
    intent_id: str
    client_secret: str
    amount: Decimal
    currency: str


class PaymentCallbackRequest(BaseModel):
    booking_id: uuid.UUID
    payment_reference: Optional[str] = None
    status: str  # 'succeeded' or a failure status
    reason_code: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == 'succeeded'


class PaymentCallbackResponse(BaseModel):
    outcome: str
    booking_status: str
    payment_status: str


class PaymentStatusResponse(BaseModel):
    booking_id: uuid.UUID
    booking_reference: str
    booking_status: str
    payment_status: str
    payment_reference: Optional[str] = None
    amount: Decimal
    currency: str
    paid_at: Optional[datetime] = None
