from enum import StrEnum


class PaymentMethod(StrEnum):
    CREDIT_CARD = 'credit_card'
    PAYPAL = 'paypal'
    BANK_TRANSFER = 'bank_transfer'
    OTHER = 'other'
