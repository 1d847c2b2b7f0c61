"""
Mock payment gateway.

In production, this would call a card processor (Stripe, Square, Adyen)
through its HTTP client. The mock waits a fixed delay and always succeeds.
"""

import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from typing import TypedDict

from pixelperfect.schemas.booking_schema import PaymentDetails

logger = logging.getLogger(__name__)


class PaymentError(Exception):
    """Raised by a gateway when a charge is declined."""


class ChargeRecord(TypedDict):
    """A charge accepted by the mock gateway."""

    payment_id: str
    booking_id: str
    amount: int
    card: str


class PaymentGateway(ABC):
    @abstractmethod
    async def charge(self, booking_id: str, amount: int, details: PaymentDetails) -> str:
        """Charge the card and return the payment id."""
        raise NotImplementedError


class MockPaymentGateway(PaymentGateway):
    """Simulated processor with a fixed artificial delay and no failure path."""

    def __init__(self, delay_sec: float = 0.0) -> None:
        self.delay_sec = delay_sec
        self.charges: list[ChargeRecord] = []

    async def charge(self, booking_id: str, amount: int, details: PaymentDetails) -> str:
        if self.delay_sec:
            await asyncio.sleep(self.delay_sec)
        payment_id = f"pay_{uuid.uuid4().hex[:12]}"
        self.charges.append(
            {
                "payment_id": payment_id,
                "booking_id": booking_id,
                "amount": amount,
                "card": details.masked_card(),
            }
        )
        logger.info(
            "Charged %d for booking %s on card %s (%s)",
            amount, booking_id, details.masked_card(), payment_id,
        )
        return payment_id
