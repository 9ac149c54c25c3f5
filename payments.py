"""Stripe payment intents"""
import logging

import stripe

from config import Config

logger = logging.getLogger(__name__)


class PaymentGateway:
    def __init__(self, api_key=None, currency=None):
        self.api_key = api_key or Config.STRIPE_SECRET_KEY
        self.currency = currency or Config.PAYMENT_CURRENCY

    def create_intent(self, price: float) -> str:
        """Create a card payment intent and return its client secret"""
        amount = int(round(price * 100))
        intent = stripe.PaymentIntent.create(
            api_key=self.api_key,
            amount=amount,
            currency=self.currency,
            payment_method_types=["card"],
        )
        logger.info("Payment intent %s created for %s %s", intent.id, amount, self.currency)
        return intent.client_secret


def get_payment_gateway() -> PaymentGateway:
    return PaymentGateway()
