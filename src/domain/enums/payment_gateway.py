"""Supported payment gateways."""

from enum import Enum


class PaymentGateway(str, Enum):
    """Gateway that processed a payment."""

    STRIPE = "stripe"
    RAZORPAY = "razorpay"
