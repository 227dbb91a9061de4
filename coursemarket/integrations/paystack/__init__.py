"""Paystack payment gateway integration."""

from .client import PaystackClient, PaystackError, close_paystack_client, get_paystack_client

__all__ = ["PaystackClient", "PaystackError", "close_paystack_client", "get_paystack_client"]
