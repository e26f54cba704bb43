"""CIH/CMI payment gateway.

Not wired up yet: the checkout endpoint only reports whether payment would be
enabled. When credentials and the gateway are ready, CmiGateway must build the
order payload, sign it with the secret, redirect the user to the CMI page and
verify the callback.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..config import Settings
from ..models import PaymentStatus


class PaymentGateway(ABC):
    @abstractmethod
    def checkout(self, order: Dict[str, Any]) -> str:
        """Return the redirect URL for the hosted payment page"""

    @abstractmethod
    def verify_callback(self, payload: Dict[str, Any]) -> bool:
        """Return True when the gateway callback is authentic and the payment succeeded"""


class CmiGateway(PaymentGateway):
    def __init__(self, merchant_id: str, secret: Optional[str], endpoint: Optional[str]):
        self.merchant_id = merchant_id
        self.secret = secret
        self.endpoint = endpoint

    def checkout(self, order: Dict[str, Any]) -> str:
        raise NotImplementedError("CIH/CMI checkout is pending activation")

    def verify_callback(self, payload: Dict[str, Any]) -> bool:
        raise NotImplementedError("CIH/CMI callback verification is pending activation")


class PaymentProcessor:
    def __init__(self, settings: Settings):
        self.demo_mode = settings.DEMO_MODE
        self.gateway: Optional[PaymentGateway] = None
        if settings.CMI_MERCHANT_ID:
            self.gateway = CmiGateway(
                settings.CMI_MERCHANT_ID, settings.CMI_SECRET, settings.CMI_ENDPOINT
            )

    def is_enabled(self) -> bool:
        return not self.demo_mode and self.gateway is not None

    def checkout_status(self) -> PaymentStatus:
        if not self.is_enabled():
            return PaymentStatus(status="disabled", reason="DEMO_MODE or missing CMI credentials")
        return PaymentStatus(status="todo", message="CIH/CMI integration pending activation.")
