"""
Request and response shapes for payment initiation.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Union

__all__ = [
    "Customer",
    "PaymentInitiation",
    "PaymentOrder",
    "build_payment_payload",
]


@dataclass(frozen=True)
class Customer:
    buyer_name: str
    email: str
    phone: str

    def to_dict(self) -> Dict[str, str]:
        return {"buyer_name": self.buyer_name, "email": self.email, "phone": self.phone}


@dataclass(frozen=True)
class PaymentOrder:
    amount: Union[int, float, Decimal]
    merchant_order_id: str
    channel: str
    purpose: str
    customer: Union[Customer, Mapping[str, Any]]
    expires_in: Optional[int] = None
    metadata: Optional[Mapping[str, Any]] = None


def _json_amount(amount: Union[int, float, Decimal]) -> Union[int, float]:
    if isinstance(amount, Decimal):
        return int(amount) if amount == amount.to_integral_value() else float(amount)
    return amount


def build_payment_payload(order: PaymentOrder) -> Dict[str, Any]:
    """Build the JSON body sent to ``/initiate-payment``."""
    customer = order.customer.to_dict() if isinstance(order.customer, Customer) else dict(order.customer)
    payload: Dict[str, Any] = {
        "amount": _json_amount(order.amount),
        "merchantOrderId": order.merchant_order_id,
        "channel": order.channel,
        "purpose": order.purpose,
        "customer": customer,
    }
    if order.expires_in is not None:
        payload["expires_in"] = order.expires_in
    if order.metadata is not None:
        payload["metadata"] = dict(order.metadata)
    return payload


@dataclass(frozen=True)
class PaymentInitiation:
    status: Optional[str]
    token: Optional[str]
    payment_url: Optional[str]
    expires_in: Optional[int]
    raw: Dict[str, Any]

    @classmethod
    def from_response(cls, payload: Dict[str, Any]) -> "PaymentInitiation":
        return cls(
            status=payload.get("status"),
            token=payload.get("token"),
            payment_url=payload.get("payment_url"),
            expires_in=payload.get("expires_in"),
            raw=payload,
        )
