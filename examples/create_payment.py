"""
Minimal script that uses the public API to initiate a GuruTvapay payment.
"""

from __future__ import annotations

import argparse
import logging
import sys

from gurutvapay import (
    ClientParameters,
    ConfigError,
    Customer,
    GurutvapayError,
    PaymentOrder,
    create_client,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Initiate a payment using the SDK API")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing GURUTVAPAY_* settings",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    parser.add_argument("--environment", choices=("uat", "live"), help="Override GURUTVAPAY_ENV")
    parser.add_argument("--api-key", help="Provide the API key without relying on environment data")
    parser.add_argument("--amount", type=float, default=100)
    parser.add_argument("--order-id", default="ORD123")
    parser.add_argument("--idempotency-key", help="Check the order status with this Idempotency-Key")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )

    parameters = ClientParameters(environment=args.environment, api_key=args.api_key)
    try:
        client = create_client(env_file=args.env_file, parameters=parameters)
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    order = PaymentOrder(
        amount=args.amount,
        merchant_order_id=args.order_id,
        channel="web",
        purpose="Online Payment",
        customer=Customer(buyer_name="John", email="john@example.com", phone="9876543210"),
    )

    with client:
        try:
            initiation = client.create_payment(order)
        except GurutvapayError as exc:
            logging.error("Payment initiation failed: %s", exc)
            return 1

        logging.info("Payment %s: open %s", initiation.status, initiation.payment_url)

        if args.idempotency_key:
            status = client.request(
                "POST",
                f"{client.config.environment.path_prefix}/transaction-status",
                headers={"Idempotency-Key": args.idempotency_key},
                form={"merchantOrderId": args.order_id},
            )
            logging.info("Current status: %s", status.get("status"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
