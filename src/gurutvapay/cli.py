"""
Command-line interface for exercising the GuruTvapay gateway APIs.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from .api import create_client
from .core.client import GurutvapayClient
from .core.config import ConfigError, load_client_config
from .core.errors import GurutvapayError
from .core.payloads import Customer, PaymentOrder
from .core.webhook import verify_webhook


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _key_value(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Values must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Key must not be empty")
    return key, val


def _json_object(value: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise argparse.ArgumentTypeError("Expected a JSON object")
    return parsed


def _collect(pairs: Optional[Iterable[Tuple[str, str]]]) -> dict[str, str]:
    collected: dict[str, str] = {}
    for key, value in pairs or ():
        collected[key] = value
    return collected


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gurutvapay",
        description="Call the GuruTvapay payment gateway",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing GURUTVAPAY_* settings (default: .env)",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_key_value,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    login = commands.add_parser("login", help="Obtain and cache an OAuth access token")
    login.add_argument("--username", required=True)
    login.add_argument("--password", required=True)

    payment = commands.add_parser("create-payment", help="Initiate a payment")
    payment.add_argument("--amount", type=float, required=True)
    payment.add_argument("--order-id", required=True, help="Merchant order id")
    payment.add_argument("--channel", default="web")
    payment.add_argument("--purpose", required=True)
    payment.add_argument("--buyer-name", required=True)
    payment.add_argument("--email", required=True)
    payment.add_argument("--phone", required=True)
    payment.add_argument("--expires-in", type=int, default=None)
    payment.add_argument("--metadata", type=_json_object, default=None, help="JSON object")

    status = commands.add_parser("status", help="Query a transaction by merchant order id")
    status.add_argument("order_id")

    listing = commands.add_parser("list", help="List transactions")
    listing.add_argument("--limit", type=int, default=50)
    listing.add_argument("--page", type=int, default=0)

    generic = commands.add_parser("request", help="Send an authenticated request")
    generic.add_argument("method")
    generic.add_argument("path", help="Path relative to the gateway root, or an absolute URL")
    generic.add_argument("--header", action="append", type=_key_value, metavar="KEY=VALUE")
    generic.add_argument("--query", action="append", type=_key_value, metavar="KEY=VALUE")
    generic.add_argument("--json", dest="json_body", type=_json_object, default=None)

    webhook = commands.add_parser("verify-webhook", help="Verify a webhook signature")
    webhook.add_argument("--payload-file", required=True, help="File holding the raw request body")
    webhook.add_argument("--signature", required=True, help="Value of the signature header")
    webhook.add_argument("--secret", default=None, help="Defaults to GURUTVAPAY_WEBHOOK_SECRET")
    return parser


def _print_json(value: Any) -> None:
    print(json.dumps(value, indent=2, sort_keys=True))


def _dispatch(client: GurutvapayClient, args: argparse.Namespace) -> int:
    if args.command == "login":
        token = client.login(args.username, args.password)
        logging.info("Token cached; expires at %s", token.expires_at)
        return 0

    if args.command == "create-payment":
        order = PaymentOrder(
            amount=args.amount,
            merchant_order_id=args.order_id,
            channel=args.channel,
            purpose=args.purpose,
            customer=Customer(buyer_name=args.buyer_name, email=args.email, phone=args.phone),
            expires_in=args.expires_in,
            metadata=args.metadata,
        )
        initiation = client.create_payment(order)
        _print_json(initiation.raw)
        return 0

    if args.command == "status":
        _print_json(client.transaction_status(args.order_id))
        return 0

    if args.command == "list":
        _print_json(client.transaction_list(limit=args.limit, page=args.page))
        return 0

    if args.command == "request":
        _print_json(
            client.request(
                args.method,
                args.path,
                headers=_collect(args.header),
                query=_collect(args.query),
                json_body=args.json_body,
            )
        )
        return 0

    raise ValueError(f"Unknown command {args.command!r}")


def run_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)
    overrides = _collect(args.set)

    try:
        config = load_client_config(env_file=args.env_file, overrides=overrides)
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    if args.command == "verify-webhook":
        secret = args.secret or config.webhook_secret
        if not secret:
            logging.error("No webhook secret: pass --secret or set GURUTVAPAY_WEBHOOK_SECRET")
            return 1
        payload = Path(args.payload_file).read_bytes()
        if verify_webhook(payload, args.signature, secret):
            logging.info("Webhook signature is valid")
            return 0
        logging.error("Webhook signature mismatch")
        return 1

    with create_client(config=config) as client:
        try:
            return _dispatch(client, args)
        except GurutvapayError as exc:
            logging.error("%s: %s (HTTP %s)", exc.kind.value, exc, exc.status)
            return 1


def main() -> None:
    sys.exit(run_cli())
