#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json

from utils.logging import configure_logging, get_logger
from utils.settings import get_settings

from .demo import build_demo_environment, run_demo


def cmd_demo(args: argparse.Namespace) -> None:
    env = build_demo_environment()
    summary = run_demo(env, amount=args.amount, partner_id=args.partner_id)
    print(json.dumps(summary, indent=2, sort_keys=True, default=str))

    settings = get_settings()
    run_logger = get_logger(
        "gateway.demo",
        log_level=settings.log_level,
        use_wandb=settings.wandb_enabled,
        wandb_project=settings.wandb_project,
    )
    run_logger.log_metrics(summary["results"])


def cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    from api.gateway_api import create_app

    env = build_demo_environment()
    run_demo(env, amount=args.amount, partner_id=args.partner_id)
    app = create_app(env.gateway, env.metrics)
    uvicorn.run(app, host=args.host, port=args.port)


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)

    p = argparse.ArgumentParser(description="Vault gateway CLI")
    sub = p.add_subparsers()

    sp = sub.add_parser("demo", help="Run deposit and redeem flows on an in-memory ledger")
    sp.add_argument("--amount", type=int, default=settings.deposit_amount)
    sp.add_argument("--partner-id", type=int, default=settings.partner_id)
    sp.set_defaults(func=cmd_demo)

    sp2 = sub.add_parser("serve", help="Serve the read-only API over a demo environment")
    sp2.add_argument("--host", default=settings.api_host)
    sp2.add_argument("--port", type=int, default=settings.port)
    sp2.add_argument("--amount", type=int, default=settings.deposit_amount)
    sp2.add_argument("--partner-id", type=int, default=settings.partner_id)
    sp2.set_defaults(func=cmd_serve)

    args = p.parse_args()
    if hasattr(args, "func"):
        args.func(args)
    else:
        p.print_help()


if __name__ == "__main__":
    main()
