#!/usr/bin/env python3
"""
Referral commission administration tool.

Usage:
    python scripts/mlm_admin.py tree ROOT [--depth 3] [--per 20] [--no-totals] [--json]
    python scripts/mlm_admin.py settings show
    python scripts/mlm_admin.py settings set [--enabled true|false] [--levels 5,3,2]
        [--min-order-amount 100] [--prevent-self-referral true|false]
        [--one-commission-per-order true|false]
    python scripts/mlm_admin.py commissions list [--status pending]
    python scripts/mlm_admin.py commissions set-status ID STATUS [--note TEXT]
    python scripts/mlm_admin.py summary USER_ID [--limit 5]

ROOT is a user ID, referral code or email.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from mlm_engine.initialization.database import (
    create_engine,
    create_session_maker,
)
from mlm_engine.initialization.logging import setup_logging
from mlm_engine.services.mlm import (
    CommissionManager,
    CommissionReportService,
    CommissionSettingsService,
    ReferralTreeReporter,
    TreeNode,
)
from mlm_engine.utils.exceptions import MLMError


def _bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise argparse.ArgumentTypeError(f"Expected true/false, got {value!r}")


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _print_node(node: TreeNode, indent: int = 0) -> None:
    status = "" if node.mlm_active else " [inactive]"
    line = (
        f"{'  ' * indent}- #{node.id} {node.name or node.email or ''} "
        f"({node.referral_code or 'no code'}) "
        f"children={node.children_count}{status}"
    )
    if node.totals is not None:
        line += (
            f" pending={node.totals.pending_amount}"
            f" approved={node.totals.approved_amount}"
            f" paid={node.totals.paid_amount}"
        )
    print(line)
    for child in node.children:
        _print_node(child, indent + 1)


async def cmd_tree(session: AsyncSession, args: argparse.Namespace) -> None:
    reporter = ReferralTreeReporter(session)
    tree = await reporter.build_tree(
        args.root,
        depth=args.depth,
        per=args.per,
        include_totals=not args.no_totals,
    )
    if args.json:
        _print_json(tree.to_dict())
    else:
        _print_node(tree.root)


async def cmd_settings_show(
    session: AsyncSession, args: argparse.Namespace
) -> None:
    service = CommissionSettingsService(session)
    stored = await service.get_stored()
    if stored is None:
        logger.info("No settings saved yet, defaults apply")
    _print_json({
        "stored": stored is not None,
        "settings": (await service.load()).to_dict(),
    })


async def cmd_settings_set(
    session: AsyncSession, args: argparse.Namespace
) -> None:
    payload: dict[str, Any] = {}
    if args.enabled is not None:
        payload["isEnabled"] = args.enabled
    if args.levels is not None:
        percents = [p.strip() for p in args.levels.split(",") if p.strip()]
        payload["levels"] = [{"percent": p} for p in percents]
    if args.min_order_amount is not None:
        payload["minOrderAmount"] = args.min_order_amount
    if args.prevent_self_referral is not None:
        payload["preventSelfReferral"] = args.prevent_self_referral
    if args.one_commission_per_order is not None:
        payload["oneCommissionPerOrder"] = args.one_commission_per_order

    saved = await CommissionSettingsService(session).save(payload)
    logger.success("Settings saved")
    _print_json(saved.to_dict())


async def cmd_commissions_list(
    session: AsyncSession, args: argparse.Namespace
) -> None:
    rows = await CommissionReportService(session).list_commissions(args.status)
    _print_json({"items": [row.to_dict() for row in rows]})


async def cmd_commissions_set_status(
    session: AsyncSession, args: argparse.Namespace
) -> None:
    updated = await CommissionManager(session).update_status(
        args.id, args.status, note=args.note
    )
    logger.success(f"Commission #{args.id} is now {updated.status}")
    _print_json(updated.to_dict())


async def cmd_summary(session: AsyncSession, args: argparse.Namespace) -> None:
    summary = await CommissionReportService(session).earner_summary(
        args.user_id, args.limit
    )
    _print_json({
        "totals": summary.totals.to_dict(),
        "counts": summary.counts.to_dict(),
        "recent": [row.to_dict() for row in summary.recent],
    })


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Referral commission administration"
    )
    parser.add_argument(
        "--log-level", default="WARNING", help="Log level (default: WARNING)"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    tree = sub.add_parser("tree", help="Show referral tree below a user")
    tree.add_argument("root", help="User ID, referral code or email")
    tree.add_argument("--depth", type=int, default=None)
    tree.add_argument("--per", type=int, default=None)
    tree.add_argument("--no-totals", action="store_true")
    tree.add_argument("--json", action="store_true")
    tree.set_defaults(handler=cmd_tree)

    settings_parser = sub.add_parser("settings", help="Program settings")
    settings_sub = settings_parser.add_subparsers(dest="action", required=True)
    show = settings_sub.add_parser("show")
    show.set_defaults(handler=cmd_settings_show)
    set_ = settings_sub.add_parser("set")
    set_.add_argument("--enabled", type=_bool)
    set_.add_argument(
        "--levels", help="Comma-separated level percents, e.g. 5,3,2"
    )
    set_.add_argument("--min-order-amount")
    set_.add_argument("--prevent-self-referral", type=_bool)
    set_.add_argument("--one-commission-per-order", type=_bool)
    set_.set_defaults(handler=cmd_settings_set)

    commissions = sub.add_parser("commissions", help="Commission ledger")
    commissions_sub = commissions.add_subparsers(dest="action", required=True)
    list_ = commissions_sub.add_parser("list")
    list_.add_argument("--status")
    list_.set_defaults(handler=cmd_commissions_list)
    set_status = commissions_sub.add_parser("set-status")
    set_status.add_argument("id", type=int)
    set_status.add_argument("status")
    set_status.add_argument("--note")
    set_status.set_defaults(handler=cmd_commissions_set_status)

    summary = sub.add_parser("summary", help="Commission summary of a user")
    summary.add_argument("user_id", type=int)
    summary.add_argument("--limit", type=int, default=None)
    summary.set_defaults(handler=cmd_summary)

    return parser


async def run(args: argparse.Namespace) -> int:
    engine = create_engine(pooled=False)
    session_maker = create_session_maker(engine)
    try:
        async with session_maker() as session:
            await args.handler(session, args)
    except MLMError as e:
        logger.error(str(e))
        return 1
    finally:
        await engine.dispose()
    return 0


def main() -> None:
    args = build_parser().parse_args()
    setup_logging(level=args.log_level)
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
