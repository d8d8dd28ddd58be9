#!/usr/bin/env python3
"""
Rebalancing run for cron / task runners.

Usage:
    rebalance-run                 # dry run, prints the summary
    rebalance-run --live          # persist planned transfers
    rebalance-run --insights      # also write the insights snapshot

Cron:
    0 6 * * * rebalance-run --live >> logs/rebalance_$(date +\\%Y\\%m\\%d).log 2>&1
"""

import argparse
import json
import logging
import sys
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from rebalancer.core.config import get_settings
from rebalancer.core.exceptions import RebalanceError
from rebalancer.core.logging_config import configure_logging
from rebalancer.services.rebalancing import build_orchestrator

logger = logging.getLogger("rebalancer.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the inventory rebalancing engine once")
    parser.add_argument("--live", action="store_true", help="Persist transfers (default is a dry run)")
    parser.add_argument(
        "--insights", dest="insights", action="store_true", default=None,
        help="Write the insights snapshot",
    )
    parser.add_argument("--no-insights", dest="insights", action="store_false", help="Skip the insights snapshot")
    parser.add_argument("--insights-dir", help="Directory for the insights snapshot")
    return parser


def main(argv: Optional[List[str]] = None, session_factory: Optional[Callable[[], Session]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings)

    overrides = {}
    if args.insights is not None:
        overrides["insights_enabled"] = args.insights
    if args.insights_dir:
        overrides["insights_dir"] = args.insights_dir
    config = settings.balancer_config(**overrides)

    if session_factory is None:
        from rebalancer.db.session import SessionLocal
        session_factory = SessionLocal

    db = session_factory()
    try:
        summary = build_orchestrator(db, config).run(dry_run=not args.live)
    except RebalanceError as e:
        logger.error(f"Rebalancing run failed: {e}")
        print(json.dumps({"error": str(e)}))
        return 1
    finally:
        db.close()

    print(json.dumps(summary.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
