#!/usr/bin/env python3
"""
Back-fill missing monthly payment records for every active tenant.

Runs the same generation the application performs on startup, without the
UI: opens the configured database, creates any missing tables, generates
records from each active tenant's move-in month up to the current month,
and prints one line per tenant.

Exit status is 1 if any tenant failed, 0 otherwise.

Usage:
    python3 scripts/backfill_payments.py
    python3 scripts/backfill_payments.py --config my_config.yaml
    python3 scripts/backfill_payments.py --database /tmp/pm.db --as-of 2024-03-15
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def main(argv: list[str] | None = None) -> int:
    from property_config import get_active_config
    from property_kernel.domain.clock import DeterministicClock, SystemClock
    from property_kernel.domain.values import parse_date
    from property_kernel.logging_config import configure_logging
    from property_services.app import PropertyManagementApp

    parser = argparse.ArgumentParser(
        description="Generate missing payment records for all active tenants.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML configuration file (default: $PROPERTY_MANAGEMENT_CONFIG or packaged defaults)",
    )
    parser.add_argument(
        "--database",
        type=Path,
        default=None,
        help="SQLite database file, overrides the configured path",
    )
    parser.add_argument(
        "--as-of",
        default=None,
        help="Treat this date (YYYY-MM-DD) as today",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level, overrides the configured level",
    )
    args = parser.parse_args(argv)

    config = get_active_config(args.config)
    if args.database is not None:
        config = replace(config, database=replace(config.database, path=str(args.database)))

    level = (args.log_level or config.logging.level).upper()
    configure_logging(level=getattr(logging, level, logging.INFO))

    clock = DeterministicClock.on(parse_date(args.as_of, "as_of")) if args.as_of else SystemClock()

    app = PropertyManagementApp.from_config(config, clock=clock)
    try:
        outcomes = app.startup()
    finally:
        app.shutdown()

    failed = 0
    for outcome in outcomes:
        if outcome.ok:
            print(f"  tenant {outcome.tenant_id:>5}: {outcome.value} record(s) created")
        else:
            failed += 1
            print(f"  tenant {outcome.tenant_id:>5}: FAILED ({outcome.error})")

    print()
    print(f"  {len(outcomes)} active tenant(s), {failed} failed")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
