"""RouteShare management CLI.

Schema setup plus the maintenance jobs an external scheduler (cron, K8s
CronJob) runs against the logistics domain.

Usage:
    python src/manage.py setup-db                 # Create tables, provision origin index
    python src/manage.py drop-db                  # Drop all tables
    python src/manage.py provision-index          # Backfill the DealOrigin index
    python src/manage.py refresh-deals [--as-of 2026-01-01T00:00:00+00:00]
    python src/manage.py reconcile-links [--dry-run]
"""

import argparse
import sys
from datetime import datetime


def _domain():
    from logistics.domain import logistics
    from logistics.utils.logging import configure_logging

    configure_logging()
    print("Initializing logistics domain...")
    logistics.init()
    return logistics


def setup_database():
    from logistics.utils.db import setup_db

    domain = _domain()
    print("Creating logistics database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from logistics.utils.db import drop_db

    domain = _domain()
    print("Dropping logistics database schema...")
    drop_db(domain)
    print("Done.")


def provision_index():
    from logistics.matching.origin_index import provision_origin_index

    domain = _domain()
    with domain.domain_context():
        added = provision_origin_index()
    print(f"Origin index provisioned ({added} deals added).")


def refresh_deals(as_of: datetime | None):
    from logistics.deal.refresh import RefreshDealStatuses

    domain = _domain()
    with domain.domain_context():
        advanced = domain.process(RefreshDealStatuses(as_of=as_of), asynchronous=False)
    print(f"Advanced {advanced} deals.")


def reconcile_links(dry_run: bool):
    from logistics.parcel.reconciliation import ReconcileParcelLinks

    domain = _domain()
    with domain.domain_context():
        report = domain.process(ReconcileParcelLinks(dry_run=dry_run), asynchronous=False)
    prefix = "Would repair" if dry_run else "Repaired"
    print(f"{prefix}: linked={report['linked']} unlinked={report['unlinked']} conflicts={report['conflicts']}")


def main():
    parser = argparse.ArgumentParser(description="RouteShare management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("provision-index", help="Backfill the deal origin index")

    refresh_parser = subparsers.add_parser("refresh-deals", help="Advance deals whose departure has elapsed")
    refresh_parser.add_argument(
        "--as-of",
        type=datetime.fromisoformat,
        default=None,
        help="Reference time in ISO 8601 (default: now)",
    )

    reconcile_parser = subparsers.add_parser("reconcile-links", help="Repair one-sided parcel/offer links")
    reconcile_parser.add_argument("--dry-run", action="store_true", help="Report without writing")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "provision-index":
        provision_index()
    elif args.command == "refresh-deals":
        refresh_deals(args.as_of)
    elif args.command == "reconcile-links":
        reconcile_links(args.dry_run)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
