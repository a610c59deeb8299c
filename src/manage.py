"""Storefront database management CLI.

Creates and drops the relational schemas of the ordering and reviews
domains. Memory-backed environments need neither.

Usage:
    python src/manage.py setup-db                    # Create all tables
    python src/manage.py drop-db --domain reviews    # Drop one domain's tables
"""

import argparse
import sys

DOMAIN_NAMES = ["ordering", "reviews"]


def _load_domains(names=None):
    from ordering.domain import ordering
    from reviews.domain import reviews

    available = {"ordering": ordering, "reviews": reviews}
    return {name: available[name] for name in (names or DOMAIN_NAMES)}


def setup_databases(names=None):
    """Create database schemas for the given (or all) domains."""
    from shared.db import setup_db

    for name, domain in _load_domains(names).items():
        print(f"Initializing {name} domain...")
        domain.init()
        setup_db(domain)
        print(f"  {name} schema ready.")

    print("Done.")


def drop_databases(names=None):
    """Drop database schemas for the given (or all) domains."""
    from shared.db import drop_db

    for name, domain in _load_domains(names).items():
        print(f"Initializing {name} domain...")
        domain.init()
        drop_db(domain)
        print(f"  {name} schema dropped.")

    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for command, help_text in (("setup-db", "Create all database tables"), ("drop-db", "Drop all database tables")):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument(
            "--domain",
            choices=DOMAIN_NAMES,
            nargs="*",
            help="Specific domain(s) to target (default: all)",
        )

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases(args.domain)
    elif args.command == "drop-db":
        drop_databases(args.domain)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
