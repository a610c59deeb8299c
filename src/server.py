"""Protean Engine runner for the storefront domains.

In production, event handlers and projectors run asynchronously: the
Engine's outbox processor publishes events and its subscriptions invoke the
handlers (cart and order broadcasts, loyalty rewards, rating projections).

Usage:
    python src/server.py                   # Run both domain engines
    python src/server.py --domain ordering # Run only the ordering engine
    python src/server.py --domain reviews  # Run only the reviews engine
"""

import argparse
import asyncio

from protean.server.engine import Engine

DOMAIN_NAMES = ["ordering", "reviews"]


def _get_domain(name):
    """Import and initialize a domain by name."""
    if name == "ordering":
        from ordering.domain import ordering

        ordering.init()
        return ordering
    elif name == "reviews":
        from reviews.domain import reviews

        reviews.init()
        return reviews
    else:
        raise ValueError(f"Unknown domain: {name}")


async def run(domain_names):
    engines = [Engine(_get_domain(name)) for name in domain_names]
    await asyncio.gather(*(engine.run() for engine in engines))


def main():
    parser = argparse.ArgumentParser(description="Storefront Engine runner")
    parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        help="Run a single domain engine (default: run all)",
    )
    args = parser.parse_args()

    domain_names = [args.domain] if args.domain else DOMAIN_NAMES

    asyncio.run(run(domain_names))


if __name__ == "__main__":
    main()
