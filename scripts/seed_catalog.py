#!/usr/bin/env python3
"""Seed storefront catalog script.

Generates a deterministic demo catalog and writes it into the database
configured by DATABASE_URL.

Usage:
    python scripts/seed_catalog.py --mode small
    python scripts/seed_catalog.py --mode full --seed 7
    python scripts/seed_catalog.py --mode small --no-clear
"""

import argparse
import asyncio

from storefront.catalog.generator import CatalogGenerator, GeneratorConfig
from storefront.catalog.seed import create_tables, write_snapshot
from storefront.infrastructure.database import dispose_engine, get_engine, get_session_factory


async def seed(mode: str, seed_value: int, clear: bool) -> dict[str, int]:
    """Generate and write the catalog.

    Args:
        mode: Catalog size (small/full).
        seed_value: Generator seed.
        clear: Whether to clear existing catalog rows.

    Returns:
        Rows written per table.
    """
    config = GeneratorConfig.full(seed_value) if mode == "full" else GeneratorConfig.small(seed_value)
    snapshot = CatalogGenerator(config).generate()

    async with get_session_factory()() as session:
        counts = await write_snapshot(session, snapshot, clear_existing=clear)
        await session.commit()
    return counts


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the storefront catalog",
    )
    parser.add_argument(
        "--mode",
        choices=["small", "full"],
        default="small",
        help="Catalog size: small (60 listings) or full (600 listings)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Generator seed (default: 42)",
    )
    parser.add_argument(
        "--no-clear",
        action="store_true",
        help="Don't clear existing catalog rows before seeding",
    )

    args = parser.parse_args()

    print("=" * 60)
    print("Storefront Catalog Seeder")
    print("=" * 60)
    print(f"Mode: {args.mode}")
    print(f"Seed: {args.seed}")
    print(f"Clear existing: {not args.no_clear}")
    print()

    print("Creating database tables...")
    await create_tables(get_engine())
    print("Tables ready.")
    print()

    try:
        counts = await seed(args.mode, args.seed, clear=not args.no_clear)
        for table, count in counts.items():
            print(f"  {table}: {count}")
        print()
    finally:
        await dispose_engine()

    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
