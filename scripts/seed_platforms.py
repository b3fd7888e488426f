"""
Well-known platform seeder: inserts the default fee schedules.

Usage:
    python scripts/seed_platforms.py

Idempotent: does nothing when system platforms already exist, and tolerates
another process seeding at the same time.
"""

import asyncio

from payout_ledger.database import async_session, engine
from payout_ledger.services.platform_registry import PlatformFeeRegistry


async def seed() -> None:
    async with async_session() as session:
        registry = PlatformFeeRegistry(session)
        await registry.ensure_well_known_seeded()
        platforms = await registry.list_well_known()

    print(f"\n  Well-known platforms: {len(platforms)}")
    for p in platforms:
        legs = ", ".join(
            f"{name} {leg.amount} {leg.currency.value}"
            for name, leg in p.withdrawal_fees.present()
        )
        print(f"    {p.platform_name}: {p.platform_fee_percentage}%" + (f" ({legs})" if legs else ""))

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
