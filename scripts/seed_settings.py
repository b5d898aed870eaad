#!/usr/bin/env python3
"""Seed the default rate settings version if none exists.

Runs the same bootstrap step as application startup, for deployments
that create the schema before the first app process starts.
"""

import asyncio
import logging

from app.database import get_db_context
from app.services.rate_settings_service import rate_settings_service


async def seed_settings() -> None:
    async with get_db_context() as db:
        current = await rate_settings_service.ensure_default_settings(db)
        print(f"Rate settings version {current.version}")
        print(f"  Commission: {current.commission_rate}% ({current.commission_type})")
        print(f"  GST:        {current.gst_rate}% enabled={current.gst_enabled}")
        print(f"  TCS:        {current.tcs_rate}% enabled={current.tcs_enabled}")
        print(f"  Platform:   {current.platform_fee_rate}% enabled={current.platform_fee_enabled}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed_settings())
