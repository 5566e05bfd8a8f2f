#!/usr/bin/env python3
"""Initialize database tables."""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from mlm_engine.initialization.database import create_engine, create_tables
from mlm_engine.initialization.logging import setup_logging


async def init_database() -> None:
    """Create all database tables."""
    logger.info("Connecting to database...")
    engine = create_engine(pooled=False)

    try:
        logger.info("Creating tables (checkfirst=True)...")
        await create_tables(engine)
    finally:
        await engine.dispose()

    logger.success("Database tables created successfully!")


if __name__ == "__main__":
    setup_logging(level="INFO")
    asyncio.run(init_database())
