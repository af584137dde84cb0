import asyncio
import logging
import os

from sqlalchemy import text
from clubify.core.database import DatabaseManager, engine, Base
from clubify.core.exceptions import DatabaseError, ConfigurationError

# Register every model with Base.metadata
import clubify.club.models  # noqa: F401
import clubify.coach.models  # noqa: F401

logger = logging.getLogger(__name__)
db_manager = DatabaseManager()

MIGRATIONS = [
    # Patterns created before pattern ids were stored keep NULL here
    {
        "name": "add_training_recurrences_pattern_id_column",
        "check": "SELECT column_name FROM information_schema.columns WHERE table_name='training_recurrences' AND column_name='pattern_id'",
        "apply": "ALTER TABLE training_recurrences ADD COLUMN pattern_id VARCHAR(32)",
    },
    {
        "name": "add_training_recurrences_pattern_id_index",
        "check": "SELECT indexname FROM pg_indexes WHERE tablename='training_recurrences' AND indexname='ix_training_recurrences_pattern_id'",
        "apply": "CREATE INDEX ix_training_recurrences_pattern_id ON training_recurrences (pattern_id)",
    },
    {
        "name": "add_payment_records_player_period_unique",
        "check": "SELECT conname FROM pg_constraint WHERE conname='uq_payment_records_player_period'",
        "apply": "ALTER TABLE payment_records ADD CONSTRAINT uq_payment_records_player_period UNIQUE (player_id, period_month, period_year)",
    },
]


async def run_migrations():
    """Apply schema changes that create_all does not make on existing tables"""
    if engine.dialect.name != "postgresql":
        logger.debug(f"Skipping migrations on {engine.dialect.name}")
        return

    async with engine.begin() as conn:
        for migration in MIGRATIONS:
            try:
                result = await conn.execute(text(migration["check"]))
                exists = result.fetchone() is not None

                if not exists:
                    logger.info(f"Applying migration: {migration['name']}")
                    await conn.execute(text(migration["apply"]))
                    logger.info(f"Migration applied: {migration['name']}")
                else:
                    logger.debug(f"Migration already applied: {migration['name']}")
            except Exception as e:
                logger.warning(f"Migration {migration['name']} skipped: {e}")


async def init_database():
    """Create tables and apply pending migrations"""
    try:
        logger.info("Starting database initialization...")

        await db_manager.create_tables()
        logger.info("Database tables created/verified")

        await run_migrations()
        logger.info("Database migrations checked/applied")

        logger.info("Database initialization completed successfully")

    except DatabaseError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during database initialization: {e}")
        raise DatabaseError(f"Database initialization failed: {str(e)}")


async def reset_database():
    """Drop and recreate every table (development and test only)"""
    environment = os.getenv("ENVIRONMENT", "production").lower()
    if environment not in ["development", "dev", "test"]:
        raise ConfigurationError(
            "ENVIRONMENT",
            "Database reset is only allowed in development or test environments",
        )

    try:
        logger.warning("RESETTING DATABASE - ALL DATA WILL BE LOST")

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("All tables dropped")

        await init_database()
        logger.info("Database reset completed")

    except Exception as e:
        logger.error(f"Database reset failed: {e}")
        raise DatabaseError(f"Database reset failed: {str(e)}")


if __name__ == "__main__":
    import sys

    async def main():
        command = sys.argv[1] if len(sys.argv) > 1 else "init"
        if command == "init":
            await init_database()
        elif command == "reset":
            await reset_database()
        else:
            print(f"Unknown command: {command}")
            print("Available commands: init, reset")
            sys.exit(1)

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Database initialization cancelled by user")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        sys.exit(1)
