#!/usr/bin/env python3
"""
Script to initialize the database with the correct schema
"""
import logging

from sqlalchemy import inspect

from timelens.config.manager import ConfigManager
from timelens.database.connection import DatabaseManager

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def init_database():
    """Initialize the database with the correct schema"""
    config = ConfigManager()
    database_url = config.get('app.database_url')
    if database_url in ('sqlite://', 'sqlite:///:memory:'):
        logger.warning("DATABASE_URL points at an in-memory database; nothing will persist")

    logger.info("Creating database tables...")
    db_manager = DatabaseManager(database_url)

    # Verify tables were created
    inspector = inspect(db_manager.engine)
    tables = inspector.get_table_names()
    logger.info(f"Created tables: {tables}")

    for table in tables:
        columns = [col['name'] for col in inspector.get_columns(table)]
        logger.info(f"Columns in {table} table: {columns}")

    logger.info("Database initialization complete")


if __name__ == "__main__":
    init_database()
