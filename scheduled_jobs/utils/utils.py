"""
Common utility functions shared across the scheduled job entry points.
"""

import logging

from data_layer import DatabaseConnectionManager

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for a job process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    # Connection pool and HTTP debug output can expose connection strings and tokens
    logging.getLogger('psycopg2').setLevel(logging.ERROR)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('apscheduler').setLevel(logging.WARNING)


def check_database_connectivity(db_manager: DatabaseConnectionManager, repo) -> bool:
    """
    Check database connectivity and that the repository's table is readable.

    Args:
        db_manager: Database connection manager
        repo: Any repository exposing count() and table_name

    Returns:
        True if database is accessible, False otherwise
    """
    try:
        if not db_manager.test_connection():
            logger.error("Database connection test failed")
            return False

        logger.info("✓ Database connection successful")

        try:
            count = repo.count()
            logger.info(f"✓ {repo.table_name.upper()} table accessible with {count} existing records")
            return True
        except Exception as e:
            logger.error(f"✗ {repo.table_name.upper()} table validation failed: {e}")
            logger.error("Please ensure the schema in data_layer/database/schema.sql has been applied")
            return False

    except Exception as e:
        logger.error(f"Database connectivity check failed: {e}")
        return False


def close_database(db_manager: DatabaseConnectionManager) -> None:
    try:
        db_manager.close_all_connections()
        logger.info("Database connections closed")
    except Exception as e:
        logger.warning(f"Error closing database connections: {e}")
