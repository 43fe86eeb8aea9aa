"""
User repository for database operations.
"""

import logging
from typing import Optional

from .base_repository import BaseRepository
from ..models.user import User
from ..database.connection_manager import DatabaseConnectionManager


class UserRepository(BaseRepository[User]):
    """Read access to bot users."""

    SELECT_COLUMNS = "id, account_id, platform, name, status, created_at"

    def __init__(self, db_manager: DatabaseConnectionManager):
        super().__init__(db_manager)
        self.logger = logging.getLogger(__name__)
        self.table_name = "users"

    def get_by_id(self, user_id: int) -> Optional[User]:
        """
        Retrieve a user by primary key.

        Args:
            user_id: User ID

        Returns:
            User if found, None otherwise

        Raises:
            DatabaseQueryError: If database operation fails
        """
        query = f"SELECT {self.SELECT_COLUMNS} FROM users WHERE id = %s;"
        return self._fetch_one(query, (user_id,), "get user by id", User.from_db_row)

