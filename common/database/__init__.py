"""
Database module - Generic async MongoDB connection.

Provides reusable MongoDB connectivity for any project.

Usage:
    from common.database import MongoDB

    db = MongoDB()
    await db.connect(uri, database_name)
    users = db.db["users"]
"""

from common.database.mongodb import MongoDB

__all__ = [
    "MongoDB",
]
