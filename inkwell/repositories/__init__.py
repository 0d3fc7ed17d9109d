"""
Repository implementations.

MongoDB for deployments, in-process memory for local development and tests.
"""

from inkwell.repositories.memory import InMemoryAuthRepository, InMemoryUserRepository
from inkwell.repositories.mongo import MongoAuthRepository, MongoUserRepository

__all__ = [
    "InMemoryAuthRepository",
    "InMemoryUserRepository",
    "MongoAuthRepository",
    "MongoUserRepository",
]
