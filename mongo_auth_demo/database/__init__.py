"""
Database module - client lifecycle and demo operations.
"""
from mongo_auth_demo.database.connections import create_client, open_client
from mongo_auth_demo.database.operations import DatabaseOperations

__all__ = [
    "create_client",
    "open_client",
    "DatabaseOperations",
]
