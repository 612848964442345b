from .driver import Database, storage_operation, transaction

__all__ = ["Database", "storage_operation", "transaction"]
