from .base import ApplicationError, ErrorCode, ErrorLevel
from .errors import StorageError, ValidationError
