from .memory import MemoryRepository
from .profile import ProfileRepository

__all__ = ["MemoryRepository", "ProfileRepository"]
