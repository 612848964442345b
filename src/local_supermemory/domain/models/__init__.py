"""Domain models for the local memory store."""

from .memory import Memory, MemoryPage, ScoredMemory
from .profile import FactType, Profile, ProfileFact, StoreStats

__all__ = [
    "FactType",
    "Memory",
    "MemoryPage",
    "Profile",
    "ProfileFact",
    "ScoredMemory",
    "StoreStats",
]
