# Infrastructure Adapters Package
from .memory_progress import InMemoryProgressRepository

__all__ = ["InMemoryProgressRepository"]
