"""Service layer package.

Exports the report services consumed by the request handlers.
"""

from .fitness_service import FitnessService, FitnessServiceConfig
from .listening_service import ListeningService, ListeningServiceConfig

__all__ = [
    "FitnessService",
    "FitnessServiceConfig",
    "ListeningService",
    "ListeningServiceConfig",
]
