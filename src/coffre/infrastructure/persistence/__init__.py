"""
Persistence layer.
"""

from coffre.infrastructure.persistence.database import Database
from coffre.infrastructure.persistence.models import Base

__all__ = ["Database", "Base"]
