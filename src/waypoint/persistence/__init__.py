"""
Persistence layer components: the data context, mappings and SQL parameters.
"""

from .context import DataContext
from .mapping import MappingConfiguration, TableMapping, apply_mappings
from .parameters import SqlParameter

__all__ = ["DataContext", "MappingConfiguration", "SqlParameter", "TableMapping", "apply_mappings"]
