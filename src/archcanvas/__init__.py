"""
ArchCanvas - visual editor core for cloud architecture diagrams.
"""

__version__ = "1.0.0"
__author__ = "ArchCanvas Team"

# Re-export main components for easy access
from .shared.config.settings import get_settings
from .shared.models.graph import Edge, GraphSnapshot, Node
from .shared.exceptions import ArchCanvasError, ConfigurationError
from .services.editor import InteractionController
from .services.persistence import PersistenceManager

__all__ = [
    "get_settings",
    "Edge",
    "GraphSnapshot",
    "Node",
    "ArchCanvasError",
    "ConfigurationError",
    "InteractionController",
    "PersistenceManager",
]
