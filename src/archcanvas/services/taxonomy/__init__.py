"""
Resource Taxonomy for ArchCanvas.

Static catalog of resource types per provider, each with a category and a
typed default configuration template.
"""

from .catalog import DEFAULT_CATALOG, ResourceTaxonomy, get_taxonomy
from .models import Provider, ResourceCategory, ResourceTemplate, ResourceType

__all__ = [
    "DEFAULT_CATALOG",
    "ResourceTaxonomy",
    "get_taxonomy",
    "Provider",
    "ResourceCategory",
    "ResourceTemplate",
    "ResourceType",
]
