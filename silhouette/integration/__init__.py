"""Silhouette Integration Layer.

- Preloader: collects preload keys and hands them to an ORM loader
- serializers: JSON, YAML and XML encoding of represented data
"""

from .preloader import Preloader, get_default_loader, set_default_loader
from .serializers import to_json, to_xml, to_yaml

__all__ = [
    "Preloader",
    "get_default_loader",
    "set_default_loader",
    "to_json",
    "to_xml",
    "to_yaml",
]
