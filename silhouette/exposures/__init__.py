"""Silhouette Exposures.

- Exposure: one declared field, its kind fixed when built
- NestedExposures: ordered children of a nesting exposure
- OutputBuilder: assembles the output of a nesting exposure
"""

from .base import Exposure, build_exposure, compile_conditions, to_serializable
from .nested import NestedExposures
from .output import OutputBuilder

__all__ = [
    "Exposure",
    "build_exposure",
    "compile_conditions",
    "to_serializable",
    "NestedExposures",
    "OutputBuilder",
]
