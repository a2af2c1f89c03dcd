"""
Graph module for building relation graphs around a focus element.
"""

from .builder import GraphModelBuilder, NodeIdAllocator

__all__ = [
    'GraphModelBuilder',
    'NodeIdAllocator'
]
