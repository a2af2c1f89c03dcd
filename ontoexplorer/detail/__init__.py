"""
Element detail loading and context highlighting.
"""

from .contexts import HighlightedContext, Segment, highlight_context, highlight_contexts
from .coordinator import DetailCoordinator

__all__ = [
    'DetailCoordinator',
    'HighlightedContext',
    'Segment',
    'highlight_context',
    'highlight_contexts'
]
