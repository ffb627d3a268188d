"""
Spatial data structures for efficient force calculations.

Provides the quadtree used for Barnes-Hut O(n log n) force approximation
and for neighbour queries during collision resolution.
"""

from .quadtree import Body, QuadTree, QuadTreeNode

__all__ = ["Body", "QuadTree", "QuadTreeNode"]
