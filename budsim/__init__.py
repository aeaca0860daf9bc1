"""Triangulated membrane mechanics: edge, area and bending springs, neighbour buckets, scheme loading and VTK output."""

__version__ = "0.1.0"