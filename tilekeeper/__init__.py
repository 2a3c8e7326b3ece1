"""
Offline raster tile caching: tile addressing, persistence, and coverage
projection.
"""
