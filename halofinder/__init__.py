"""Configuration, cosmology, periodic bounds, friends-of-friends grouping and spatial trees for halo finding."""

__version__ = "0.1.0"

__all__ = [
    "bounds",
    "config",
    "cosmology",
    "fast3tree",
    "fof",
    "halo_density",
    "tree_queries",
]