"""Slab allocator model, size-class arena, red-black tree, linked list, hashing and logging."""

__version__ = "0.1.0"
__all__ = ["arena", "bits", "dlist", "hashing", "log", "rbt", "slab", "slabpage"]