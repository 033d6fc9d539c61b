"""
formlayout

Materializes multi-page form layouts against instance data into context
trees consumed by expression evaluation, validation and PDF rendering.
"""

__version__ = "0.1.0"
