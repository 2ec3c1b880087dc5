"""
Catalogstats: Product Catalog Analytics Pipeline.

This package loads a product catalog from delimited files into an
immutable store, computes grouped counts, shares and rankings, and
formats the results for reporting.
"""

from importlib.metadata import version

__version__ = version("catalogstats")

__all__ = ["__version__"]
