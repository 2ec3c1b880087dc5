"""
Product store: the immutable, queryable snapshot produced by a load.
"""

from catalogstats.store.product_store import ProductStore, empty_frame, records_to_frame

__all__ = ["ProductStore", "empty_frame", "records_to_frame"]
