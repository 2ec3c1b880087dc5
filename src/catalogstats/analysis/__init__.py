"""
Catalog analysis suite: the fixed sequence of reporting queries.
"""

from catalogstats.analysis.suite import Query, QueryResult, catalog_queries, run_suite

__all__ = ["Query", "QueryResult", "catalog_queries", "run_suite"]
