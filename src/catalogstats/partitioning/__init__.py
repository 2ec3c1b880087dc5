"""
Partition planner for range-bucketed views of the product store.
"""

from catalogstats.partitioning.planner import (
    BucketRange,
    PartitionedView,
    build_partitioned_view,
)

__all__ = ["BucketRange", "PartitionedView", "build_partitioned_view"]
