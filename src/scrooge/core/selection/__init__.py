"""
Transaction selection for the Scrooge system.

This package partitions a batch into independent groups and picks the
fee-maximizing mutually valid subset of each group.
"""
from scrooge.core.selection.partition import ConflictGraphPartitioner, DisjointSet, related
from scrooge.core.selection.optimizer import FeeOptimizer, SearchResult, OPTIMAL, GREEDY
