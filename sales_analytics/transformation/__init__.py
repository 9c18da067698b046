"""
Data Transformation Module
"""
from .aggregations import AggKind, Measure, aggregate, aggregate_all
from .joins import flatten_sales, find_orphan_keys
from .windows import (
    rank_by,
    running_totals,
    performance_vs_average,
    year_over_year,
    part_to_whole,
)

__all__ = [
    "AggKind",
    "Measure",
    "aggregate",
    "aggregate_all",
    "flatten_sales",
    "find_orphan_keys",
    "rank_by",
    "running_totals",
    "performance_vs_average",
    "year_over_year",
    "part_to_whole",
]
