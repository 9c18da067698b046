"""
Aggregation Engine

Groups a flattened frame by arbitrary keys and folds each group into a
declared set of measures.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Union

import polars as pl


class AggKind(str, Enum):
    """Supported accumulators"""
    SUM = "sum"
    COUNT = "count"
    COUNT_DISTINCT = "count_distinct"
    MIN = "min"
    MAX = "max"
    MEAN = "mean"
    MEAN_RATIO = "mean_ratio"
    FIRST = "first"


@dataclass(frozen=True)
class Measure:
    """
    One output column of an aggregation.

    ``column`` is the input field; ``denominator`` is only used by
    MEAN_RATIO, which averages the per-row ratio column/denominator and
    skips rows where the denominator is zero or null.
    """
    name: str
    kind: AggKind
    column: Optional[str] = None
    denominator: Optional[str] = None

    def to_expr(self) -> pl.Expr:
        if self.kind == AggKind.COUNT:
            expr = pl.len() if self.column is None else pl.col(self.column).count()
        elif self.kind == AggKind.COUNT_DISTINCT:
            # Nulls are not a distinct value
            expr = pl.col(self.column).drop_nulls().n_unique()
        elif self.kind == AggKind.SUM:
            expr = pl.col(self.column).sum()
        elif self.kind == AggKind.MIN:
            expr = pl.col(self.column).min()
        elif self.kind == AggKind.MAX:
            expr = pl.col(self.column).max()
        elif self.kind == AggKind.MEAN:
            expr = pl.col(self.column).mean()
        elif self.kind == AggKind.MEAN_RATIO:
            denominator = pl.when(pl.col(self.denominator) != 0).then(pl.col(self.denominator))
            expr = (pl.col(self.column).cast(pl.Float64) / denominator).mean()
        elif self.kind == AggKind.FIRST:
            expr = pl.col(self.column).first()
        else:
            raise ValueError(f"Unsupported aggregation: {self.kind}")
        return expr.alias(self.name)


def total(column: str, name: Optional[str] = None) -> Measure:
    return Measure(name or f"total_{column}", AggKind.SUM, column)


def count_distinct(column: str, name: str) -> Measure:
    return Measure(name, AggKind.COUNT_DISTINCT, column)


def earliest(column: str, name: str) -> Measure:
    return Measure(name, AggKind.MIN, column)


def latest(column: str, name: str) -> Measure:
    return Measure(name, AggKind.MAX, column)


def average(column: str, name: str) -> Measure:
    return Measure(name, AggKind.MEAN, column)


def average_ratio(numerator: str, denominator: str, name: str) -> Measure:
    return Measure(name, AggKind.MEAN_RATIO, numerator, denominator)


def carry(column: str) -> Measure:
    """Pass a group-constant attribute through the aggregation"""
    return Measure(column, AggKind.FIRST, column)


def aggregate(
    df: pl.DataFrame,
    by: Union[str, Sequence[Union[str, pl.Expr]]],
    measures: List[Measure],
    maintain_order: bool = False,
) -> pl.DataFrame:
    """
    Group df by ``by`` and compute every measure per group.

    Group order is unspecified unless ``maintain_order`` is set, in which
    case groups appear in order of first occurrence.
    """
    if isinstance(by, (str, pl.Expr)):
        by = [by]
    return df.group_by(list(by), maintain_order=maintain_order).agg(
        [measure.to_expr() for measure in measures]
    )


def aggregate_all(df: pl.DataFrame, measures: List[Measure]) -> pl.DataFrame:
    """Fold the whole frame into a single row"""
    return df.select([measure.to_expr() for measure in measures])
