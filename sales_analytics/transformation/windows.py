"""
Windowed Analysis

Ranking, cumulative, performance-vs-average, year-over-year and
part-to-whole transforms over already aggregated frames. Each one sorts
once and evaluates partition aggregates with window expressions; none of
them modify their input.
"""

from typing import List, Optional, Sequence, Union

import polars as pl
import structlog

from sales_analytics.transformation.derivations import round_half_away

logger = structlog.get_logger(__name__)

Columns = Union[str, Sequence[str]]

ABOVE_AVERAGE = "Above Average"
BELOW_AVERAGE = "Below Average"
AVERAGE = "Average"

INCREASE = "Increase"
DECREASE = "Decrease"
NO_CHANGE = "No Change"


def _as_list(columns: Optional[Columns]) -> List[str]:
    if columns is None:
        return []
    if isinstance(columns, str):
        return [columns]
    return list(columns)


def rank_by(
    df: pl.DataFrame,
    measure: str,
    top_n: Optional[int] = None,
    ascending: bool = False,
    with_ties: bool = True,
    rank_column: str = "rank",
) -> pl.DataFrame:
    """
    Assign competition ranks on ``measure`` and keep the first ``top_n``.

    Equal values share a rank and the next distinct value gets its 1-based
    position (1, 2, 2, 4). With ``with_ties`` every row ranked at or above
    ``top_n`` is kept, otherwise exactly ``top_n`` rows are returned.
    """
    ranked = df.with_columns(
        pl.col(measure)
        .rank(method="min", descending=not ascending)
        .cast(pl.Int64)
        .alias(rank_column)
    ).sort(rank_column, nulls_last=True, maintain_order=True)

    if top_n is None:
        return ranked
    if with_ties:
        return ranked.filter(pl.col(rank_column) <= top_n)
    return ranked.head(top_n)


def running_totals(
    df: pl.DataFrame,
    order_by: str,
    measure: str,
    average_of: Optional[str] = None,
    partition_by: Optional[Columns] = None,
    total_column: Optional[str] = None,
    average_column: Optional[str] = None,
) -> pl.DataFrame:
    """
    Prefix sum of ``measure`` and prefix mean of ``average_of``.

    Rows are sorted by ``order_by`` (within partitions, if given) and folded
    in a single cumulative pass.
    """
    partitions = _as_list(partition_by)
    total_column = total_column or f"running_total_{measure}"
    df = df.sort(partitions + [order_by])

    def over(expr: pl.Expr) -> pl.Expr:
        return expr.over(partitions) if partitions else expr

    columns = [over(pl.col(measure).fill_null(0).cum_sum()).alias(total_column)]
    if average_of is not None:
        average_column = average_column or f"moving_average_{average_of}"
        cumulative_sum = over(pl.col(average_of).cast(pl.Float64).fill_null(0).cum_sum())
        cumulative_count = over(pl.col(average_of).cum_count())
        columns.append(
            pl.when(cumulative_count > 0)
            .then(cumulative_sum / cumulative_count)
            .otherwise(None)
            .alias(average_column)
        )

    return df.with_columns(columns)


def performance_vs_average(
    df: pl.DataFrame,
    partition_by: Columns,
    measure: str,
    order_by: Optional[Columns] = None,
) -> pl.DataFrame:
    """
    Compare each row with the mean of its partition.

    Adds ``avg_<measure>``, ``variance_from_average`` and a
    ``performance_vs_average`` label decided by strict comparison.
    """
    partitions = _as_list(partition_by)
    mean = pl.col(measure).mean().over(partitions)
    df = df.with_columns(mean.alias(f"avg_{measure}"))
    df = df.with_columns([
        (pl.col(measure) - pl.col(f"avg_{measure}")).alias("variance_from_average"),
        pl.when(pl.col(measure) > pl.col(f"avg_{measure}")).then(pl.lit(ABOVE_AVERAGE))
        .when(pl.col(measure) < pl.col(f"avg_{measure}")).then(pl.lit(BELOW_AVERAGE))
        .otherwise(pl.lit(AVERAGE))
        .alias("performance_vs_average"),
    ])
    if order_by is not None:
        df = df.sort(partitions + _as_list(order_by))
    return df


def year_over_year(
    df: pl.DataFrame,
    partition_by: Columns,
    order_by: str,
    measure: str,
    default: Union[int, float] = 0,
    previous_column: Optional[str] = None,
) -> pl.DataFrame:
    """
    Lag ``measure`` by one bucket within each partition.

    The first bucket of a partition has no predecessor and takes
    ``default``. Adds the previous value, the change and an
    Increase / Decrease / No Change label.
    """
    partitions = _as_list(partition_by)
    previous_column = previous_column or f"previous_{measure}"
    df = df.sort(partitions + [order_by])
    df = df.with_columns(
        pl.col(measure).shift(1, fill_value=default).over(partitions).alias(previous_column)
    )
    return df.with_columns([
        (pl.col(measure) - pl.col(previous_column)).alias("year_over_year_change"),
        pl.when(pl.col(measure) > pl.col(previous_column)).then(pl.lit(INCREASE))
        .when(pl.col(measure) < pl.col(previous_column)).then(pl.lit(DECREASE))
        .otherwise(pl.lit(NO_CHANGE))
        .alias("year_over_year_trend"),
    ])


def part_to_whole(
    df: pl.DataFrame,
    measure: str,
    total_column: Optional[str] = None,
    percentage_column: str = "percentage_of_total",
    decimals: int = 2,
) -> pl.DataFrame:
    """
    Share of each row in the grand total of ``measure``.

    The grand total is computed once over the frame. Percentages are
    rounded half away from zero; an all-zero total yields 0.0 shares.
    """
    total_column = total_column or f"overall_{measure}"
    grand_total = df[measure].sum() if df.height else 0

    if not grand_total:
        logger.warning("Part-to-whole over zero total", measure=measure, rows=df.height)
        share = pl.lit(0.0)
    else:
        share = round_half_away(pl.col(measure).cast(pl.Float64) / grand_total * 100, decimals)

    return df.with_columns([
        pl.lit(grand_total).alias(total_column),
        share.alias(percentage_column),
    ]).sort(measure, descending=True, nulls_last=True, maintain_order=True)
