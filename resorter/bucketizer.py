"""
Bucket assignment for rated items.

Items are ordered by rating ascending, so bucket 0 holds the lowest rated items.
Two modes are available:

- running counter (default): each bucket takes ``len(items) // bucket_count``
  items plus one before the counter advances. Boundaries are approximate and,
  for small sets, the highest bucket number can differ from ``bucket_count - 1``.
- exact: bucket = floor(rank * bucket_count / len(items)), i.e. true quantiles.
"""

import numpy as np

from .models import RatedItem

DEFAULT_BUCKET_COUNT = 10


def sort_by_rating(items: list[RatedItem]) -> None:
    """Sort items in place, lowest rating first."""
    items.sort(key=lambda item: item.rating)


def assign_buckets(
    items: list[RatedItem],
    bucket_count: int = DEFAULT_BUCKET_COUNT,
    exact: bool = False,
) -> None:
    """
    Sort items by rating and assign every item its bucket.

    Args:
        items: Working set, reordered in place
        bucket_count: Number of buckets to split into
        exact: Use exact quantile boundaries instead of the running counter
    """
    if bucket_count < 1:
        raise ValueError(f"bucket_count must be positive, got {bucket_count}")

    sort_by_rating(items)
    if exact:
        _assign_exact(items, bucket_count)
    else:
        _assign_running_counter(items, bucket_count)


def _assign_running_counter(items: list[RatedItem], bucket_count: int) -> None:
    items_per_bucket = len(items) // bucket_count
    current_bucket = 0
    items_in_current_bucket = 0
    for item in items:
        item.bucket = current_bucket
        items_in_current_bucket += 1
        if items_in_current_bucket > items_per_bucket:
            items_in_current_bucket = 0
            current_bucket += 1


def _assign_exact(items: list[RatedItem], bucket_count: int) -> None:
    if not items:
        return
    buckets = (np.arange(len(items)) * bucket_count) // len(items)
    for item, bucket in zip(items, buckets):
        item.bucket = int(bucket)
