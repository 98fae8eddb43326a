"""Statistical classification of a numeric attribute into class bounds.

`classify` only returns the bounds. Callers keep their sample in feature
order and look up each value with `class_index`, so sorting inside the
algorithms never leaks into feature identity.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Sequence

from .errors import InvalidInputError, LookupFailureError

_LOGGER = logging.getLogger("geojson2svg.classification")

# Near round-half-up bias of the quantile index rule; kept exact for
# output compatibility with existing maps.
QUANTILE_INDEX_BIAS = 0.49


class ClassificationMethod(str, Enum):
    JENKS = "jenks"
    QUANTILES = "quantiles"
    EQUAL_INTERVAL = "equal_interval"
    HEAD_TAIL = "headtail"

    @classmethod
    def parse(cls, name: str) -> ClassificationMethod:
        """Parse a configured method name; unknown names raise ValueError."""
        key = " ".join(str(name).strip().casefold().split())
        method = _METHOD_ALIASES.get(key)
        if method is None:
            allowed = ", ".join(sorted(_METHOD_ALIASES))
            raise ValueError(f"Unknown classification method '{name}'. Expected one of: {allowed}")
        return method

    @property
    def has_fixed_class_count(self) -> bool:
        return self is not ClassificationMethod.HEAD_TAIL


_METHOD_ALIASES = {
    "jenks": ClassificationMethod.JENKS,
    "quantiles": ClassificationMethod.QUANTILES,
    "quantile": ClassificationMethod.QUANTILES,
    "equal interval": ClassificationMethod.EQUAL_INTERVAL,
    "equal_interval": ClassificationMethod.EQUAL_INTERVAL,
    "headtail": ClassificationMethod.HEAD_TAIL,
}


def classify(sample: Sequence[float], nb_class: int, method: ClassificationMethod) -> list[float]:
    """Compute class bounds for `sample`.

    Returns `nb_class + 1` non-decreasing bounds (head/tail breaks return a
    data-driven number) with the first bound at the sample minimum and the
    last at the sample maximum.
    """
    values = _validated_sample(sample)
    if isinstance(nb_class, bool) or not isinstance(nb_class, int) or nb_class < 1:
        raise InvalidInputError(f"Class count must be a positive integer, got {nb_class!r}")

    if method is ClassificationMethod.EQUAL_INTERVAL:
        bounds = equal_interval_breaks(values, nb_class)
    elif method is ClassificationMethod.QUANTILES:
        bounds = quantile_breaks(values, nb_class)
    elif method is ClassificationMethod.JENKS:
        bounds = jenks_breaks(values, nb_class)
    elif method is ClassificationMethod.HEAD_TAIL:
        bounds = head_tail_breaks(values)
    else:  # pragma: no cover
        raise InvalidInputError(f"Unsupported classification method: {method!r}")

    _LOGGER.debug(
        "Classified %d values with %s into %d classes: %s",
        len(values),
        method.value,
        len(bounds) - 1,
        bounds,
    )
    return bounds


def equal_interval_breaks(sample: Sequence[float], nb_class: int) -> list[float]:
    ordered = sorted(sample)
    low, high = ordered[0], ordered[-1]
    interval = (high - low) / nb_class
    bounds = [low + idx * interval for idx in range(nb_class)]
    # Pin the last bound to the maximum to absorb float drift.
    bounds.append(high)
    return bounds


def quantile_breaks(sample: Sequence[float], nb_class: int) -> list[float]:
    ordered = sorted(sample)
    n = len(ordered)
    if nb_class > n:
        raise InvalidInputError(
            f"Quantiles need at least as many values as classes ({n} values, {nb_class} classes)"
        )
    step = n / nb_class
    bounds = [ordered[0]]
    for idx in range(1, nb_class):
        position = math.floor(idx * step + QUANTILE_INDEX_BIAS)
        bounds.append(ordered[position - 1])
    bounds.append(ordered[-1])
    return bounds


def jenks_breaks(sample: Sequence[float], nb_class: int) -> list[float]:
    """Fisher-Jenks natural breaks; each inner bound is the maximum of a group."""
    data = sorted(sample)
    n = len(data)
    if nb_class > n:
        raise InvalidInputError(
            f"Jenks needs at least as many values as classes ({n} values, {nb_class} classes)"
        )

    # 1-based tables: lower_limits[l][j] is the first index of the last class
    # in the best split of data[:l] into j classes.
    lower_limits = [[0] * (nb_class + 1) for _ in range(n + 1)]
    variances = [[0.0] * (nb_class + 1) for _ in range(n + 1)]
    for j in range(1, nb_class + 1):
        lower_limits[1][j] = 1
        for l in range(2, n + 1):
            variances[l][j] = math.inf

    for l in range(2, n + 1):
        total = 0.0
        total_sq = 0.0
        count = 0
        variance = 0.0
        for m in range(1, l + 1):
            lower = l - m + 1
            value = data[lower - 1]
            count += 1
            total += value
            total_sq += value * value
            variance = total_sq - (total * total) / count
            previous = lower - 1
            if previous == 0:
                continue
            for j in range(2, nb_class + 1):
                candidate = variance + variances[previous][j - 1]
                if variances[l][j] >= candidate:
                    lower_limits[l][j] = lower
                    variances[l][j] = candidate
        lower_limits[l][1] = 1
        variances[l][1] = variance

    bounds = [0.0] * (nb_class + 1)
    bounds[0] = data[0]
    bounds[nb_class] = data[-1]
    k = n
    for j in range(nb_class, 1, -1):
        lower = lower_limits[k][j]
        bounds[j - 1] = data[lower - 2]
        k = lower - 1
    return bounds


def head_tail_breaks(sample: Sequence[float]) -> list[float]:
    """Recursive above-mean partition for heavy-tailed data."""
    working = sorted(sample)
    maximum = working[-1]
    bounds = [working[0]]
    while True:
        # The float mean of tied values can round just below them.
        mean = min(max(sum(working) / len(working), working[0]), working[-1])
        bounds.append(mean)
        head = [value for value in working if value > mean]
        if len(head) < 2 or len(head) == len(working):
            break
        working = head
    if bounds[-1] < maximum:
        bounds.append(maximum)
    return bounds


def class_index(bounds: Sequence[float], value: float) -> int | None:
    """Return the class of `value`, or None when it exceeds the last bound."""
    for idx in range(len(bounds) - 1):
        if value <= bounds[idx + 1]:
            return idx
    return None


def class_index_or_raise(bounds: Sequence[float], value: float) -> int:
    idx = class_index(bounds, value)
    if idx is None:
        raise LookupFailureError(
            f"Value {value!r} is outside class bounds [{bounds[0]!r}, {bounds[-1]!r}]"
        )
    return idx


def class_count_histogram(bounds: Sequence[float], sample: Sequence[float]) -> list[int]:
    """Number of sample values falling in each class."""
    counts = [0] * (len(bounds) - 1)
    for value in sample:
        counts[class_index_or_raise(bounds, value)] += 1
    return counts


def default_class_count(n_features: int) -> int:
    """Sturges' rule, used when a layer does not configure a class count."""
    if n_features < 1:
        raise InvalidInputError("Cannot derive a class count from an empty sample")
    return max(1, math.floor(1.0 + 3.3 * math.log10(n_features)))


def _validated_sample(sample: Sequence[float]) -> list[float]:
    if len(sample) == 0:
        raise InvalidInputError("Cannot classify an empty sample")
    values: list[float] = []
    for idx, value in enumerate(sample):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidInputError(f"Sample value at index {idx} is not numeric: {value!r}")
        if not math.isfinite(value):
            raise InvalidInputError(f"Sample value at index {idx} is not finite: {value!r}")
        values.append(float(value))
    return values
