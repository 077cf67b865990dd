from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import logging
from typing import Union

import numpy as np

from tabplot.model import AxisConfig, AxisName, ChartData


LOGGER = logging.getLogger(__name__)

DEFAULT_DOMAIN = (0.0, 100.0)
PADDING_RATIO = 0.05
DEGENERATE_HALF_WIDTH = 0.5
FLOAT_MAX = float(np.finfo(np.float64).max)

Numeric = Union[float, np.ndarray]


@dataclass(frozen=True)
class AxisScale:
    """Linear map between a data domain and a pixel extent.

    Arithmetic runs on half-values so domains spanning most of the float range
    (e.g. [-1e308, 1e308]) stay finite.
    """

    axis: AxisName
    min: float
    max: float
    extent: float = 1.0

    @property
    def half_width(self) -> float:
        return self.max * 0.5 - self.min * 0.5

    @property
    def width(self) -> float:
        # Saturates instead of overflowing to inf.
        return float(min(self.half_width * 2.0, FLOAT_MAX))

    @property
    def range(self) -> tuple[float, float]:
        if self.axis == "y":
            return (self.extent, 0.0)
        return (0.0, self.extent)

    def to_range(self, value: Numeric) -> Numeric:
        r0, r1 = self.range
        t = (np.asarray(value, dtype=np.float64) * 0.5 - self.min * 0.5) / self.half_width
        out = r0 + t * (r1 - r0)
        return float(out) if np.ndim(out) == 0 else out

    def to_domain(self, coord: Numeric) -> Numeric:
        r0, r1 = self.range
        t = (np.asarray(coord, dtype=np.float64) - r0) / (r1 - r0)
        out = (self.min * 0.5 + t * self.half_width) * 2.0
        return float(out) if np.ndim(out) == 0 else out

    def ticks(self, target: int = 6) -> np.ndarray:
        if not (np.isfinite(self.min) and np.isfinite(self.max) and self.half_width > 0):
            return np.asarray([], dtype=np.float64)
        target = max(2, target)
        if self.width < FLOAT_MAX / 16.0:
            ticks = generate_nice_ticks(self.min, self.max, target)
        else:
            # Nice-number rounding can grow the span up to 10x; work at 1/16 scale.
            with np.errstate(over="ignore"):
                ticks = generate_nice_ticks(self.min / 16.0, self.max / 16.0, target) * 16.0
        return ticks_within_range(ticks[np.isfinite(ticks)], vmin=self.min, vmax=self.max)


def data_extent(chart_data: ChartData, axis: AxisName) -> tuple[float, float] | None:
    if chart_data.is_empty:
        return None
    lows: list[float] = []
    highs: list[float] = []
    for spec in chart_data:
        values = spec.x if axis == "x" else spec.y
        # x is sorted so its extrema sit at the ends.
        if axis == "x":
            lows.append(float(values[0]))
            highs.append(float(values[-1]))
        else:
            lows.append(float(np.min(values)))
            highs.append(float(np.max(values)))
    return (min(lows), max(highs))


def auto_domain(chart_data: ChartData, axis: AxisName) -> tuple[float, float]:
    extent = data_extent(chart_data, axis)
    if extent is None:
        return DEFAULT_DOMAIN
    vmin, vmax = extent
    if vmin == vmax:
        return (vmin - DEGENERATE_HALF_WIDTH, vmax + DEGENERATE_HALF_WIDTH)
    pad = (vmax * 0.5 - vmin * 0.5) * (2.0 * PADDING_RATIO)
    lo = max(vmin - pad, -FLOAT_MAX)
    hi = min(vmax + pad, FLOAT_MAX)
    if not hi > lo:
        # Spans below float resolution after padding.
        return (vmin - DEGENERATE_HALF_WIDTH, vmax + DEGENERATE_HALF_WIDTH)
    return (lo, hi)


def resolve_axis(
    chart_data: ChartData,
    axis_config: AxisConfig,
    axis: AxisName,
    *,
    extent: float = 1.0,
) -> AxisScale:
    if axis not in ("x", "y"):
        raise ValueError("axis must be 'x' or 'y'")
    if axis_config.has_manual_bounds:
        lo = float(axis_config.min)  # type: ignore[arg-type]
        hi = float(axis_config.max)  # type: ignore[arg-type]
        if np.isfinite(lo) and np.isfinite(hi) and lo < hi:
            return AxisScale(axis=axis, min=lo, max=hi, extent=float(extent))
        LOGGER.warning("%s axis manual bounds [%s, %s] are not increasing; using auto-scale", axis, lo, hi)
    lo, hi = auto_domain(chart_data, axis)
    return AxisScale(axis=axis, min=lo, max=hi, extent=float(extent))


def generate_nice_ticks(vmin: float, vmax: float, target: int, preferred_step: float | None = None) -> np.ndarray:
    if target <= 0:
        raise ValueError("target must be > 0")
    if vmin == vmax:
        return np.asarray([vmin], dtype=np.float64)

    span = _nice_number(vmax - vmin, round_result=False)
    step = _nice_number(span / max(target - 1, 1), round_result=True)
    if preferred_step is not None and np.isfinite(preferred_step) and preferred_step > 0:
        est_ticks = int(np.ceil((vmax - vmin) / preferred_step)) + 1
        if preferred_step < step and est_ticks <= max(target * 2, 12):
            step = preferred_step
    tick_min = np.floor(vmin / step) * step
    tick_max = np.ceil(vmax / step) * step

    ticks = np.arange(tick_min, tick_max + 0.5 * step, step, dtype=np.float64)
    # Normalize floating-point drift so values like -4.44e-16 become 0.
    ticks = np.rint(ticks / step) * step
    ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=step * 1e-9)] = 0.0
    return ticks


def ticks_within_range(ticks: np.ndarray, *, vmin: float, vmax: float) -> np.ndarray:
    if ticks.size == 0:
        return ticks
    step = float(abs(ticks[1] - ticks[0])) if ticks.size > 1 else max(1e-12, abs(vmax - vmin))
    eps = max(1e-12, step * 1e-6)
    return ticks[(ticks >= (vmin - eps)) & (ticks <= (vmax + eps))]


def format_tick(value: float, *, step: float | None = None) -> str:
    if not np.isfinite(value):
        return str(value)
    if step is not None and np.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    abs_v = abs(value)
    decimals = _decimals_from_step(step) if step is not None else 6
    if abs_v != 0 and (abs_v >= 1e6 or (step is not None and abs(step) < 1e-4) or abs_v < 1e-6):
        return f"{value:.4e}"

    d = Decimal(str(value))
    quant = Decimal("1").scaleb(-decimals)
    try:
        q = d.quantize(quant)
    except InvalidOperation:
        q = d
    out = format(q, "f")
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_ticks_for_axis(ticks: np.ndarray) -> list[str]:
    if ticks.size == 0:
        return []
    if ticks.size == 1:
        return [format_tick(float(ticks[0]))]
    step = float(abs(ticks[1] - ticks[0]))
    return [format_tick(float(v), step=step) for v in ticks]


def _nice_number(value: float, *, round_result: bool) -> float:
    exp = np.floor(np.log10(value))
    frac = value / (10**exp)

    if round_result:
        if frac < 1.5:
            nice_frac = 1.0
        elif frac < 3.0:
            nice_frac = 2.0
        elif frac < 7.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0
    else:
        if frac <= 1.0:
            nice_frac = 1.0
        elif frac <= 2.0:
            nice_frac = 2.0
        elif frac <= 5.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0

    return float(nice_frac * (10**exp))


def _decimals_from_step(step: float) -> int:
    if step <= 0 or not np.isfinite(step):
        return 6
    d = Decimal(str(step)).normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(12, decimals)
