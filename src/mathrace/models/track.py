"""Closed track path mapping race progress to world coordinates."""

import math
from dataclasses import dataclass

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

# Fixed oval on an 800x800 canvas, start/finish at top center
DEFAULT_CONTROL_POINTS: tuple[tuple[float, float], ...] = (
    (400.0, 100.0),
    (600.0, 150.0),
    (700.0, 400.0),
    (600.0, 650.0),
    (400.0, 700.0),
    (200.0, 650.0),
    (100.0, 400.0),
    (200.0, 150.0),
)


@dataclass(frozen=True)
class TrackPoint:
    """World position and heading (radians, atan2 of the path tangent)."""

    x: float
    y: float
    heading: float


class TrackGeometry(BaseModel):
    """Closed Catmull-Rom spline through fixed control points.

    The curve is sampled once at construction and parameterised by arc
    length, so ``t`` is the fraction of the track length travelled.
    """

    model_config = ConfigDict(frozen=True)

    control_points: tuple[tuple[float, float], ...] = Field(
        default=DEFAULT_CONTROL_POINTS,
        min_length=3,
        description="Spline control points, visited in order and closed back to the first",
    )
    samples_per_segment: int = Field(
        default=64,
        ge=2,
        description="Polyline samples between consecutive control points",
    )

    _points: np.ndarray = PrivateAttr()
    _cumulative: np.ndarray = PrivateAttr()

    def model_post_init(self, __context) -> None:
        points = self._sample_spline()
        segment_lengths = np.hypot(*np.diff(points, axis=0).T)
        self._points = points
        self._cumulative = np.concatenate(([0.0], np.cumsum(segment_lengths)))

    @property
    def length(self) -> float:
        """Total path length in world units."""
        return float(self._cumulative[-1])

    def position_at(self, t: float) -> TrackPoint:
        """Convert track progress to world position and heading.

        Args:
            t: Progress along the track in [0, 1), 0 = start/finish line

        Returns:
            TrackPoint on the curve
        """
        target = min(max(t, 0.0), 1.0) * self.length
        idx = int(np.searchsorted(self._cumulative, target, side="right"))
        idx = min(max(idx, 1), len(self._points) - 1)

        start = self._points[idx - 1]
        end = self._points[idx]
        seg_start = self._cumulative[idx - 1]
        seg_length = self._cumulative[idx] - seg_start
        frac = (target - seg_start) / seg_length if seg_length > 0 else 0.0

        x, y = start + (end - start) * frac
        dx, dy = end - start
        return TrackPoint(x=float(x), y=float(y), heading=math.atan2(dy, dx))

    def _sample_spline(self) -> np.ndarray:
        """Sample the closed uniform Catmull-Rom spline, first point repeated at the end."""
        ctrl = np.asarray(self.control_points, dtype=float)
        count = len(ctrl)
        u = np.linspace(0.0, 1.0, self.samples_per_segment, endpoint=False)[:, None]
        u2 = u * u
        u3 = u2 * u

        chunks = []
        for i in range(count):
            p0 = ctrl[(i - 1) % count]
            p1 = ctrl[i]
            p2 = ctrl[(i + 1) % count]
            p3 = ctrl[(i + 2) % count]
            chunks.append(
                0.5
                * (
                    2.0 * p1
                    + (p2 - p0) * u
                    + (2.0 * p0 - 5.0 * p1 + 4.0 * p2 - p3) * u2
                    + (3.0 * p1 - p0 - 3.0 * p2 + p3) * u3
                )
            )
        chunks.append(ctrl[:1])
        return np.vstack(chunks)
