"""Vehicle physics on the normalized progress scale."""

import logging
import math
from dataclasses import dataclass

import numpy as np

from .config import PhysicsSettings

logger = logging.getLogger(__name__)


@dataclass
class VehicleState:
    """Position/velocity integrator, independent of the track shape.

    Velocity is in progress per second (0.2 = 20% of a lap per second), so
    position advances by ``velocity * dt`` with no track length involved.
    Acceleration is a per-tick request: boosts accumulate into it and
    ``update`` consumes and clears it.
    """

    max_speed: float = 0.3
    friction: float = 0.985
    base_acceleration: float = 0.05
    position: float = 0.0
    velocity: float = 0.0
    acceleration: float = 0.0

    @classmethod
    def from_settings(cls, settings: PhysicsSettings) -> "VehicleState":
        """Create a stationary vehicle at the start line."""
        return cls(
            max_speed=settings.max_speed,
            friction=settings.friction,
            base_acceleration=settings.base_acceleration,
        )

    def apply_boost(self, multiplier: float) -> None:
        """Request extra acceleration for the next update.

        Args:
            multiplier: Boost strength, normally 0-1 from the problem timer
        """
        if not math.isfinite(multiplier):
            logger.warning("Ignoring non-finite boost multiplier %r", multiplier)
            return
        self.acceleration += self.base_acceleration * multiplier

    def update(self, dt: float) -> bool:
        """Advance the simulation by one tick.

        Args:
            dt: Elapsed time in seconds

        Returns:
            True when the start/finish line was crossed. A frame long enough
            to cover several laps still counts as a single crossing.
        """
        if not math.isfinite(dt) or dt < 0:
            dt = 0.0

        velocity = (self.velocity + self.acceleration) * self.friction
        # NaN stops the car, +inf pins it at max speed
        velocity = np.nan_to_num(velocity, nan=0.0, posinf=self.max_speed, neginf=0.0)
        self.velocity = float(np.clip(velocity, 0.0, self.max_speed))

        self.position += self.velocity * dt
        crossed = self.position >= 1.0
        if crossed:
            self.position %= 1.0

        self.acceleration = 0.0
        return crossed
