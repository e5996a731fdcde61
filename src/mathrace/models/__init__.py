"""Data models for the race core."""

from .config import PhysicsSettings, RaceConfig, TimingSettings
from .track import TrackGeometry, TrackPoint
from .vehicle import VehicleState

__all__ = [
    "PhysicsSettings",
    "RaceConfig",
    "TimingSettings",
    "TrackGeometry",
    "TrackPoint",
    "VehicleState",
]
