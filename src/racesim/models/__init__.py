"""Data models for race simulation."""

from .car import CarState, DrivingStyle
from .driver import Driver, DriverSkills, MentalState
from .track import SectionType, Track, TrackSection, TrackType

__all__ = [
    "CarState",
    "Driver",
    "DriverSkills",
    "DrivingStyle",
    "MentalState",
    "SectionType",
    "Track",
    "TrackSection",
    "TrackType",
]
