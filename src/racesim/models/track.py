"""Track model with typed sections."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TrackType(str, Enum):
    """Track categories. Drive tire life and fuel use."""

    SHORT = "short"
    INTERMEDIATE = "intermediate"
    SUPERSPEEDWAY = "superspeedway"
    ROAD = "road"


class SectionType(str, Enum):
    """Kinds of track section."""

    STRAIGHT = "straight"
    TURN = "turn"
    TRANSITION = "transition"


class TrackSection(BaseModel):
    """A single section of the racing surface."""

    model_config = ConfigDict(frozen=True)

    section_type: SectionType = Field(..., description="Straight, turn or transition")
    length: float = Field(..., gt=0, description="Section length in feet")
    banking: float = Field(
        default=0.0,
        ge=0.0,
        le=45.0,
        description="Banking angle in degrees",
    )


class Track(BaseModel):
    """Represents an oval or road circuit.

    Tracks are loaded once and never mutated by the simulation.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Track identifier (e.g., 'bristol')")
    name: str = Field(..., description="Official track name")
    track_type: TrackType = Field(
        default=TrackType.INTERMEDIATE,
        description="Track category",
    )

    length: float = Field(..., gt=0, description="Lap length in miles")
    base_lap_time: float = Field(
        ...,
        gt=0,
        description="Reference lap time in seconds (average driver, fresh tires)",
    )
    race_laps: int = Field(..., gt=0, description="Standard race distance in laps")

    # Surface characteristics
    surface_grip: float = Field(
        default=0.9,
        ge=0.5,
        le=1.0,
        description="Base grip of the surface (lower = more sliding, more tire wear)",
    )
    banking: float = Field(
        default=0.0,
        ge=0.0,
        le=45.0,
        description="Default banking in degrees for turns without their own value",
    )

    sections: tuple[TrackSection, ...] = Field(
        default=(),
        description="Ordered track sections",
    )

    @property
    def section_length(self) -> float:
        """Summed length of all sections in feet."""
        return sum(section.length for section in self.sections)

    def share_of(self, section_type: SectionType) -> float:
        """Fraction of the lap (by length) covered by one section type."""
        total = self.section_length
        if total <= 0:
            return 0.0
        return sum(s.length for s in self.sections if s.section_type == section_type) / total
