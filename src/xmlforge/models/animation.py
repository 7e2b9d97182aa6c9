"""Animation timeline models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from xmlforge.models.geometry import UVCoords


class Frame(BaseModel):
    """One sprite-sheet sample in an animation timeline."""

    model_config = ConfigDict(frozen=True)

    uv: UVCoords
    duration: float | None = None  # None lets the engine pick its default


class Animation(BaseModel):
    """An ordered frame timeline, optionally grouped for transition logic."""

    id: str | None = None
    group: str | None = None
    frames: list[Frame] = Field(default_factory=list)

    def add_frame(self, uv: UVCoords, duration: float | None = None) -> None:
        self.frames.append(Frame(uv=uv, duration=duration))

    @property
    def length(self) -> int:
        return len(self.frames)

    @property
    def duration(self) -> float:
        """Sum of all explicitly timed frames."""
        return sum(frame.duration for frame in self.frames if frame.duration is not None)

    def get_value(self, index: int = 0) -> UVCoords:
        return self.frames[index].uv
