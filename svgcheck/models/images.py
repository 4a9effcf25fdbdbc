"""Image metadata data structures."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class ImageDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int = Field(gt=0)
    height: int = Field(gt=0)
    quality: float = Field(default=0.0, ge=0)
    format: str
    path: Path

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height


class DisplayBounds(BaseModel):
    """Size of the screen the baseline has to fit on."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(default=1920, gt=0)
    height: int = Field(default=1080, gt=0)

    @classmethod
    def parse(cls, value: str) -> "DisplayBounds":
        """Parse ``1920x1080``."""
        parts = value.lower().split("x")
        if len(parts) != 2:
            raise ValueError(f"Invalid display size '{value}'. Expected WIDTHxHEIGHT")
        try:
            width, height = int(parts[0]), int(parts[1])
        except ValueError:
            raise ValueError(f"Invalid display size '{value}'. Expected WIDTHxHEIGHT") from None
        return cls(width=width, height=height)

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"
