"""
Pydantic data models for extracted geometric primitives.

Every primitive is an immutable value; a GeometricPrimitives aggregate owns
all shapes produced by a single image.
"""

import math
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class Point2D(BaseModel):
    """A point in pixel coordinates."""
    x: float
    y: float
    
    model_config = ConfigDict(frozen=True, extra="forbid")


class Line(BaseModel):
    """A line segment. Endpoint order is extraction order only."""
    start: Point2D
    end: Point2D
    
    model_config = ConfigDict(frozen=True, extra="forbid")
    
    @property
    def length(self):
        return math.hypot(self.end.x - self.start.x, self.end.y - self.start.y)


class Circle(BaseModel):
    """A full circle."""
    center: Point2D
    radius: float = Field(..., gt=0)
    
    model_config = ConfigDict(frozen=True, extra="forbid")


class Arc(BaseModel):
    """
    A circular arc.
    
    Angles are radians in (-pi, pi] measured from the center with atan2.
    No sweep direction is implied by their order.
    """
    center: Point2D
    radius: float = Field(..., gt=0)
    start_angle: float
    end_angle: float
    
    model_config = ConfigDict(frozen=True, extra="forbid")


class GeometricPrimitives(BaseModel):
    """All primitives extracted from one image, in extraction order."""
    lines: List[Line] = Field(default_factory=list)
    circles: List[Circle] = Field(default_factory=list)
    arcs: List[Arc] = Field(default_factory=list)
    
    model_config = ConfigDict(frozen=True, extra="forbid")
    
    @property
    def is_empty(self):
        """True if no primitive of any kind was found."""
        return not (self.lines or self.circles or self.arcs)
    
    @property
    def counts(self) -> Dict[str, int]:
        return {
            "lines": len(self.lines),
            "circles": len(self.circles),
            "arcs": len(self.arcs),
        }
