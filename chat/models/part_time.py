"""PartTime model."""

from pydantic import BaseModel


class PartTime(BaseModel):
    """Execution window of a tool invocation (epoch seconds)."""

    start: float
    end: float | None = None

    @property
    def duration_ms(self) -> float | None:
        if self.end is None:
            return None
        return (self.end - self.start) * 1000
