"""MessageTime model."""

from pydantic import BaseModel


class MessageTime(BaseModel):
    """Creation time and, once its turn has settled, completion time (epoch seconds)."""

    created: float
    completed: float | None = None
