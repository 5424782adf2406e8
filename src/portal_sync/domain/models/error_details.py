"""Error details domain model."""

from pydantic import BaseModel, ConfigDict


class ErrorDetails(BaseModel):
    """Short, loggable summary of a failed external call."""

    model_config = ConfigDict(frozen=True)

    status_code: int | None = None
    reason: str
    message: str = ""
