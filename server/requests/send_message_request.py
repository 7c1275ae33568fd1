"""SendMessageRequest model."""

from typing import Annotated

from pydantic import BaseModel, StringConstraints


class SendMessageRequest(BaseModel):
    text: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
