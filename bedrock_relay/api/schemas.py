from __future__ import annotations

from pydantic import BaseModel, Field


class HealthOut(BaseModel):
    status: str = Field(
        description="`ok` while the process is serving. Bedrock reachability is not checked.",
        examples=["ok"],
    )
