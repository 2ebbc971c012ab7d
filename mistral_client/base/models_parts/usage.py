"""Token accounting DTO shared by chat, streaming and embedding responses."""
from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, field_validator


class UsageInfo(BaseModel):
    completion_tokens: int = 0
    prompt_audio_seconds: int = 0
    prompt_tokens: int = 0
    total_tokens: int = 0

    @field_validator("*", mode="before")
    @classmethod
    def _null_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


__all__ = ["UsageInfo"]
