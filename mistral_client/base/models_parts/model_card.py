"""
Model catalogue DTOs returned by ``GET /v1/models`` and ``GET /v1/models/{id}``.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ModelCapabilities(BaseModel):
    audio: bool = False
    classification: bool = False
    completion_chat: bool = False
    completion_fim: bool = False
    fine_tuning: bool = False
    function_calling: bool = False
    moderation: bool = False
    ocr: bool = False
    vision: bool = False

    def requested(self) -> List[str]:
        """Names of the capabilities set to True."""
        return [name for name, flag in self.model_dump().items() if flag]


class ModelCard(BaseModel):
    """Description of one model available to the account."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    id: str
    name: str = ""
    object: str = ""
    model_type: str = Field(default="", alias="type")
    description: str = ""
    max_context_length: int = 0
    owned_by: str = ""
    deprecation: Optional[datetime] = None
    default_model_temperature: Optional[float] = None
    created: int = 0
    aliases: List[str] = Field(default_factory=list)
    capabilities: ModelCapabilities = Field(default_factory=ModelCapabilities)

    @field_validator("name", "object", "description", "owned_by", "model_type", mode="before")
    @classmethod
    def _null_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("aliases", mode="before")
    @classmethod
    def _null_is_empty_list(cls, value: Any) -> Any:
        return [] if value is None else value

    def matches(self, capabilities: ModelCapabilities) -> bool:
        """True when the card has every capability requested in ``capabilities``."""
        own = self.capabilities.model_dump()
        return all(own.get(name, False) for name in capabilities.requested())

    def has_no_capabilities(self) -> bool:
        return not self.capabilities.requested()

    def is_embedding(self) -> bool:
        return "embed" in self.id

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


__all__ = ["ModelCapabilities", "ModelCard"]
