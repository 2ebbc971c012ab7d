"""
Tool (function calling) DTOs.

Declarations sent with a request (``Tool``, ``Function``,
``PropertyDefinition``) and the tool calls a model emits back (``ToolCall``,
``FunctionCall``). Function-call arguments are normalized to a mapping whether
the API sends them as a JSON object or as a JSON-encoded string.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..logging import get_logger
from .json_map import JsonMap, decode_json_map

_logger = get_logger("mistral_client.models")


class ToolChoiceType(str, Enum):
    """How the model may pick tools.

    - ``auto``: the model decides between answering and calling tools.
    - ``any``: the model must call at least one tool.
    - ``none``: the model must not call tools.
    - ``required``: alias of ``any`` accepted by the API.
    """

    AUTO = "auto"
    ANY = "any"
    NONE = "none"
    REQUIRED = "required"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ToolChoiceType"]:
        """Case-insensitive lookup; empty or unknown values yield ``None``."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            _logger.warning("invalid tool choice type: %s; using no value", value)
            return None


class PropertyDefinition(BaseModel):
    """Subset of JSON schema used to describe function parameters."""

    model_config = ConfigDict(populate_by_name=True)

    additional_properties: bool = Field(default=False, alias="additionalProperties")
    description: str = ""
    type: str = ""
    properties: Dict[str, "PropertyDefinition"] = Field(default_factory=dict)
    default: Any = None

    @classmethod
    def from_dict(cls, parameters: Optional[Mapping[str, Any]]) -> "PropertyDefinition":
        """Build a definition from a loose JSON-schema mapping.

        Unknown keys are ignored. A property given as a scalar instead of a
        mapping becomes a definition whose ``type`` is the scalar's text.
        """
        if not parameters:
            return cls()
        kwargs: Dict[str, Any] = {}
        if isinstance(parameters.get("description"), str):
            kwargs["description"] = parameters["description"]
        if isinstance(parameters.get("type"), str):
            kwargs["type"] = parameters["type"]
        if isinstance(parameters.get("additionalProperties"), bool):
            kwargs["additional_properties"] = parameters["additionalProperties"]
        if "default" in parameters:
            kwargs["default"] = parameters["default"]
        props = parameters.get("properties")
        if isinstance(props, Mapping):
            kwargs["properties"] = {
                k: cls.from_dict(v) if isinstance(v, Mapping) else cls(type=_scalar_text(v))
                for k, v in props.items()
            }
        return cls(**kwargs)

    @classmethod
    def for_object(cls, properties: Dict[str, "PropertyDefinition"]) -> "PropertyDefinition":
        return cls(type="object", properties=properties)

    def to_dict(self) -> Dict[str, Any]:
        """Encode with empty fields omitted."""
        out: Dict[str, Any] = {}
        if self.additional_properties:
            out["additionalProperties"] = True
        if self.description:
            out["description"] = self.description
        if self.type:
            out["type"] = self.type
        if self.properties:
            out["properties"] = {k: v.to_dict() for k, v in self.properties.items()}
        if self.default is not None:
            out["default"] = self.default
        return out


def _scalar_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return str(value).lower() if isinstance(value, bool) else str(value)
    return ""


class Function(BaseModel):
    name: str
    description: str = ""
    strict: bool = False
    parameters: PropertyDefinition = Field(default_factory=PropertyDefinition)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "description": self.description}
        if self.strict:
            out["strict"] = True
        params = self.parameters.to_dict()
        if params:
            out["parameters"] = params
        return out


class Tool(BaseModel):
    """A function the model may call."""

    type: str = "function"
    function: Function

    @classmethod
    def new(cls, name: str, description: str, parameters: PropertyDefinition | None = None) -> "Tool":
        return cls(function=Function(name=name, description=description, parameters=parameters or PropertyDefinition()))

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "function": self.function.to_dict()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Tool":
        fn = dict(data.get("function") or {})
        fn["parameters"] = PropertyDefinition.from_dict(fn.get("parameters"))
        return cls(type=data.get("type") or "function", function=Function(**fn))


class ToolChoice(BaseModel):
    name: str


class FunctionCall(BaseModel):
    """Function name plus arguments as an arbitrary JSON object."""

    name: str = ""
    arguments: JsonMap = Field(default_factory=dict)

    @field_validator("arguments", mode="before")
    @classmethod
    def _decode_arguments(cls, value: Any) -> JsonMap:
        return decode_json_map(value)


class ToolCall(BaseModel):
    """A call to one of the declared tools, emitted by the model."""

    id: str = ""
    index: int = 0
    function: FunctionCall = Field(default_factory=FunctionCall)
    type: str = "function"

    @classmethod
    def new(cls, id: str, index: int, name: str, args: Any) -> "ToolCall":
        """Build a tool call; arguments that are not a mapping are wrapped as ``{"input": args}``."""
        arguments = dict(args) if isinstance(args, dict) else {"input": args}
        return cls(id=id, index=index, function=FunctionCall(name=name, arguments=arguments))

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


__all__ = [
    "ToolChoiceType",
    "ToolChoice",
    "PropertyDefinition",
    "Function",
    "Tool",
    "FunctionCall",
    "ToolCall",
]
