"""
Wire DTOs public surface.

This module re-exports the one-concern-per-file implementations under
``mistral_client.base.models_parts`` so callers have a single stable import
path for content chunks, messages, tools, chat/embedding payloads and model
cards.
"""

from .models_parts.json_map import JsonMap, decode_json_map
from .models_parts.content import (
    AudioChunk,
    Content,
    ContentChunk,
    ContentType,
    DocumentUrlChunk,
    FileChunk,
    ImageUrlChunk,
    ReferenceChunk,
    TextChunk,
    ThinkChunk,
    UnknownChunk,
    content_text,
    decode_chunk,
    decode_content,
    encode_content,
)
from .models_parts.tool import (
    Function,
    FunctionCall,
    PropertyDefinition,
    Tool,
    ToolCall,
    ToolChoice,
    ToolChoiceType,
)
from .models_parts.message import (
    AssistantMessage,
    ChatMessage,
    Role,
    SystemMessage,
    ToolMessage,
    UserMessage,
    decode_message,
    encode_message,
)
from .models_parts.usage import UsageInfo
from .models_parts.chat_completion import (
    ChatCompletionChoice,
    ChatCompletionRequest,
    ChatCompletionResponse,
    CompletionChunk,
    CompletionResponseStreamChoice,
    FinishReason,
    JsonSchema,
    ResponseFormat,
    ResponseFormatType,
)
from .models_parts.embedding import (
    EmbeddingData,
    EmbeddingEncodingFormat,
    EmbeddingOutputDtype,
    EmbeddingRequest,
    EmbeddingResponse,
    EmbeddingVector,
)
from .models_parts.model_card import ModelCapabilities, ModelCard

__all__ = [
    "JsonMap",
    "decode_json_map",
    "ContentType",
    "TextChunk",
    "ImageUrlChunk",
    "DocumentUrlChunk",
    "ReferenceChunk",
    "FileChunk",
    "AudioChunk",
    "ThinkChunk",
    "UnknownChunk",
    "ContentChunk",
    "Content",
    "content_text",
    "decode_chunk",
    "decode_content",
    "encode_content",
    "ToolChoiceType",
    "ToolChoice",
    "PropertyDefinition",
    "Function",
    "Tool",
    "FunctionCall",
    "ToolCall",
    "Role",
    "SystemMessage",
    "UserMessage",
    "AssistantMessage",
    "ToolMessage",
    "ChatMessage",
    "decode_message",
    "encode_message",
    "UsageInfo",
    "FinishReason",
    "ResponseFormatType",
    "JsonSchema",
    "ResponseFormat",
    "ChatCompletionRequest",
    "ChatCompletionChoice",
    "ChatCompletionResponse",
    "CompletionResponseStreamChoice",
    "CompletionChunk",
    "EmbeddingVector",
    "EmbeddingEncodingFormat",
    "EmbeddingOutputDtype",
    "EmbeddingRequest",
    "EmbeddingData",
    "EmbeddingResponse",
    "ModelCapabilities",
    "ModelCard",
]
