"""Streaming package: SSE frame parsing and the threaded chunk iterator."""

from .sse import decode_chunk_payload, iter_chunks, parse_data_line
from .chunk_stream import ChunkStream

__all__ = ["ChunkStream", "iter_chunks", "parse_data_line", "decode_chunk_payload"]
