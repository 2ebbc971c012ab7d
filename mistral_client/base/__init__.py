"""
Base package: the request/response protocol layer.

Subpackages:
- ``models``: wire DTOs (content chunks, messages, tools, chat/embedding payloads)
- ``errors``: error taxonomy and exception classification
- ``http``: httpx client factory and retrying transport
- ``streaming``: SSE parsing and the threaded chunk iterator
- ``cache``: response cache decorator and storage engines
- ``resilience``: retry policy and rate limiting

Import from the submodules directly; this package module stays empty of
re-exports to keep import order free of cycles.
"""
