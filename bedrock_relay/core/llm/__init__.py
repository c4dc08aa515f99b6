"""LLM integration layer.

This package is intentionally small:
- No prompt/output logging (chat content is user data).
- Configurable via environment variables.
- One Bedrock runtime client per process, shared read-only by all requests.
"""
