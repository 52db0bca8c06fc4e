"""Unit tests for individual components in isolation.

Ensures fast execution with minimal dependencies.

Coverage:
    - Conversation state machine and cancellation
    - HTTP transport error mapping and streaming
    - View derivation, transcript and markdown rendering
    - Inbound message parsing
    - Provider configuration and Agno service wrapper
"""
