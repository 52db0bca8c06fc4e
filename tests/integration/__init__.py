"""Integration tests for components working together as a system.

The provider is the only fake; HTTP routing, parsing and streaming are real.

Coverage:
    - POST /api/chat status codes and plain-text body
    - Model resolution and message format handling
    - ConversationStore driving ChatTransport against the app
"""
