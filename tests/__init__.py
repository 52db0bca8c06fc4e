"""Test package for OpenRouter Chat.

Unit tests cover the conversation store, transport, view binding and
provider service in isolation; integration tests run the FastAPI app
through httpx ASGITransport.
"""
