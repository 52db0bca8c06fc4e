"""OpenRouter Chat - streaming chat client for OpenRouter-hosted models.

Combines FastAPI for the streaming chat relay, Agno for provider access,
httpx for the client transport, NiceGUI for the page, and Pydantic for
data validation.

Components:
    - client: transport, conversation state machine and view binding
    - api: HTTP endpoints and streaming responses
    - provider: OpenRouter access through Agno
    - models: conversation data model and request schemas
    - ui: web interface for chat interactions
"""

__version__ = "0.1.0"
