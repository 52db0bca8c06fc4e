"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Chat message display with streaming support
    - Copy and download of the conversation transcript
    - Clearing the conversation

Contains no conversation logic. Subscribes to the client state machine.
"""
