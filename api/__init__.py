"""SomethingToDo API Service.

This package contains the FastAPI application and related components
for the SomethingToDo event discovery backend.

Main components:
- main.py: FastAPI application, middleware and health endpoint
- routers/: chat, events and recommendations endpoints
- middleware/: rate limiting, input sanitization and CORS
- llm/: chat completion client, prompts and tool stubs
- events_api.py: events search API client
- triggers.py: bodies of the background functions
"""

# Avoid importing the FastAPI app at package import time; the functions
# entry point imports api.triggers without needing the HTTP stack.
__all__ = []
