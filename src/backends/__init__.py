from .inference_client import ChatMessage, ChatRequest, ChatResponse, InferenceClient, classify_backend_error
from .fallback import run_with_fallback

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "InferenceClient",
    "classify_backend_error",
    "run_with_fallback",
]
