"""Language-model orchestration: prompts, wire models, and the Ollama client."""

from healthyai.llm.client import OllamaClient, format_prompt
from healthyai.llm.models import GenerateFailure, GenerateReply, GenerateResult

__all__ = [
    "GenerateFailure",
    "GenerateReply",
    "GenerateResult",
    "OllamaClient",
    "format_prompt",
]
