from .openrouter import CompletionClient, CompletionError, OpenRouterClient

__all__ = ["CompletionClient", "CompletionError", "OpenRouterClient"]
