"""
Language model client.
"""

from .openai_client import OpenAIChatClient

__all__ = ["OpenAIChatClient"]
