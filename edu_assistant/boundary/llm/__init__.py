"""
Generation backend boundary.

Dependencies: langchain_google_genai
System role: LLM adapter for chat generation
"""

from edu_assistant.boundary.llm.chat_model import GeminiGenerationBackend, GenerationResult

__all__ = ["GeminiGenerationBackend", "GenerationResult"]
