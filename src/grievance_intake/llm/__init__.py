"""Provider-specific LLM completion."""

from grievance_intake.llm.generate import PROVIDERS, generate_with_llm

__all__ = ["PROVIDERS", "generate_with_llm"]
