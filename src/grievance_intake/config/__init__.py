"""Environment-driven settings."""

from grievance_intake.config.settings import settings

__all__ = ["settings"]
