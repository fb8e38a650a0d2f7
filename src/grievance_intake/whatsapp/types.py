"""
Session shapes shared with the WhatsApp conversation flow.
Only the fields the reply helpers read are declared; everything else passes through.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionData(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    images: List[Any] = Field(default_factory=list)
    documents: List[Any] = Field(default_factory=list)


class WhatsAppSession(BaseModel):
    """Per-conversation state for one WhatsApp user."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    free_form_text_buffer: Optional[str] = Field(
        default=None, alias="freeFormTextBuffer"
    )
    data: Optional[SessionData] = None

    @property
    def attachment_counts(self) -> tuple:
        """(images, documents) attached so far."""
        if self.data is None:
            return 0, 0
        return len(self.data.images), len(self.data.documents)
