"""Support ticket request schemas."""

from pydantic import Field

from ..domain.multilingual import MultilingualText
from ._strict_base import StrictRequestModel


class SupportTicketCreateRequest(StrictRequestModel):
    issue_related_to: str = Field(..., min_length=1, max_length=50)
    details: MultilingualText
