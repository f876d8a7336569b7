"""
JIRA API

Ticket existence check used by the release form
"""

from fastapi import APIRouter
from pydantic import BaseModel

from greenlight.api.deps import Jira

router = APIRouter()


class TicketValidationResponse(BaseModel):
    valid: bool


@router.get("/validate-jira/{ticket_key}", response_model=TicketValidationResponse)
async def validate_jira_ticket(ticket_key: str, jira: Jira):
    return TicketValidationResponse(valid=await jira.validate_ticket(ticket_key))
