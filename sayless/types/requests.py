from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class CreateSessionRequest(BaseModel):
    session_id: Optional[str] = Field(default=None, description="Optional caller-chosen session identifier")


class ReplyRequest(BaseModel):
    answer: str = Field(description="The user's reply: yes, no, or a new spelling")


class ToolInvocationRequest(BaseModel):
    session_id: str = Field(description="Session the tool call belongs to")
    arguments: Dict[str, Any] = Field(default_factory=dict, description="Tool arguments by parameter name")
