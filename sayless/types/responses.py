from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class SessionResponse(BaseModel):
    session_id: str = Field(description="Session identifier")
    created_at: Optional[str] = Field(default=None, description="ISO timestamp the session was created")


class ReplyResponse(BaseModel):
    reply: str = Field(description="Text to show or speak to the user")


class ToolInvocationResponse(BaseModel):
    reply: str = Field(description="Text to show or speak to the user")
    is_error: bool = Field(default=False, description="Whether the tool call failed")
    tool: str = Field(description="Name of the tool that ran")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Additional call metadata")
