from .requests import CreateSessionRequest, ReplyRequest, ToolInvocationRequest
from .responses import ReplyResponse, SessionResponse, ToolInvocationResponse
from .tools import ToolCall, ToolDefinition, ToolParameter, ToolParameterType, ToolResult

__all__ = [
    "CreateSessionRequest",
    "ReplyRequest",
    "ToolInvocationRequest",
    "ReplyResponse",
    "SessionResponse",
    "ToolInvocationResponse",
    "ToolCall",
    "ToolDefinition",
    "ToolParameter",
    "ToolParameterType",
    "ToolResult",
]
