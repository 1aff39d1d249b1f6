import logging
import uuid
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.session import SessionManager, get_session_manager
from ..core.tools import ToolRegistry, get_tool_registry
from ..types import ToolCall, ToolInvocationRequest, ToolInvocationResponse

router = APIRouter(prefix="/tools")
_logger = logging.getLogger(__name__)


@router.get("")
async def list_tools(
    format: str = Query("anthropic", description="Schema flavour: anthropic or openai"),
    registry: ToolRegistry = Depends(get_tool_registry),
) -> List[Dict[str, Any]]:
    """List tool schemas for the conversational layer"""
    if format == "openai":
        return registry.to_openai_format()
    if format != "anthropic":
        raise HTTPException(status_code=400, detail=f"Unsupported format '{format}'")
    return registry.to_anthropic_format()


@router.post("/{name}", response_model=ToolInvocationResponse)
async def invoke_tool(
    name: str,
    request: ToolInvocationRequest,
    registry: ToolRegistry = Depends(get_tool_registry),
    manager: SessionManager = Depends(get_session_manager),
) -> ToolInvocationResponse:
    """Run one tool in a session and return the text to show the user"""
    if not registry.has_tool(name):
        raise HTTPException(status_code=404, detail=f"Unknown tool '{name}'")

    session = manager.get_session(request.session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown session '{request.session_id}'")

    call = ToolCall(id=str(uuid.uuid4()), name=name, arguments=request.arguments)
    result = await registry.execute(session, call)
    _logger.info("tool %s finished (error=%s)", name, result.is_error)
    return ToolInvocationResponse(
        reply=result.text,
        is_error=result.is_error,
        tool=name,
        metadata={"tool_call_id": call.id},
    )
