import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException

from ..core.engine import AssistantEngine, get_engine
from ..core.session import SessionContext, SessionManager, get_session_manager
from ..types import CreateSessionRequest, ReplyRequest, ReplyResponse, SessionResponse

router = APIRouter(prefix="/sessions")
_logger = logging.getLogger(__name__)


def require_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionContext:
    session = manager.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown session '{session_id}'")
    return session


@router.post("", response_model=SessionResponse)
async def create_session(
    request: Optional[CreateSessionRequest] = None,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionResponse:
    """Open a conversation session"""
    session = manager.create_session(request.session_id if request else None)
    return SessionResponse(session_id=session.session_id, created_at=session.created_at.isoformat())


@router.get("/{session_id}")
async def get_session(session: SessionContext = Depends(require_session)) -> Dict[str, Any]:
    return session.to_dict()


@router.delete("/{session_id}")
async def end_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> Dict[str, Any]:
    """End a session, cancelling any in-flight provider call"""
    if not manager.end_session(session_id):
        raise HTTPException(status_code=404, detail=f"Unknown session '{session_id}'")
    return {"success": True, "session_id": session_id}


@router.post("/{session_id}/cancel")
async def cancel_session_call(session: SessionContext = Depends(require_session)) -> Dict[str, Any]:
    """Cancel the provider call currently running for this session"""
    return {"cancelled": session.cancel()}


@router.post("/{session_id}/reply", response_model=ReplyResponse)
async def reply(
    request: ReplyRequest,
    session: SessionContext = Depends(require_session),
    engine: AssistantEngine = Depends(get_engine),
) -> ReplyResponse:
    """Relay the user's yes / no / respelling to the pending confirmation"""
    return ReplyResponse(reply=engine.reply(session, request.answer))
