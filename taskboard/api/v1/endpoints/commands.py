from fastapi import APIRouter, Body, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict

from taskboard.board.coordinator import MutationOutcome
from taskboard.board.store import ServiceStore
from taskboard.core.auth import get_current_session
from taskboard.core.database import get_db
from taskboard.schemas.command import CommandResponse, command_adapter
from taskboard.schemas.user import SessionContext

router = APIRouter()

STATUS_CODES = {
    MutationOutcome.COMMITTED: 200,
    MutationOutcome.REJECTED: 409,
    MutationOutcome.INVALID: 422,
    MutationOutcome.FAILED: 400,
}

@router.post("", response_model=CommandResponse)
async def dispatch_command(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """通过变更协调器执行命令对象"""
    command = command_adapter.validate_python(payload)
    dispatcher = request.app.state.dispatchers.get(session)

    dispatched = await dispatcher.dispatch(command, ServiceStore(db, session))
    result = dispatched.result

    response = CommandResponse(
        outcome=result.outcome.value,
        message=result.message,
        data=result.value,
        board=dispatched.board,
        projects=dispatched.projects,
    )
    return JSONResponse(
        status_code=STATUS_CODES[result.outcome],
        content=jsonable_encoder(response)
    )
