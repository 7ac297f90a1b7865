from fastapi import APIRouter, Depends, Request
from api.deps import get_current_user, get_chat_service
from api.schemas import CreateChatSessionRequest, SendMessageRequest, ok
from services.chat_service import ChatService, serialize_chat_session
from utils.rate_limit import enforce_ai_rate_limit

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.post("/sessions", status_code=201, summary="Start a chat session")
async def create_session(
    payload: CreateChatSessionRequest,
    user_id: int = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    session = await service.create_session(user_id, payload.subject_name, payload.mode)
    return ok(serialize_chat_session(session))


@router.post("/send", summary="Send a message and get the tutor's reply")
async def send_message(
    payload: SendMessageRequest,
    request: Request,
    user_id: int = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    settings = request.app.state.settings
    await enforce_ai_rate_limit(request.app.state.redis, user_id, settings.AI_RATE_LIMIT_PER_MINUTE)
    data = await service.send_message(user_id, payload.message, payload.session_id, payload.mode, payload.subject)
    return ok(data)


@router.get("/sessions", summary="Recent chat sessions")
async def list_sessions(user_id: int = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    return ok(await service.list_sessions(user_id))


@router.get("/sessions/{session_id}", summary="Chat session with its messages")
async def get_session(session_id: int, user_id: int = Depends(get_current_user),
                      service: ChatService = Depends(get_chat_service)):
    return ok(await service.get_session_messages(user_id, session_id))


@router.delete("/sessions/{session_id}", summary="Delete a chat session")
async def delete_session(session_id: int, user_id: int = Depends(get_current_user),
                         service: ChatService = Depends(get_chat_service)):
    await service.delete_session(user_id, session_id)
    return ok(message="Session deleted")


@router.get("/sessions/{session_id}/export", summary="Export a chat session")
async def export_chat(session_id: int, user_id: int = Depends(get_current_user),
                      service: ChatService = Depends(get_chat_service)):
    return ok(await service.export_chat(user_id, session_id))
