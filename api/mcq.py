from typing import Optional
from fastapi import APIRouter, Depends, Request
from api.deps import (
    get_current_user,
    get_quiz_service,
    get_session_service,
    get_stats_service,
    get_bookmark_service,
)
from api.schemas import GenerateQuizRequest, SubmitAnswerRequest, BookmarkRequest, Envelope, ok
from services.bookmark_service import BookmarkService
from services.quiz_service import QuizService
from services.session_service import SessionService
from services.stats_service import StatsService
from utils.rate_limit import enforce_ai_rate_limit

router = APIRouter(prefix="/api/mcq", tags=["mcq"])


@router.get("/subjects", summary="List subjects with topics and the user's accuracy")
async def list_subjects(user_id: int = Depends(get_current_user), service: QuizService = Depends(get_quiz_service)):
    return ok(await service.get_subjects_with_topics(user_id))


@router.get("/topics/{subject}", summary="Default and practised topics of a subject")
async def list_topics(subject: str, user_id: int = Depends(get_current_user),
                      service: QuizService = Depends(get_quiz_service)):
    return ok(await service.get_topics(user_id, subject))


@router.post(
    "/generate",
    status_code=201,
    summary="Generate a quiz",
    description="Creates a quiz session and asks the AI for multiple choice questions. "
                "Correct answers are not included in the response.",
    responses={
        201: {"model": Envelope, "description": "Quiz created"},
        400: {"model": Envelope, "description": "Missing or invalid fields"},
        429: {"model": Envelope, "description": "AI quota or rate limit reached"},
        500: {"model": Envelope, "description": "AI failed to produce usable questions"},
    },
)
async def generate_quiz(
    payload: GenerateQuizRequest,
    request: Request,
    user_id: int = Depends(get_current_user),
    service: QuizService = Depends(get_quiz_service),
):
    settings = request.app.state.settings
    await enforce_ai_rate_limit(request.app.state.redis, user_id, settings.AI_RATE_LIMIT_PER_MINUTE)
    data = await service.generate_quiz(
        user_id, payload.subject, payload.topic, payload.difficulty, payload.number_of_questions
    )
    return ok(data)


@router.post(
    "/answer",
    summary="Submit an answer",
    responses={
        200: {"model": Envelope, "description": "Answer recorded, correct answer revealed"},
        404: {"model": Envelope, "description": "Session or question not found"},
        409: {"model": Envelope, "description": "Question already answered or quiz completed"},
    },
)
async def submit_answer(
    payload: SubmitAnswerRequest,
    user_id: int = Depends(get_current_user),
    service: SessionService = Depends(get_session_service),
):
    data = await service.submit_answer(
        user_id, payload.session_id, payload.question_number, payload.answer, payload.time_spent
    )
    return ok(data)


@router.post(
    "/complete/{session_id}",
    summary="Complete a quiz and get results",
    responses={404: {"model": Envelope, "description": "Quiz not found"}},
)
async def complete_quiz(
    session_id: int,
    user_id: int = Depends(get_current_user),
    service: SessionService = Depends(get_session_service),
):
    return ok(await service.complete_quiz(user_id, session_id))


@router.get("/history", summary="Quiz sessions, newest first")
async def quiz_history(
    subject: Optional[str] = None,
    difficulty: Optional[str] = None,
    limit: Optional[int] = None,
    user_id: int = Depends(get_current_user),
    service: QuizService = Depends(get_quiz_service),
):
    return ok(await service.get_history(user_id, subject, difficulty, limit))


@router.get("/performance", summary="Performance analytics")
async def performance(user_id: int = Depends(get_current_user), service: StatsService = Depends(get_stats_service)):
    return ok(await service.get_performance(user_id))


@router.post(
    "/bookmark",
    summary="Toggle a question bookmark",
    responses={404: {"model": Envelope, "description": "Question not found"}},
)
async def toggle_bookmark(
    payload: BookmarkRequest,
    user_id: int = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    bookmarked = await service.toggle_bookmark(user_id, payload.session_id, payload.question_number)
    message = "Question bookmarked" if bookmarked else "Bookmark removed"
    return ok({"bookmarked": bookmarked}, message=message)


@router.get("/bookmarks", summary="Bookmarked questions, newest first")
async def list_bookmarks(
    subject: Optional[str] = None,
    user_id: int = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    return ok(await service.get_bookmarks(user_id, subject))
