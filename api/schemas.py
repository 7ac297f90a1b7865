from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field
from models.quiz import MAX_TIME_SPENT_SECONDS


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class GenerateQuizRequest(ApiModel):
    """Request body for generating a quiz. Presence is checked by the service."""
    subject: Optional[str] = Field(None, description="Subject name", examples=["DBMS"])
    topic: Optional[str] = Field(None, description="Topic within the subject", examples=["Joins"])
    difficulty: Optional[str] = Field(None, description="easy, medium or hard")
    number_of_questions: Optional[int] = Field(None, alias="numberOfQuestions",
                                               description="Requested count, clamped to 1-30")


class SubmitAnswerRequest(ApiModel):
    session_id: Optional[int] = Field(None, alias="sessionId")
    question_number: Optional[int] = Field(None, alias="questionNumber")
    answer: Optional[str] = Field(None, description="Option letter A-D, any case")
    time_spent: Optional[float] = Field(0, alias="timeSpent", le=MAX_TIME_SPENT_SECONDS, allow_inf_nan=False,
                                        description="Seconds spent on the question")


class BookmarkRequest(ApiModel):
    session_id: Optional[int] = Field(None, alias="sessionId")
    question_number: Optional[int] = Field(None, alias="questionNumber")


class CreateChatSessionRequest(ApiModel):
    subject_name: Optional[str] = None
    mode: Optional[str] = None


class SendMessageRequest(ApiModel):
    session_id: Optional[int] = None
    message: Optional[str] = None
    mode: Optional[str] = None
    subject: Optional[str] = None


class Envelope(BaseModel):
    """Every response is wrapped in this shape."""
    success: bool = Field(..., description="Whether the request succeeded")
    data: Optional[Any] = None
    message: Optional[str] = None


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    body = {"success": True}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    return body
