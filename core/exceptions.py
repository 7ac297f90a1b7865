class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""
    status_code: int = 500
    message: str = "Something went wrong. Please try again."

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class ValidationError(AppError):
    status_code = 400
    message = "Invalid request"


class AuthError(AppError):
    status_code = 401
    message = "Unauthorized"


class NotFoundError(AppError):
    status_code = 404
    message = "Not found"


class AnswerAlreadySubmittedError(AppError):
    status_code = 409
    message = "This question has already been answered"


class QuizAlreadyCompletedError(AppError):
    status_code = 409
    message = "This quiz has already been completed"


class RateLimitError(AppError):
    status_code = 429
    message = "AI rate limit reached. Please wait a moment."


class AIQuotaError(AppError):
    """Upstream AI provider refused the call because of quota or rate limits."""
    status_code = 429
    message = "AI quota exceeded. Please wait a moment and try again."


class AIServiceError(AppError):
    """Upstream AI call failed for any reason other than quota."""
    status_code = 500
    message = "AI service is unavailable. Please try again."


class QuizGenerationError(AppError):
    status_code = 500
    message = "Failed to generate questions. Please try again."
