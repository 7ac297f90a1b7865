import httpx
from dataclasses import dataclass
from typing import List, Dict, Optional
from core.config import Settings
from core.exceptions import AIQuotaError, AIServiceError
from core.logger import logger
from constants.prompts import MCQ_SYSTEM_PROMPT, build_mcq_prompt
from utils.parser import ParseOutcome, Parsed, parse_quiz_payload

QUOTA_ERROR_CODES = {"insufficient_quota", "rate_limit_exceeded", "resource_exhausted"}


@dataclass(frozen=True)
class Completion:
    content: str
    tokens_used: int = 0


class AIService:
    """Gateway to the Groq chat-completions API for quiz generation and tutoring."""

    def __init__(
        self,
        api_key: str,
        model: str,
        client: httpx.AsyncClient,
        base_url: str = "https://api.groq.com/openai/v1/chat/completions",
        max_tokens: int = 8192,
        chat_max_tokens: int = 2000,
    ):
        self.api_key = api_key
        self.model = model
        self.client = client
        self.base_url = base_url
        self.max_tokens = max_tokens
        self.chat_max_tokens = chat_max_tokens

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> "AIService":
        return cls(
            api_key=settings.GROQ_API_KEY,
            model=settings.GROQ_MODEL,
            client=client or httpx.AsyncClient(timeout=settings.AI_TIMEOUT_SECONDS),
            base_url=settings.GROQ_BASE_URL,
            max_tokens=settings.AI_MAX_TOKENS,
            chat_max_tokens=settings.CHAT_MAX_TOKENS,
        )

    async def close(self):
        await self.client.aclose()

    def _log_rate_limits(self, headers: httpx.Headers):
        """Extract and log Groq rate limit information."""
        remaining_requests = headers.get("x-ratelimit-remaining-requests")
        remaining_tokens = headers.get("x-ratelimit-remaining-tokens")

        if remaining_requests or remaining_tokens:
            logger.info(
                "Groq rate limits",
                rem_req=remaining_requests,
                rem_tok=remaining_tokens,
                reset_req=headers.get("x-ratelimit-reset-requests"),
                reset_tok=headers.get("x-ratelimit-reset-tokens")
            )

    @staticmethod
    def _is_quota_error(response: httpx.Response) -> bool:
        if response.status_code == 429:
            return True
        try:
            body = response.json()
        except ValueError:
            return False
        error = body.get("error") if isinstance(body, dict) else None
        if not isinstance(error, dict):
            return False
        if error.get("code") in QUOTA_ERROR_CODES or error.get("type") in QUOTA_ERROR_CODES:
            return True
        return "resource has been exhausted" in str(error.get("message", "")).lower()

    async def complete(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
    ) -> Completion:
        """Send one chat-completions request and return the first choice."""
        if not self.api_key:
            raise AIServiceError("GROQ_API_KEY is not configured")

        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_completion_tokens": max_tokens or self.max_tokens,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.post(
                self.base_url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json"
                },
                json=payload,
            )
        except httpx.HTTPError as e:
            logger.error("Groq request failed", error=str(e))
            raise AIServiceError() from e

        self._log_rate_limits(response.headers)

        if response.status_code != 200:
            logger.error("Groq API error", status=response.status_code, error=response.text[:500])
            if self._is_quota_error(response):
                raise AIQuotaError()
            raise AIServiceError()

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error("Unexpected Groq response shape", error=str(e))
            raise AIServiceError() from e

        usage = data.get("usage") or {}
        return Completion(content=content, tokens_used=int(usage.get("total_tokens") or 0))

    async def generate_mcq_questions(self, subject: str, topic: str, difficulty: str, count: int) -> ParseOutcome:
        """
        Ask the model for ``count`` MCQs and normalize its answer.

        Quota and transport failures raise; unusable output comes back as
        ``Malformed`` so the caller decides how to compensate.
        """
        completion = await self.complete(
            [
                {"role": "system", "content": MCQ_SYSTEM_PROMPT},
                {"role": "user", "content": build_mcq_prompt(subject, topic, difficulty, count)},
            ],
            temperature=0.7,
            json_mode=True,
        )

        outcome = parse_quiz_payload(completion.content, limit=count)
        if isinstance(outcome, Parsed):
            logger.info("AI quiz generated", topic=topic, difficulty=difficulty,
                        requested=count, total=len(outcome.questions))
        return outcome

    async def chat_reply(self, system_prompt: str, history: List[Dict[str, str]], message: str) -> Completion:
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend(history)
        messages.append({"role": "user", "content": message})
        return await self.complete(messages, temperature=0.7, max_tokens=self.chat_max_tokens)
