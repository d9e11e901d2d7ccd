"""Language model gateway backed by Google Gemini."""

import asyncio
import logging
from typing import Protocol

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from google.generativeai.types import HarmBlockThreshold, HarmCategory

from app.core.config import settings
from app.exceptions.ai import (
    AIConfigurationError,
    AIContentFilterError,
    AIServiceError,
    AIServiceUnavailableError,
    AITimeoutError,
)

logger = logging.getLogger(__name__)


class LLMGateway(Protocol):
    """Anything that turns a prompt into generated text."""

    async def generate(self, prompt: str) -> str: ...


class GeminiGateway:
    """Sends prompts to a hosted Gemini model.

    One instance is created at application startup and shared by every
    request. The client is configured lazily on first use so the API can boot
    without an API key; calls then fail with ``AIConfigurationError``, which
    callers turn into their fallback values.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str | None = None,
        timeout: int | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model_name = model_name or settings.gemini_model
        self.timeout = timeout or settings.ai_request_timeout
        self.model = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _initialize_client(self):
        """Initialize Google Gemini client."""
        if not self.api_key:
            raise AIConfigurationError("Gemini API key not configured")

        try:
            genai.configure(api_key=self.api_key)

            # Configure the model with safety settings
            self.model = genai.GenerativeModel(
                model_name=self.model_name,
                safety_settings={
                    HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                    HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                },
                generation_config=genai.types.GenerationConfig(
                    candidate_count=1,
                    max_output_tokens=settings.gemini_max_tokens,
                    temperature=settings.gemini_temperature,
                ),
            )
            logger.info(f"✅ Gemini client initialized with model: {self.model_name}")

        except Exception as e:
            logger.error(f"Failed to initialize Gemini client: {str(e)}")
            raise AIConfigurationError(f"Failed to initialize AI service: {str(e)}") from e

    async def generate(self, prompt: str) -> str:
        """Generate a completion for ``prompt``.

        Raises:
            AIConfigurationError: no API key, or the client could not be built.
            AITimeoutError: the model did not answer within the timeout.
            AIServiceUnavailableError: Gemini reported itself unavailable.
            AIContentFilterError: the answer was blocked by safety filters.
            AIServiceError: any other failure, including an empty answer.
        """
        if self.model is None:
            self._initialize_client()

        try:
            loop = asyncio.get_running_loop()
            response = await asyncio.wait_for(
                loop.run_in_executor(None, lambda: self.model.generate_content(prompt)),
                timeout=self.timeout,
            )
        except TimeoutError:
            logger.error(f"Gemini request timed out after {self.timeout}s")
            raise AITimeoutError() from None
        except google_exceptions.ServiceUnavailable as e:
            logger.error(f"Gemini service unavailable: {str(e)}")
            raise AIServiceUnavailableError() from e
        except Exception as e:
            logger.error(f"Gemini API call failed: {str(e)}")
            raise AIServiceError(f"AI generation failed: {str(e)}") from e

        try:
            text = response.text
        except ValueError as e:
            # .text raises when the candidate was blocked and has no parts
            raise AIContentFilterError() from e

        if not text or not text.strip():
            raise AIServiceError("Empty response from AI service")

        return text
