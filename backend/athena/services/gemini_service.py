import logging
import time

from google import genai

from athena.core.config import GEMINI_API_KEY, GEMINI_MODEL
from athena.core.exceptions import LLMServiceError

logger = logging.getLogger(__name__)


class GeminiService:
    """
    Thin wrapper around the Gemini chat API used by every prompt in the app.
    Retries on overload (503 / UNAVAILABLE) with exponential backoff.
    """

    def __init__(self, api_key: str = None, model: str = None, client=None):
        api_key = api_key or GEMINI_API_KEY
        if client is None and not api_key:
            raise ValueError("GEMINI_API_KEY environment variable is not set")
        self.client = client or genai.Client(api_key=api_key)
        self.model = model or GEMINI_MODEL

    def generate(self, prompt: str, max_retries: int = 3) -> str:
        """
        Send a single prompt and return the response text.

        Args:
            prompt (str): Full prompt text
            max_retries (int): Attempts before giving up on overload errors

        Returns:
            str: Stripped response text (may be empty)

        Raises:
            LLMServiceError: If the model cannot be reached
        """
        for attempt in range(max_retries):
            try:
                chat = self.client.chats.create(model=self.model)
                response = chat.send_message(prompt)
                return (response.text or "").strip()
            except Exception as e:
                error_msg = str(e)
                overloaded = "503" in error_msg or "UNAVAILABLE" in error_msg or "overload" in error_msg.lower()

                if overloaded and attempt < max_retries - 1:
                    wait_time = 2 ** attempt
                    logger.warning(
                        f"[Gemini] API overloaded (attempt {attempt + 1}/{max_retries}). Retrying in {wait_time}s..."
                    )
                    time.sleep(wait_time)
                    continue

                raise LLMServiceError(f"Gemini API error: {error_msg}") from e

        raise LLMServiceError(f"Gemini API unavailable after {max_retries} attempts")
