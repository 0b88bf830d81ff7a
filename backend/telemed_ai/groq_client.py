"""
Groq API Client: thin wrapper for the optional symptom-analysis LLM call.

The client only turns a prompt into a completion string. It never touches
the database, and any failure yields None so the caller can fall back to the
keyword rules.
"""

import logging
import time
from typing import Optional

from groq import Groq, APIError, APITimeoutError, RateLimitError

from telemed.core.config import settings

# NEVER log API keys
logger = logging.getLogger(__name__)


class GroqClient:
    """
    Minimal wrapper for the Groq chat completions API.

    - Temperature 0: same symptoms, same answer
    - Small max_tokens: the answer is a short JSON list
    - Short timeout with limited retries on timeouts and rate limits
    """

    MODEL = "llama-3.3-70b-versatile"
    TEMPERATURE = 0
    MAX_TOKENS = 512
    TIMEOUT_SECONDS = 5

    def __init__(self, api_key: Optional[str] = None):
        api_key = api_key if api_key is not None else settings.GROQ_API_KEY

        if not api_key:
            logger.warning(
                "GROQ_API_KEY not found in environment. "
                "LLM symptom analysis is DISABLED; keyword rules will be used."
            )
            self.client = None
        else:
            try:
                self.client = Groq(api_key=api_key, timeout=self.TIMEOUT_SECONDS)
                logger.info("Groq client initialized")
            except Exception as e:
                logger.error(f"Failed to initialize Groq client: {e}")
                self.client = None

    def is_available(self) -> bool:
        return self.client is not None

    def complete(self, prompt: str, max_retries: int = 2) -> Optional[str]:
        """
        Send ``prompt`` as a single user message and return the raw completion.

        Returns None on any error. Timeouts and rate limits are retried with
        exponential backoff; other API errors are not.
        """
        if not self.is_available():
            logger.debug("Groq client not available - skipping LLM call")
            return None

        for attempt in range(max_retries + 1):
            try:
                response = self.client.chat.completions.create(
                    model=self.MODEL,
                    messages=[{"role": "user", "content": prompt}],
                    temperature=self.TEMPERATURE,
                    max_tokens=self.MAX_TOKENS,
                    stream=False,
                )

                if response.choices:
                    content = response.choices[0].message.content
                    logger.debug(f"LLM response received: {len(content or '')} chars (attempt {attempt + 1})")
                    return content
                logger.warning("LLM returned empty response")
                return None

            except APITimeoutError:
                if attempt < max_retries:
                    wait_time = 0.5 * (2 ** attempt)
                    logger.warning(f"Groq timeout, retry {attempt + 1}/{max_retries} after {wait_time}s")
                    time.sleep(wait_time)
                else:
                    logger.warning(f"Groq API timeout after {max_retries} retries")
                    return None

            except RateLimitError:
                if attempt < max_retries:
                    wait_time = 1.0 * (2 ** attempt)
                    logger.warning(f"Groq rate limit, retry {attempt + 1}/{max_retries} after {wait_time}s")
                    time.sleep(wait_time)
                else:
                    logger.warning("Groq API rate limit exceeded after retries")
                    return None

            except APIError as e:
                logger.error(f"Groq API error (permanent): {e}")
                return None

        return None


_groq_client: Optional[GroqClient] = None


def get_groq_client() -> GroqClient:
    """Get or create the shared GroqClient instance."""
    global _groq_client
    if _groq_client is None:
        _groq_client = GroqClient()
    return _groq_client
