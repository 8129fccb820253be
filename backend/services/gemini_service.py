"""
Gemini Service - Clinical Text Summarization
============================================
Integration with the Google Gen AI SDK that condenses clinical text
into a short summary.

Features:
- Async generation through client.aio
- Retry with exponential backoff on rate limits and 5xx errors
- Lazy client creation (the app starts without an API key)

This is the raw capability: it raises on every failure. Callers that
must not fail go through services.summarization.SummarizationInvoker.

Based on Google Gen AI Python SDK:
    https://googleapis.github.io/python-genai/
"""

from typing import Optional, Dict, Any
import asyncio
import logging
import threading

from config import settings

logger = logging.getLogger(__name__)


# =============================================================================
# SYSTEM PROMPTS
# =============================================================================

DEFAULT_SYSTEM_INSTRUCTION = """You are a clinical documentation assistant.

Summarize the clinical text you are given for a busy clinician.

Guidelines:
1. Keep it short: a few sentences or a compact bullet list
2. Preserve diagnoses, medications with doses, vital signs, lab values and follow-up actions exactly as written
3. Do not invent findings, and do not give advice that is not in the source
4. If the text is not clinical, summarize it plainly without adding medical interpretation

Return only the summary text."""


# =============================================================================
# GEMINI SERVICE
# =============================================================================

class GeminiSummarizer:
    """
    Gemini-backed summarizer.

    Features:
    - Automatic retry with exponential backoff
    - Low temperature for stable summaries
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        max_retries: Optional[int] = None
    ):
        self._client = None
        self._client_lock = threading.Lock()
        self._api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self._model_name = model_name or settings.GEMINI_MODEL
        self._max_retries = settings.SUMMARY_MAX_RETRIES if max_retries is None else max_retries

        # Configuration
        self._temperature = 0.2
        self._max_output_tokens = settings.SUMMARY_MAX_OUTPUT_TOKENS
        self._top_p = 0.95

        self._system_instruction = DEFAULT_SYSTEM_INSTRUCTION

        logger.info(f"Gemini summarizer initialized (model: {self._model_name})")

    # =========================================================================
    # CLIENT MANAGEMENT
    # =========================================================================

    def _ensure_client(self) -> None:
        """Lazy-load the Gemini client."""
        if self._client is not None:
            return

        with self._client_lock:
            if self._client is not None:
                return

            if not self._api_key:
                raise ValueError(
                    "GEMINI_API_KEY not configured. "
                    "Set GEMINI_API_KEY in your .env file."
                )

            from google import genai

            self._client = genai.Client(api_key=self._api_key)
            logger.info("Gemini client initialized successfully")

    async def close(self) -> None:
        """Close the async and sync transports and drop the client."""
        with self._client_lock:
            client, self._client = self._client, None

        if client is not None:
            try:
                await client.aio.aclose()
                client.close()
                logger.info("Gemini client closed")
            except Exception as e:
                logger.warning(f"Error while closing Gemini client: {e}")

    # =========================================================================
    # CORE SUMMARIZATION
    # =========================================================================

    def _build_prompt(self, text: str) -> str:
        parts = [
            "=" * 60,
            "CLINICAL DOCUMENT TEXT:",
            "=" * 60,
            text,
            "=" * 60,
            "\nSummarize the document above.",
        ]
        return "\n".join(parts)

    async def summarize(self, text: str) -> str:
        """
        Summarize `text`.

        Retries rate limits (429) and server errors (5xx) with
        exponential backoff; everything else is raised immediately.

        Raises:
            ValueError: API key missing or empty response
            google.genai.errors.APIError: API failure after retries
        """
        self._ensure_client()

        from google.genai import types, errors

        config = types.GenerateContentConfig(
            system_instruction=self._system_instruction,
            temperature=self._temperature,
            max_output_tokens=self._max_output_tokens,
            top_p=self._top_p,
        )
        prompt = self._build_prompt(text)

        for attempt in range(self._max_retries + 1):
            try:
                response = await self._client.aio.models.generate_content(
                    model=self._model_name,
                    contents=prompt,
                    config=config
                )
            except errors.APIError as e:
                is_retryable = e.code == 429 or (e.code or 0) >= 500
                logger.error(f"Gemini summarization attempt {attempt + 1} failed: API Error ({e.code}): {e.message}")
                if not is_retryable or attempt >= self._max_retries:
                    raise
                backoff_time = (2 ** attempt) * 1.0  # 1s, 2s, 4s...
                logger.info(f"Retrying in {backoff_time}s...")
                await asyncio.sleep(backoff_time)
                continue

            summary = (getattr(response, "text", None) or "").strip()
            if not summary:
                raise ValueError("Empty response from Gemini")
            if attempt > 0:
                logger.info(f"Summarization succeeded on retry attempt {attempt}")
            return summary

        # Loop always returns or raises; kept for type checkers
        raise RuntimeError("Summarization retries exhausted")

    # =========================================================================
    # STATUS & INFO
    # =========================================================================

    def get_status(self) -> Dict[str, Any]:
        """Get service status information."""
        return {
            "client_initialized": self._client is not None,
            "model_name": self._model_name,
            "api_key_configured": bool(self._api_key),
            "engine": "Google Gemini"
        }


# =============================================================================
# SINGLETON & EXPORTS
# =============================================================================

# Shared instance - use this throughout the app
gemini_summarizer = GeminiSummarizer()


def get_summarizer() -> GeminiSummarizer:
    """FastAPI dependency returning the summarization capability."""
    return gemini_summarizer
