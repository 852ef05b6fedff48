"""LLM adapter around Groq-hosted chat models.

One attempt per call: no retries and no provider failover. A missing
GROQ_API_KEY is a supported state: the adapter reports itself unconfigured and
callers serve canned responses instead.
"""

import os

import structlog
from groq import APIConnectionError, APIStatusError, APITimeoutError
from langchain_core.messages import HumanMessage
from langchain_groq import ChatGroq

from revodev.api.schemas import InlineImage

logger = structlog.get_logger(__name__)

DEFAULT_MODEL = "meta-llama/llama-4-scout-17b-16e-instruct"


class LLMError(Exception):
    """Non-retryable LLM error (e.g. 4xx bad request, missing credential)."""
    pass


class LLMUnavailableError(Exception):
    """Provider is down, timing out, or returned nothing usable."""
    pass


class LLMAdapter:
    """Wraps a ChatGroq model behind a prompt-in, text-out call."""

    def __init__(self, api_key: str | None = None):
        self.api_key = api_key if api_key is not None else os.environ.get("GROQ_API_KEY", "")
        self.model_name = os.environ.get("GROQ_MODEL", DEFAULT_MODEL)

        self.temperature = float(os.environ.get("LLM_TEMPERATURE", "0.3"))
        self.max_tokens = int(os.environ.get("LLM_MAX_TOKENS", "2048"))
        self.timeout = int(os.environ.get("LLM_TIMEOUT", "30"))

        self.llm: ChatGroq | None = None
        if self.api_key:
            self.llm = ChatGroq(
                api_key=self.api_key,
                model=self.model_name,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                timeout=self.timeout,
                max_retries=0,
            )
            logger.info("llm.configured", provider="groq", model=self.model_name)
        else:
            logger.warning("llm.credentials_missing", mode="canned_responses",
                           hint="Set GROQ_API_KEY in .env to enable live answers")

    def is_healthy(self) -> bool:
        """Check whether a provider credential is configured.

        Returns:
            True if GROQ_API_KEY is set.
        """
        return self.llm is not None

    async def generate(self, prompt: str, image: InlineImage | None = None) -> str:
        """Send one prompt (and optional image) to the model and return its text.

        Args:
            prompt: Fully rendered prompt text.
            image: Optional image to attach to the same user message.

        Returns:
            The model's reply text, stripped.

        Raises:
            LLMError: No credential configured, or the provider rejected the
                request (4xx).
            LLMUnavailableError: Timeout, connection failure, 5xx, or an empty reply.
        """
        if self.llm is None:
            raise LLMError("No model credential configured")

        if image is None:
            content = prompt
        else:
            content = [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": image.to_data_uri()}},
            ]

        logger.debug("llm.invoke", provider="groq", model=self.model_name,
                     prompt_chars=len(prompt), has_image=image is not None)

        try:
            response = await self.llm.ainvoke([HumanMessage(content=content)])

        except APIStatusError as e:
            if 400 <= e.status_code < 500:
                logger.error("llm.4xx", status=e.status_code)
                raise LLMError(f"Groq API rejected request ({e.status_code}): {e}") from e
            logger.error("llm.5xx", status=e.status_code)
            raise LLMUnavailableError(f"Groq API error ({e.status_code}): {e}") from e

        except APITimeoutError as e:
            logger.error("llm.timeout", threshold=self.timeout)
            raise LLMUnavailableError(f"Groq API timed out after {self.timeout}s") from e

        except APIConnectionError as e:
            logger.error("llm.connection_failed", error=str(e))
            raise LLMUnavailableError(f"Could not reach Groq API: {e}") from e

        text = _response_text(response.content)
        if not text:
            raise LLMUnavailableError("Model returned an empty response")
        return text


def _response_text(content) -> str:
    """Normalize AIMessage content (str or list of content blocks) to text."""
    if isinstance(content, str):
        return content.strip()
    chunks = []
    for block in content or []:
        if isinstance(block, str):
            chunks.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            chunks.append(block.get("text", ""))
    return "".join(chunks).strip()
