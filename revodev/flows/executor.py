"""Flow executor: validate -> render prompt -> call model -> parse -> respond.

`execute()` never raises. Every path resolves to an output object shaped like
the capability's contract, tagged with an Outcome the controller maps to an
HTTP status.
"""

import os
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog
from pydantic import BaseModel, ValidationError

from revodev.api.schemas import CapabilityRequest, ConversationalRequest, ConversationTurn
from revodev.core.guardrails import ImageGuard, OutputGuard
from revodev.core.history import DEFAULT_MAX_TURNS, to_model_history, trim_history
from revodev.core.llm_adapter import LLMAdapter
from revodev.flows.capabilities import Capability
from revodev.flows.fallbacks import CONTACT_LINE
from revodev.flows.parsing import Parsed, parse_model_output, salvage_fields

logger = structlog.get_logger(__name__)


class Outcome(str, Enum):
    SUCCESS = "success"
    SALVAGED = "salvaged"
    DEGRADED = "degraded"
    ERROR = "error"
    VALIDATION_FAILED = "validation_failed"
    RATE_LIMITED = "rate_limited"


@dataclass
class FlowResult:
    """Output of one capability call plus how it was produced."""
    outcome: Outcome
    output: BaseModel
    retry_after_ms: int | None = None


class FlowExecutor:
    """Runs one capability flow against the LLM adapter."""

    def __init__(
        self,
        llm_adapter: LLMAdapter,
        max_history_turns: int | None = None,
        image_guard: ImageGuard | None = None,
        output_guard: OutputGuard | None = None,
    ):
        self.llm_adapter = llm_adapter
        self.max_history_turns = (
            max_history_turns if max_history_turns is not None
            else int(os.environ.get("HISTORY_MAX_TURNS", str(DEFAULT_MAX_TURNS)))
        )
        self.image_guard = image_guard or ImageGuard()
        self.output_guard = output_guard or OutputGuard()

    async def execute(self, capability: Capability, payload: Any) -> FlowResult:
        """Run `capability` on a raw JSON payload.

        Args:
            capability: Capability to run.
            payload: Decoded request body. Anything other than a dict is
                treated as missing input.

        Returns:
            FlowResult. Never raises.
        """
        start = time.monotonic()

        # 1. Input validation: never reaches the model
        try:
            request = capability.request_model.model_validate(payload if isinstance(payload, dict) else {})
        except ValidationError as e:
            logger.info("flow.validation_failed", capability=capability.name,
                        fields=[".".join(str(p) for p in err["loc"]) for err in e.errors()])
            return FlowResult(Outcome.VALIDATION_FAILED, capability.validation_response())

        image = None
        image_uri = getattr(request, "image_data_uri", None)
        if image_uri:
            image, guard_result = self.image_guard.check(image_uri)
            if not guard_result.passed:
                return FlowResult(
                    Outcome.VALIDATION_FAILED,
                    capability.validation_response(
                        "Please attach a valid image (JPEG, PNG, WebP or GIF) no larger than "
                        f"{self.image_guard.max_bytes // (1024 * 1024)}MB."
                    ),
                )

        # 2. Degraded mode: no credential, no model call
        if not self.llm_adapter.is_healthy():
            logger.debug("flow.canned_response", capability=capability.name)
            return FlowResult(Outcome.DEGRADED, capability.canned())

        # 3-5. Render, call, parse; any failure becomes the capability's apology
        try:
            history = self._history_for(request)
            prompt = capability.template.render(request.prompt_values(), history)
            reply = await self.llm_adapter.generate(prompt, image=image)
            parsed = parse_model_output(reply, capability.output_model)

            if isinstance(parsed, Parsed):
                result = FlowResult(Outcome.SUCCESS, parsed.output)
            else:
                output = None
                if parsed.fields is not None:
                    output = salvage_fields(parsed.fields, capability.output_model,
                                            capability.shape(CONTACT_LINE))
                if output is None:
                    text, _ = self.output_guard.check(parsed.raw_text)
                    output = capability.shape(text)
                result = FlowResult(Outcome.SALVAGED, output)

        except Exception as e:
            logger.error("flow.provider_failed", capability=capability.name,
                         error_type=type(e).__name__, error=str(e), exc_info=True)
            return FlowResult(Outcome.ERROR, capability.failure_response())

        latency_ms = int((time.monotonic() - start) * 1000)
        logger.info("flow.completed", capability=capability.name, outcome=result.outcome.value,
                    history_turns=len(history), has_image=image is not None, latency_ms=latency_ms)
        return result

    def _history_for(self, request: CapabilityRequest) -> list[ConversationTurn]:
        if not isinstance(request, ConversationalRequest):
            return []
        turns = list(request.conversation_history or [])
        turns.extend(to_model_history(request.transcript))
        return trim_history(turns, self.max_history_turns)
