"""Degradation ladder applied uniformly by every capability endpoint.

Precedence:
    1. rate limit exceeded   -> 429, capability-shaped notice, no model call
    2. invalid input         -> 400, capability-shaped correction, no model call
    3. no credential         -> 200, canned guidance
    4. model call failed     -> 200, capability-shaped apology with contact line
    5. success / salvaged    -> 200, model output
"""

from typing import Any

import structlog

from revodev.core.rate_limiter import RateLimiter
from revodev.flows.capabilities import Capability
from revodev.flows.executor import FlowExecutor, FlowResult, Outcome

logger = structlog.get_logger(__name__)

# Error fallbacks stay 200 so the chat UI renders them like any answer;
# the X-Revodev-Outcome header tells them apart.
STATUS_BY_OUTCOME: dict[Outcome, int] = {
    Outcome.SUCCESS: 200,
    Outcome.SALVAGED: 200,
    Outcome.DEGRADED: 200,
    Outcome.ERROR: 200,
    Outcome.VALIDATION_FAILED: 400,
    Outcome.RATE_LIMITED: 429,
}


class DegradationController:
    """Decides per request between live model, canned response, or error response."""

    def __init__(self, rate_limiter: RateLimiter, executor: FlowExecutor):
        self.rate_limiter = rate_limiter
        self.executor = executor

    @property
    def degraded(self) -> bool:
        """True when no model credential is configured."""
        return not self.executor.llm_adapter.is_healthy()

    async def handle(self, capability: Capability, payload: Any, client_key: str | None) -> FlowResult:
        """Apply the ladder to one request.

        Args:
            capability: Capability being called.
            payload: Decoded JSON body (may be anything).
            client_key: Client identifier for rate limiting, or None.

        Returns:
            FlowResult with a capability-shaped output.
        """
        decision = self.rate_limiter.check(client_key)
        if not decision.allowed:
            return FlowResult(
                Outcome.RATE_LIMITED,
                capability.rate_limited_response(decision.message),
                retry_after_ms=decision.retry_after_ms,
            )

        return await self.executor.execute(capability, payload)

    @staticmethod
    def status_code(result: FlowResult) -> int:
        return STATUS_BY_OUTCOME[result.outcome]
