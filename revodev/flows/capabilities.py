"""Capability registry: binds request/output contracts, prompt and fallbacks."""

from collections.abc import Callable
from dataclasses import dataclass

from pydantic import BaseModel

from revodev.api.schemas import (
    AdviceRequest,
    CapabilityRequest,
    EnergySavingRequest,
    ProjectPlanRequest,
    RecommendationRequest,
    TroubleshootingRequest,
)
from revodev.flows import fallbacks
from revodev.flows.prompts import (
    ADVICE_TEMPLATE,
    ENERGY_TEMPLATE,
    PROJECT_TEMPLATE,
    RECOMMENDATION_TEMPLATE,
    TROUBLESHOOTING_TEMPLATE,
    PromptTemplate,
)


@dataclass(frozen=True)
class Capability:
    """Everything the executor needs to run one capability.

    Attributes:
        name: URL slug, e.g. "electrical-advice".
        request_model: Input contract.
        template: Prompt template (carries the output contract).
        shape: Puts a message into the best-fit output field.
        canned: Builds the degraded-mode response.
        validation_message: Shown when required input is missing.
        failure_message: Shown when the model call fails.
    """
    name: str
    request_model: type[CapabilityRequest]
    template: PromptTemplate
    shape: Callable[[str], BaseModel]
    canned: Callable[[], BaseModel]
    validation_message: str
    failure_message: str

    @property
    def output_model(self) -> type[BaseModel]:
        return self.template.output_model

    def validation_response(self, message: str | None = None) -> BaseModel:
        return self.shape(message or self.validation_message)

    def failure_response(self) -> BaseModel:
        return self.shape(fallbacks.with_contact(self.failure_message))

    def rate_limited_response(self, message: str) -> BaseModel:
        return self.shape(fallbacks.with_contact(message))


ADVICE = Capability(
    name="electrical-advice",
    request_model=AdviceRequest,
    template=ADVICE_TEMPLATE,
    shape=fallbacks.advice_shape,
    canned=fallbacks.advice_canned,
    validation_message="Please provide a valid question.",
    failure_message="Sorry, I encountered an error trying to get advice. Please try again.",
)

TROUBLESHOOTING = Capability(
    name="troubleshooting-advice",
    request_model=TroubleshootingRequest,
    template=TROUBLESHOOTING_TEMPLATE,
    shape=fallbacks.troubleshooting_shape,
    canned=fallbacks.troubleshooting_canned,
    validation_message="Please describe your electrical problem.",
    failure_message="Sorry, I encountered an error trying to get troubleshooting steps. Please try again.",
)

RECOMMENDATION = Capability(
    name="accessory-recommendation",
    request_model=RecommendationRequest,
    template=RECOMMENDATION_TEMPLATE,
    shape=fallbacks.recommendation_shape,
    canned=fallbacks.recommendation_canned,
    validation_message="Please describe your electrical accessory needs.",
    failure_message="Sorry, I couldn't fetch recommendations at this time.",
)

ENERGY = Capability(
    name="energy-savings-estimator",
    request_model=EnergySavingRequest,
    template=ENERGY_TEMPLATE,
    shape=fallbacks.energy_shape,
    canned=fallbacks.energy_canned,
    validation_message="Please describe your household appliances and how long you use them each day.",
    failure_message="Sorry, I encountered an error trying to generate an estimate. Please try again later.",
)

PROJECT = Capability(
    name="project-planner",
    request_model=ProjectPlanRequest,
    template=PROJECT_TEMPLATE,
    shape=fallbacks.project_shape,
    canned=fallbacks.project_canned,
    validation_message="Please describe the electrical project you have in mind.",
    failure_message="Sorry, an error occurred while trying to generate the project plan.",
)

CAPABILITIES: dict[str, Capability] = {
    c.name: c for c in (ADVICE, TROUBLESHOOTING, RECOMMENDATION, ENERGY, PROJECT)
}
