"""Pydantic models for the API layer.

Defines request/response schemas for every capability endpoint, the
conversation history types and the UI transcript format. JSON field names are
camelCase on the wire; Python attributes are snake_case.
"""

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model with camelCase aliases, accepting either naming on input."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# Conversation history

class InlineImage(CamelModel):
    """Image payload split out of a data URI."""
    mime_type: str = Field(..., min_length=1)
    base64_data: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("base64Data", "data", "base64_data"),
    )

    def to_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64_data}"


class TextPart(CamelModel):
    text: str


class ImagePart(CamelModel):
    inline_image: InlineImage = Field(
        ...,
        validation_alias=AliasChoices("inlineImage", "inlineData", "inline_image"),
    )


ContentPart = TextPart | ImagePart


class ConversationTurn(CamelModel):
    """One role-tagged entry of model-ready history."""
    role: Literal["user", "model"]
    parts: list[ContentPart] = Field(..., min_length=1)

    def text(self) -> str:
        """Concatenated text of all text parts."""
        return "".join(p.text for p in self.parts if isinstance(p, TextPart))

    def has_image(self) -> bool:
        return any(isinstance(p, ImagePart) for p in self.parts)


class UIMessage(CamelModel):
    """Single message of the chat UI transcript, before history conversion."""
    id: str = ""
    sender: Literal["user", "ai"]
    content: str | dict[str, Any] | None = None
    type: Literal[
        "text", "loading", "error", "intro",
        "advice", "troubleshooting", "recommendation", "energy", "project",
    ] | None = None
    image: str | None = None


# Capability outputs

class AdviceOutput(CamelModel):
    answer: str = Field(
        ...,
        description="The answer to the electrical question, tailored to the Nigerian context, "
                    "considering any provided image and conversation history.",
    )


class TroubleshootingOutput(CamelModel):
    troubleshooting_steps: str = Field(
        ...,
        description="A list of troubleshooting steps to resolve the electrical problem, "
                    "taking into account common issues in Nigeria.",
    )
    safety_precautions: str = Field(
        ...,
        description="Important safety precautions to take before, during, and after "
                    "attempting the troubleshooting steps.",
    )


class RecommendationOutput(CamelModel):
    accessories: list[str] = Field(
        ...,
        description="A list of recommended electrical accessories available in the Nigerian market.",
    )
    justification: str = Field(
        ...,
        description="Justification for the recommended accessories. Mention that Revogreen "
                    "Energy Hub stocks such items and how the user can inquire further.",
    )


class SavingSuggestion(CamelModel):
    appliance_match: str = Field(
        ...,
        description="The appliance or group of appliances from the user input this suggestion pertains to.",
    )
    suggestion: str = Field(..., description='The energy-saving suggestion (e.g. "Switch to LED bulbs").')
    details: str = Field(
        ...,
        description="Details about the potential savings or benefits, mentioning Revogreen "
                    "products where appropriate.",
    )


class EnergySavingOutput(CamelModel):
    overall_assessment: str = Field(
        ...,
        description="A brief overall assessment of likely energy usage (low, moderate, high) "
                    "based on the described appliances.",
    )
    suggestions: list[SavingSuggestion] = Field(
        default_factory=list,
        description="A list of personalized energy-saving suggestions.",
    )
    general_tips: list[str] = Field(
        default_factory=list,
        description="General energy-saving tips for Nigerian households, including one about "
                    "contacting Revogreen Energy Hub for consultations or products.",
    )


class ProjectPlanOutput(CamelModel):
    project_name: str = Field(..., description="A suitable name for the described project.")
    materials_needed: list[str] = Field(
        default_factory=list,
        description="Typical materials needed for the project in Nigeria. Emphasize SON-certified items.",
    )
    tools_typically_required: list[str] = Field(
        default_factory=list,
        description="Common tools required for the project.",
    )
    safety_precautions: list[str] = Field(
        default_factory=list,
        description="Crucial safety precautions. Stress turning off main power and consulting "
                    "a professional if unsure.",
    )
    additional_advice: str = Field(
        "",
        description="Other relevant advice, including that Revogreen Energy Hub stocks quality "
                    "materials and can offer professional help.",
    )
    is_complex_project: bool = Field(
        False,
        description="Whether the project is too complex or dangerous for an average DIYer.",
    )


CapabilityOutput = (
    AdviceOutput
    | TroubleshootingOutput
    | RecommendationOutput
    | EnergySavingOutput
    | ProjectPlanOutput
)


# Capability requests

class CapabilityRequest(CamelModel):
    """Base for capability requests without conversation context."""

    def prompt_values(self) -> dict[str, Any]:
        """Fields substituted into the prompt template."""
        return self.model_dump(exclude={"conversation_history", "transcript", "image_data_uri"})


class ConversationalRequest(CapabilityRequest):
    """Capability request that may carry prior conversation.

    Clients send either model-ready turns, their raw UI transcript, or both.
    """
    conversation_history: list[ConversationTurn] | None = None
    transcript: list[UIMessage] | None = None


class AdviceRequest(ConversationalRequest):
    question: str = Field(..., min_length=1, max_length=4000)
    image_data_uri: str | None = Field(None, description="data:<mimetype>;base64,<data>")


class TroubleshootingRequest(ConversationalRequest):
    problem_description: str = Field(..., min_length=1, max_length=4000)


class RecommendationRequest(ConversationalRequest):
    needs: str = Field(..., min_length=1, max_length=4000)


class EnergySavingRequest(CapabilityRequest):
    appliances_description: str = Field(..., min_length=1, max_length=4000)


class ProjectPlanRequest(CapabilityRequest):
    project_description: str = Field(..., min_length=1, max_length=4000)


# Energy consumption calculator

class ApplianceUsage(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    watts: float = Field(..., gt=0)
    hours_per_day: float = Field(..., ge=0, le=24)


class EnergyConsumptionRequest(CamelModel):
    appliances: list[ApplianceUsage] = Field(default_factory=list)
    period: Literal["day", "week", "month", "year"] = "month"
    tariff: float | None = Field(None, ge=0, description="Electricity tariff in NGN per kWh")


class ApplianceConsumption(CamelModel):
    name: str
    kwh: float = Field(..., alias="kWh")


class EnergyConsumptionResponse(CamelModel):
    period: Literal["day", "week", "month", "year"]
    total_kwh: float = Field(..., alias="totalKWh")
    total_cost: float | None = None
    breakdown: list[ApplianceConsumption] = Field(default_factory=list)
