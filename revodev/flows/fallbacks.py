"""Capability-shaped fallback responses.

Each `*_shape` function places a message in the best-fit field of a
capability's output and fills the remaining fields with safe defaults. The
same shapes carry validation messages, rate-limit notices, provider-failure
apologies and salvaged free text. Canned responses are the fuller answers
served when no model credential is configured.
"""

from revodev.api.schemas import (
    AdviceOutput,
    EnergySavingOutput,
    ProjectPlanOutput,
    RecommendationOutput,
    TroubleshootingOutput,
)
from revodev.flows.prompts import BUSINESS_NAME, CONTACT_PHONE

CONTACT_LINE = f"For immediate assistance, contact {BUSINESS_NAME} at {CONTACT_PHONE}."
SAFETY_REMINDER = (
    "Always turn OFF the main power before working on electrical systems and never work on live wires. "
    f"If unsure, contact a qualified electrician. {BUSINESS_NAME}: {CONTACT_PHONE}"
)


def with_contact(message: str) -> str:
    """Append the human contact channel unless the message already names it."""
    if CONTACT_PHONE in message:
        return message
    return f"{message} {CONTACT_LINE}"


def advice_shape(message: str) -> AdviceOutput:
    return AdviceOutput(answer=message)


def troubleshooting_shape(message: str) -> TroubleshootingOutput:
    return TroubleshootingOutput(troubleshooting_steps=message, safety_precautions=SAFETY_REMINDER)


def recommendation_shape(message: str) -> RecommendationOutput:
    return RecommendationOutput(accessories=[], justification=message)


def energy_shape(message: str) -> EnergySavingOutput:
    return EnergySavingOutput(
        overall_assessment=message,
        suggestions=[],
        general_tips=[
            "Switch off appliances at the socket when not in use.",
            f"Call {BUSINESS_NAME} on {CONTACT_PHONE} for energy-saving products and consultation.",
        ],
    )


def project_shape(message: str) -> ProjectPlanOutput:
    return ProjectPlanOutput(
        project_name="Electrical Project",
        materials_needed=[],
        tools_typically_required=[],
        safety_precautions=[SAFETY_REMINDER],
        additional_advice=message,
        is_complex_project=False,
    )


# Canned responses for degraded mode (no model credential)

def advice_canned() -> AdviceOutput:
    return AdviceOutput(answer=(
        "Thank you for your electrical question! Our AI assistant is currently being configured. "
        f"For immediate expert electrical advice and quality accessories, please contact {BUSINESS_NAME} "
        f"directly at {CONTACT_PHONE}. We're your trusted electrical supply partner in Ibadan, serving all "
        "of Nigeria with SON-certified products and professional guidance!"
    ))


def troubleshooting_canned() -> TroubleshootingOutput:
    return TroubleshootingOutput(
        troubleshooting_steps=(
            "Our AI troubleshooting assistant is being set up. For immediate electrical problem solving "
            f"and expert guidance, please contact {BUSINESS_NAME} at {CONTACT_PHONE}. Our experienced "
            "team can help diagnose and solve your electrical issues safely."
        ),
        safety_precautions=f"IMPORTANT SAFETY: {SAFETY_REMINDER}",
    )


def recommendation_canned() -> RecommendationOutput:
    return RecommendationOutput(
        accessories=[
            "SON-certified switches and sockets",
            "Quality copper wires (various gauges)",
            "Energy-saving LED bulbs",
            "Distribution boards and breakers",
            "Cable protection accessories",
        ],
        justification=(
            "Our AI recommendation system is being configured. For personalized electrical accessory "
            f"recommendations based on your specific needs, please contact {BUSINESS_NAME} at "
            f"{CONTACT_PHONE}. We stock a complete range of SON-certified electrical accessories in "
            "Ibadan and ship nationwide."
        ),
    )


def energy_canned() -> EnergySavingOutput:
    return EnergySavingOutput(
        overall_assessment=(
            "Our AI energy estimator is being configured, so we can't analyse your appliance list "
            f"right now. Call {BUSINESS_NAME} at {CONTACT_PHONE} for a personal energy consultation."
        ),
        suggestions=[],
        general_tips=[
            "Replace incandescent bulbs with LED bulbs; a 9W LED gives about the same light as a 60W bulb.",
            "Switch off and unplug appliances that are not in use, especially during outages to protect "
            "them from surges when power returns.",
            "Use a stabilizer or surge protector for sensitive appliances like fridges and TVs.",
            f"Visit {BUSINESS_NAME} in Akobo, Ibadan or call {CONTACT_PHONE} for SON-certified "
            "energy-saving products.",
        ],
    )


def project_canned() -> ProjectPlanOutput:
    return ProjectPlanOutput(
        project_name="Electrical Project Planning",
        materials_needed=["Contact our experts for a material list tailored to your project"],
        tools_typically_required=["Voltage tester", "Insulated screwdrivers", "Pliers/wire stripper"],
        safety_precautions=[
            "ALWAYS turn off power at the main breaker before starting!",
            "Test for power with a voltage tester before touching any wires.",
            "If unsure at any point, call a qualified electrician.",
        ],
        additional_advice=(
            "Our AI project planner is being configured. For a full plan and quality SON-certified "
            f"materials, contact {BUSINESS_NAME} at {CONTACT_PHONE}."
        ),
        is_complex_project=False,
    )
