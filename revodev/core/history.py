"""Conversation history reduction.

Turns a chat UI transcript into model-ready ConversationTurns and trims
history to the most recent turns before it is rendered into a prompt.

Structured AI content is parsed by the message `type` tag. Content without an
output tag is read as an advice answer (`{"answer": ...}`); anything that does
not validate against the selected shape is dropped.
"""

from collections.abc import Iterable, Sequence

import structlog
from pydantic import ValidationError

from revodev.api.schemas import (
    AdviceOutput,
    CapabilityOutput,
    ConversationTurn,
    EnergySavingOutput,
    ImagePart,
    ProjectPlanOutput,
    RecommendationOutput,
    TextPart,
    TroubleshootingOutput,
    UIMessage,
)
from revodev.core.guardrails import parse_data_uri

logger = structlog.get_logger(__name__)

DEFAULT_MAX_TURNS = 8

# UI-only message kinds that must never reach the model
_UI_ONLY_TYPES = {"loading", "error", "intro"}

# Structured AI content is parsed by its type tag, never by sniffing keys
_OUTPUT_MODELS: dict[str, type[CapabilityOutput]] = {
    "advice": AdviceOutput,
    "troubleshooting": TroubleshootingOutput,
    "recommendation": RecommendationOutput,
    "energy": EnergySavingOutput,
    "project": ProjectPlanOutput,
}


def output_to_text(output: CapabilityOutput) -> str:
    """Flatten a structured capability output into one text blob for history."""
    if isinstance(output, AdviceOutput):
        return output.answer
    if isinstance(output, TroubleshootingOutput):
        precautions = output.safety_precautions or "Follow standard safety guidelines."
        return f"{output.troubleshooting_steps}\n\nSafety Precautions: {precautions}"
    if isinstance(output, RecommendationOutput):
        return f"Recommended accessories: {', '.join(output.accessories)}\n\n{output.justification}"
    if isinstance(output, EnergySavingOutput):
        lines = [output.overall_assessment]
        lines += [f"- {s.appliance_match}: {s.suggestion}. {s.details}" for s in output.suggestions]
        if output.general_tips:
            lines.append("Tips: " + " ".join(output.general_tips))
        return "\n".join(lines)
    if isinstance(output, ProjectPlanOutput):
        return (
            f"Project: {output.project_name}\n"
            f"Materials: {', '.join(output.materials_needed)}\n"
            f"Tools: {', '.join(output.tools_typically_required)}\n"
            f"Safety: {' '.join(output.safety_precautions)}\n"
            f"{output.additional_advice}"
        ).strip()
    raise TypeError(f"Unsupported output type: {type(output).__name__}")


def _is_ui_only(message: UIMessage) -> bool:
    return message.type in _UI_ONLY_TYPES or "-intro-" in message.id


def _user_turn(message: UIMessage) -> ConversationTurn | None:
    parts = []
    if isinstance(message.content, str) and message.content:
        parts.append(TextPart(text=message.content))

    if message.image:
        image = parse_data_uri(message.image)
        if image is None:
            logger.warning("history.image_dropped", message_id=message.id, reason="invalid_data_uri")
        else:
            parts.append(ImagePart(inline_image=image))

    if not parts:
        return None
    return ConversationTurn(role="user", parts=parts)


def _model_turn(message: UIMessage) -> ConversationTurn | None:
    content = message.content
    text = ""

    if isinstance(content, str):
        text = content
    elif isinstance(content, dict):
        # Untagged (or "text") structured content is read as an advice answer
        model = _OUTPUT_MODELS.get(message.type or "", AdviceOutput)
        try:
            text = output_to_text(model.model_validate(content))
        except ValidationError as e:
            logger.warning("history.content_invalid", message_id=message.id,
                           type=message.type, errors=e.error_count())
            return None

    if not text.strip():
        return None
    return ConversationTurn(role="model", parts=[TextPart(text=text)])


def to_model_history(messages: Iterable[UIMessage] | None) -> list[ConversationTurn]:
    """Convert a UI transcript into model-ready history.

    Args:
        messages: UI messages in display order. None or empty yields [].

    Returns:
        ConversationTurns in the same order, with loading placeholders, error
        messages and mode-introduction banners removed.
    """
    history: list[ConversationTurn] = []
    for message in messages or []:
        if _is_ui_only(message):
            continue
        turn = _user_turn(message) if message.sender == "user" else _model_turn(message)
        if turn is not None:
            history.append(turn)
    return history


def trim_history(
    history: Sequence[ConversationTurn] | None,
    max_turns: int = DEFAULT_MAX_TURNS,
) -> list[ConversationTurn]:
    """Keep only the most recent `max_turns` turns, in original order."""
    if not history or max_turns <= 0:
        return []
    return list(history[-max_turns:])
