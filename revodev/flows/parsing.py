"""Model output parsing: structured JSON when possible, salvaged text otherwise."""

from dataclasses import dataclass
from typing import Any, get_args, get_origin

import structlog
from langchain_core.exceptions import OutputParserException
from langchain_core.output_parsers import PydanticOutputParser
from langchain_core.utils.json import parse_json_markdown
from pydantic import BaseModel, ValidationError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Parsed:
    """Reply matched the output contract."""
    output: BaseModel


@dataclass(frozen=True)
class Salvaged:
    """Reply did not match the contract.

    `fields` holds the decoded object when the reply was a JSON object with
    the wrong shape; it is None for free text.
    """
    raw_text: str
    fields: dict[str, Any] | None = None


ParseResult = Parsed | Salvaged


def parse_model_output(text: str, output_model: type[BaseModel]) -> ParseResult:
    """Parse a model reply against `output_model`.

    Handles bare JSON and JSON wrapped in markdown code fences.

    Args:
        text: Raw model reply.
        output_model: Pydantic model of the expected JSON object.

    Returns:
        Parsed(output) on success, Salvaged(text, fields) if the reply is not
        valid JSON or does not match the contract.
    """
    parser = PydanticOutputParser(pydantic_object=output_model)
    try:
        return Parsed(parser.parse(text))
    except OutputParserException as e:
        logger.warning("parse.salvaged", model=output_model.__name__,
                       reply_chars=len(text), error=str(e)[:200])

    try:
        decoded = parse_json_markdown(text)
    except ValueError:
        decoded = None
    return Salvaged(text, decoded if isinstance(decoded, dict) else None)


def salvage_fields(fields: dict[str, Any], output_model: type[BaseModel], base: BaseModel) -> BaseModel | None:
    """Fit a near-miss JSON object onto `output_model` field by field.

    Lists are joined into string fields, strings are wrapped into list fields,
    and fields the reply left out keep their value from `base`.

    Returns:
        The coerced output, or None when no field matched or the result still
        fails validation.
    """
    values = base.model_dump()
    matched = 0
    for name, field in output_model.model_fields.items():
        raw = fields.get(field.alias or name, fields.get(name))
        if raw is None:
            continue
        values[name] = _coerce(raw, field.annotation)
        matched += 1

    if not matched:
        return None
    try:
        return output_model.model_validate(values)
    except ValidationError as e:
        logger.info("parse.fields_unsalvageable", model=output_model.__name__, errors=e.error_count())
        return None


def _coerce(value: Any, annotation: Any) -> Any:
    if annotation is str:
        if isinstance(value, list):
            return "\n".join(str(v) for v in value if v not in (None, ""))
        if isinstance(value, (int, float)):
            return str(value)
        return value

    if get_origin(annotation) is list:
        if isinstance(value, str):
            value = [value]
        if get_args(annotation) == (str,) and isinstance(value, list):
            return [v if isinstance(v, str) else str(v) for v in value]
    return value
