"""Unit tests for Pydantic API schemas."""

import pytest
from pydantic import ValidationError

from revodev.api.schemas import (
    AdviceOutput,
    AdviceRequest,
    ConversationTurn,
    EnergyConsumptionRequest,
    EnergyConsumptionResponse,
    EnergySavingRequest,
    ImagePart,
    ProjectPlanOutput,
    RecommendationOutput,
    TroubleshootingRequest,
    UIMessage,
)


class TestAdviceRequest:

    def test_valid_request(self):
        req = AdviceRequest(question="What size breaker for a water heater?")
        assert req.question == "What size breaker for a water heater?"
        assert req.conversation_history is None

    def test_camel_case_input(self):
        req = AdviceRequest.model_validate({"question": "Is this safe?", "imageDataUri": "data:image/png;base64,QUJD"})
        assert req.image_data_uri == "data:image/png;base64,QUJD"

    def test_empty_question_rejected(self):
        with pytest.raises(ValidationError):
            AdviceRequest(question="")

    def test_whitespace_question_rejected(self):
        with pytest.raises(ValidationError):
            AdviceRequest(question="   ")

    def test_question_max_length(self):
        with pytest.raises(ValidationError):
            AdviceRequest(question="x" * 4001)

    def test_question_stripped(self):
        assert AdviceRequest(question="  hello  ").question == "hello"

    def test_prompt_values_exclude_context(self):
        req = AdviceRequest.model_validate({
            "question": "why?",
            "imageDataUri": "data:image/png;base64,QUJD",
            "conversationHistory": [{"role": "user", "parts": [{"text": "hi"}]}],
        })
        assert req.prompt_values() == {"question": "why?"}


class TestOtherRequests:

    def test_troubleshooting_camel_case(self):
        req = TroubleshootingRequest.model_validate({"problemDescription": "Sparks from socket"})
        assert req.problem_description == "Sparks from socket"

    def test_troubleshooting_snake_case_accepted(self):
        req = TroubleshootingRequest.model_validate({"problem_description": "Sparks"})
        assert req.problem_description == "Sparks"

    def test_energy_request_has_no_history(self):
        assert "conversation_history" not in EnergySavingRequest.model_fields


class TestConversationTurn:

    def test_text_parts(self):
        turn = ConversationTurn.model_validate({"role": "user", "parts": [{"text": "a"}, {"text": "b"}]})
        assert turn.text() == "ab"
        assert not turn.has_image()

    def test_inline_data_alias(self):
        turn = ConversationTurn.model_validate({
            "role": "user",
            "parts": [{"inlineData": {"mimeType": "image/jpeg", "data": "QUJD"}}],
        })
        assert isinstance(turn.parts[0], ImagePart)
        assert turn.parts[0].inline_image.base64_data == "QUJD"
        assert turn.parts[0].inline_image.to_data_uri() == "data:image/jpeg;base64,QUJD"

    def test_invalid_role_rejected(self):
        with pytest.raises(ValidationError):
            ConversationTurn.model_validate({"role": "system", "parts": [{"text": "x"}]})

    def test_empty_parts_rejected(self):
        with pytest.raises(ValidationError):
            ConversationTurn.model_validate({"role": "user", "parts": []})


class TestUIMessage:

    def test_structured_content(self):
        msg = UIMessage.model_validate({"id": "1", "sender": "ai", "content": {"answer": "x"}, "type": "advice"})
        assert msg.content == {"answer": "x"}

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            UIMessage.model_validate({"id": "1", "sender": "ai", "content": "x", "type": "banner"})


class TestOutputs:

    def test_camel_case_serialization(self):
        plan = ProjectPlanOutput(project_name="Install socket", is_complex_project=True)
        data = plan.model_dump(by_alias=True)
        assert data["projectName"] == "Install socket"
        assert data["isComplexProject"] is True
        assert data["materialsNeeded"] == []

    def test_recommendation_requires_list(self):
        with pytest.raises(ValidationError):
            RecommendationOutput.model_validate({"justification": "x"})

    def test_advice_output_round_trip(self):
        out = AdviceOutput.model_validate_json('{"answer": "Use an RCD."}')
        assert out.answer == "Use an RCD."


class TestEnergyConsumption:

    def test_defaults(self):
        req = EnergyConsumptionRequest()
        assert req.period == "month"
        assert req.appliances == []
        assert req.tariff is None

    def test_camel_case_appliance(self):
        req = EnergyConsumptionRequest.model_validate(
            {"appliances": [{"name": "Fan", "watts": 75, "hoursPerDay": 10}], "period": "day"}
        )
        assert req.appliances[0].hours_per_day == 10

    @pytest.mark.parametrize("appliance", [
        {"name": "Fan", "watts": 0, "hoursPerDay": 1},
        {"name": "Fan", "watts": 75, "hoursPerDay": 25},
        {"name": "Fan", "watts": 75, "hoursPerDay": -1},
        {"name": "", "watts": 75, "hoursPerDay": 1},
    ])
    def test_invalid_appliance(self, appliance):
        with pytest.raises(ValidationError):
            EnergyConsumptionRequest.model_validate({"appliances": [appliance]})

    def test_invalid_period(self):
        with pytest.raises(ValidationError):
            EnergyConsumptionRequest.model_validate({"period": "fortnight"})

    def test_response_aliases(self):
        resp = EnergyConsumptionResponse(period="day", total_kwh=1.5, breakdown=[])
        data = resp.model_dump(by_alias=True)
        assert data["totalKWh"] == 1.5
        assert data["totalCost"] is None
