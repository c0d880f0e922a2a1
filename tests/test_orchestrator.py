"""
Tests del pipeline completo con un LLM falso.
"""

import pytest

from creador_plantillas.director.validator import StructuralValidator, ValidationResult
from creador_plantillas.domain import document as doc
from creador_plantillas.domain.errors import BuildRequestError, PlanningError, ValidationFailure
from creador_plantillas.domain.models import BuildRequest
from creador_plantillas.orchestrator import BuildOrchestrator
from fakes import URL_BEACH, URL_CITY, FakeLLM, composition, plan_response, template_response


def _llm():
    return FakeLLM(
        plan_response(("El mar te calma.", URL_BEACH), ("La ciudad nunca duerme.", URL_CITY)),
        template_response(
            composition(URL_BEACH, "voz-1", "El mar te calma."),
            composition(URL_CITY, "voz-2", "La ciudad nunca duerme."),
        ),
    )


def _captions(document):
    return [el for comp in document["elements"] for el in comp["elements"] if doc.is_caption_element(el)]


class RejectingValidator(StructuralValidator):
    def validate(self, document, require_captions=True):
        return ValidationResult(is_valid=False, errors=["Escena 1: rechazada"])


def test_build_produces_valid_document(request_data):
    llm = _llm()
    document = BuildOrchestrator(llm_client=llm).build(request_data, model="modelo/x")

    assert StructuralValidator().validate(document)
    assert [comp["elements"][0]["source"] for comp in document["elements"]] == [URL_BEACH, URL_CITY]
    assert all(call["model"] == "modelo/x" for call in llm.calls)
    assert "voice_id=voz-123" in document["elements"][0]["elements"][1]["provider"]

    captions = _captions(document)
    assert len(captions) == 2
    assert {c["y_alignment"] for c in captions} == {"90%"}


def test_build_applies_caption_configuration(request_data):
    request_data["captionConfiguration"] = {"presetId": "beasty", "placement": "top"}
    document = BuildOrchestrator(llm_client=_llm()).build(request_data)

    for caption in _captions(document):
        assert caption["transcript_color"] == "#FFFD03"
        assert caption["transcript_effect"] == "highlight"
        assert caption["y_alignment"] == "10%"


def test_build_with_captions_disabled(request_data):
    request_data["captionConfiguration"] = {"enabled": False}
    llm = _llm()
    document = BuildOrchestrator(llm_client=llm).build(request_data)

    assert _captions(document) == []
    assert all(len(comp["elements"]) == 2 for comp in document["elements"])
    assert "USE THIS EXACT STRUCTURE" not in llm.calls[1]["user_prompt"]


def test_build_accepts_model_instance(request_data):
    request = BuildRequest.model_validate(request_data)
    document = BuildOrchestrator(llm_client=_llm()).build(request)
    assert len(document["elements"]) == 2


@pytest.mark.parametrize("bad", [
    {"script": "", "videoAssets": []},
    {"videoAssets": [{"id": "a", "url": URL_BEACH}]},
    {"script": "hola", "videoAssets": [{"id": "a", "url": ""}]},
    None,
])
def test_malformed_request(bad):
    llm = FakeLLM()
    with pytest.raises(BuildRequestError):
        BuildOrchestrator(llm_client=llm).build(bad)
    assert llm.calls == []


def test_empty_pool_is_a_planning_error(request_data):
    request_data["videoAssets"] = []
    with pytest.raises(PlanningError):
        BuildOrchestrator(llm_client=FakeLLM()).build(request_data)


def test_planning_failure_stops_pipeline(request_data):
    llm = FakeLLM(plan_response(("El mar te calma.", "https://otro.example.com/x.mp4")))
    with pytest.raises(PlanningError):
        BuildOrchestrator(llm_client=llm).build(request_data)
    assert len(llm.calls) == 1


def test_validator_is_final_gate(request_data):
    orchestrator = BuildOrchestrator(llm_client=_llm(), validator=RejectingValidator())
    with pytest.raises(ValidationFailure) as excinfo:
        orchestrator.build(request_data)
    assert excinfo.value.errors == ["Escena 1: rechazada"]


def test_orchestrator_is_reusable(request_data):
    llm = _llm()
    orchestrator = BuildOrchestrator(llm_client=llm)
    first = orchestrator.build(request_data, model="a")

    llm.responses.extend(_llm().responses)
    second = orchestrator.build(request_data, model="b")

    assert first == second
    assert [call["model"] for call in llm.calls] == ["a", "a", "b", "b"]
