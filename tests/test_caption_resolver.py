"""
Tests de la resolución de subtítulos: precedencia, activación y tolerancia
a configuraciones malformadas.
"""

import copy

import pytest

from creador_plantillas.captions.resolver import apply_captions, caption_structure, resolve_caption_style
from creador_plantillas.domain import document as doc
from creador_plantillas.domain.models import CaptionConfiguration


def _document(*, named_caption=False):
    caption = doc.caption_element("voz-1", "bounce", "#123456")
    if named_caption:
        caption.pop("transcript_source")
        caption["name"] = "Subtitles-1"
    result = doc.empty_document()
    result["elements"].append({
        "type": "composition",
        "track": 1,
        "elements": [
            doc.video_element("https://cdn.example.com/a.mp4"),
            doc.audio_element("voz-1", "Hola.", doc.tts_provider("v")),
            caption,
            {"type": "text", "text": "Título", "track": 4},
        ],
    })
    return result


def _captions(document):
    return [el for comp in document["elements"] for el in comp["elements"] if doc.is_caption_element(el)]


def test_default_style():
    style = resolve_caption_style(None)
    assert style.enabled
    assert style.preset_id == "karaoke"
    assert (style.transcript_color, style.transcript_effect, style.placement) == ("#04f827", "karaoke", "bottom")
    assert style.y_alignment == "90%"


def test_preset_selection():
    style = resolve_caption_style({"presetId": "beasty"})
    assert (style.transcript_color, style.transcript_effect) == ("#FFFD03", "highlight")


def test_override_wins_over_preset():
    style = resolve_caption_style({"presetId": "beasty", "transcriptColor": "#FF0000", "placement": "top"})
    assert style.transcript_color == "#FF0000"
    assert style.transcript_effect == "highlight"
    assert style.y_alignment == "10%"


def test_fields_resolve_independently():
    color_only = resolve_caption_style({"transcriptColor": "#FF5722"})
    assert (color_only.transcript_color, color_only.transcript_effect) == ("#FF5722", "karaoke")

    effect_only = resolve_caption_style({"transcriptEffect": "bounce"})
    assert (effect_only.transcript_color, effect_only.transcript_effect) == ("#04f827", "bounce")


def _multi_scene_document(scenes=3):
    result = doc.empty_document()
    for i in range(scenes):
        audio_id = f"voz-{i + 1}"
        result["elements"].append({
            "type": "composition",
            "track": 1,
            "elements": [
                doc.video_element(f"https://cdn.example.com/{i}.mp4"),
                doc.audio_element(audio_id, f"Escena {i + 1}.", doc.tts_provider("v")),
                doc.caption_element(audio_id, "slide", "#ABCDEF"),
            ],
        })
    return result


@pytest.mark.parametrize("config,color,effect", [
    ({"presetId": "karaoke", "transcriptColor": "#FF5722"}, "#FF5722", "karaoke"),
    ({"presetId": "karaoke", "transcriptEffect": "bounce"}, "#04f827", "bounce"),
])
def test_override_keeps_other_preset_fields(config, color, effect):
    result = apply_captions(_multi_scene_document(), config)
    captions = _captions(result)
    assert len(captions) == 3
    for caption in captions:
        assert caption["transcript_color"] == color
        assert caption["transcript_effect"] == effect


def test_same_inputs_give_same_output():
    base = _multi_scene_document()
    config = {"presetId": "beasty", "transcriptColor": "#FF5722", "placement": "center"}
    assert apply_captions(base, config) == apply_captions(base, config)


@pytest.mark.parametrize("placement,y_alignment", [("top", "10%"), ("center", "50%"), ("bottom", "90%")])
def test_placement_mapping(placement, y_alignment):
    result = apply_captions(_document(), {"placement": placement})
    assert _captions(result)[0]["y_alignment"] == y_alignment


def test_invalid_override_falls_back_to_preset():
    style = resolve_caption_style({
        "presetId": "beasty",
        "transcriptColor": "amarillo",
        "transcriptEffect": "explode",
        "placement": "left",
    })
    assert (style.transcript_color, style.transcript_effect, style.placement) == ("#FFFD03", "highlight", "bottom")


def test_unknown_preset_uses_default():
    style = resolve_caption_style({"presetId": "no-existe"})
    assert style.preset_id == "karaoke"
    assert style.transcript_color == "#04f827"


def test_snake_case_and_model_input():
    assert resolve_caption_style({"preset_id": "beasty"}).preset_id == "beasty"
    config = CaptionConfiguration(preset_id="beasty", transcript_effect="fade")
    style = resolve_caption_style(config)
    assert (style.preset_id, style.transcript_effect) == ("beasty", "fade")


@pytest.mark.parametrize("config", [
    None,
    "karaoke",
    42,
    ["beasty"],
    {"presetId": "not-a-real-preset"},
    {"enabled": "yes", "presetId": 123, "placement": "diagonal", "transcriptColor": "banana"},
])
def test_malformed_config_never_raises(config):
    result = apply_captions(_document(), config)
    captions = _captions(result)
    assert len(captions) == 1
    assert captions[0]["transcript_color"] == "#04f827"


def test_only_explicit_false_disables():
    for value in ("false", 0, None, "no"):
        assert resolve_caption_style({"enabled": value}).enabled
    assert not resolve_caption_style({"enabled": False}).enabled


def test_apply_styles_caption_only():
    original = _document()
    result = apply_captions(original, {"presetId": "beasty", "placement": "center"})

    caption = _captions(result)[0]
    assert caption["transcript_color"] == "#FFFD03"
    assert caption["transcript_effect"] == "highlight"
    assert caption["y_alignment"] == "50%"
    assert caption["transcript_source"] == "voz-1"

    # El texto que no es subtítulo queda igual
    title = result["elements"][0]["elements"][3]
    assert title == {"type": "text", "text": "Título", "track": 4}


def test_apply_does_not_mutate_input():
    original = _document()
    snapshot = copy.deepcopy(original)
    apply_captions(original, {"presetId": "beasty"})
    apply_captions(original, {"enabled": False})
    assert original == snapshot


def test_disabled_removes_captions():
    result = apply_captions(_document(), {"enabled": False})
    elements = result["elements"][0]["elements"]
    assert _captions(result) == []
    assert [el["type"] for el in elements] == ["video", "audio", "text"]

    again = apply_captions(result, {"enabled": False})
    assert again == result


def test_named_caption_is_recognized():
    result = apply_captions(_document(named_caption=True), {"presetId": "beasty"})
    assert _captions(result)[0]["transcript_color"] == "#FFFD03"
    assert _captions(apply_captions(_document(named_caption=True), {"enabled": False})) == []


def test_apply_is_idempotent():
    config = {"presetId": "beasty", "placement": "top"}
    once = apply_captions(_document(), config)
    assert apply_captions(once, config) == once


def test_non_document_is_returned_as_is():
    assert apply_captions(None, {"presetId": "beasty"}) is None
    assert apply_captions(["x"], None) == ["x"]


def test_caption_structure():
    assert caption_structure({"enabled": False}) is None
    hint = caption_structure({"presetId": "beasty", "placement": "top"})
    assert hint["y_alignment"] == "10%"
    assert hint["transcript_color"] == "#FFFD03"
    assert hint["track"] == 2
