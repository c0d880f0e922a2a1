"""
Forma del documento declarativo que consume el renderer.
Los nombres de campo son parte del contrato con el renderer.
"""
from types import MappingProxyType
from typing import Any, Iterator

OUTPUT_FORMAT = "mp4"
WIDTH = 1080
HEIGHT = 1920

VIDEO_TRACK = 1
CAPTION_TRACK = 2
AUDIO_TRACK = 3

CAPTION_WIDTH = "50%"
CAPTION_X_ALIGNMENT = "50%"
# Posición del ensamblador, previa a la configuración del usuario
ASSEMBLY_Y_ALIGNMENT = "85%"
CAPTION_MAXIMUM_LENGTH = 35
CAPTION_FONT_FAMILY = "Montserrat"
CAPTION_FONT_SIZE = "8 vmin"

# Posición con nombre -> y_alignment
PLACEMENT_MAPPING = MappingProxyType({
    "top": "10%",
    "center": "50%",
    "bottom": "90%",
})

TTS_MODEL = "eleven_multilingual_v2"
TTS_STABILITY = 0.75
TTS_SIMILARITY_BOOST = 0.75


def tts_provider(voice_id: str) -> str:
    """Descriptor TTS; igual para todas las escenas de un documento."""
    return (
        f"elevenlabs model_id={TTS_MODEL} voice_id={voice_id} "
        f"stability={TTS_STABILITY:.2f} similarity_boost={TTS_SIMILARITY_BOOST:.2f}"
    )


def video_element(source: str) -> dict:
    return {
        "type": "video",
        "source": source,
        "track": VIDEO_TRACK,
        "fit": "cover",
        "time": "auto",
        "duration": "auto",
        "volume": 0,
    }


def audio_element(audio_id: str, text: str, provider: str) -> dict:
    return {
        "id": audio_id,
        "type": "audio",
        "track": AUDIO_TRACK,
        "source": text,
        "provider": provider,
        "dynamic": True,
    }


def caption_element(transcript_source: str, effect: str, color: str) -> dict:
    return {
        "type": "text",
        "track": CAPTION_TRACK,
        "width": CAPTION_WIDTH,
        "x_alignment": CAPTION_X_ALIGNMENT,
        "y_alignment": ASSEMBLY_Y_ALIGNMENT,
        "transcript_source": transcript_source,
        "transcript_effect": effect,
        "transcript_color": color,
        "transcript_maximum_length": CAPTION_MAXIMUM_LENGTH,
        "font_family": CAPTION_FONT_FAMILY,
        "font_size": CAPTION_FONT_SIZE,
    }


def empty_document() -> dict:
    return {"output_format": OUTPUT_FORMAT, "width": WIDTH, "height": HEIGHT, "elements": []}


def is_caption_element(element: Any) -> bool:
    """Un elemento de texto con transcript_source (o llamado Subtitles-*) es un subtítulo."""
    if not isinstance(element, dict) or element.get("type") != "text":
        return False
    if "transcript_source" in element:
        return True
    name = element.get("name")
    return isinstance(name, str) and "subtitle" in name.lower()


def iter_compositions(document: dict) -> Iterator[dict]:
    """Composiciones con lista de elementos; el resto se ignora."""
    elements = document.get("elements")
    if not isinstance(elements, list):
        return
    for composition in elements:
        if isinstance(composition, dict) and isinstance(composition.get("elements"), list):
            yield composition
