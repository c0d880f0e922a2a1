"""
Validador estructural del documento declarativo.
Última barrera antes de entregar el documento al renderer.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from ..domain.document import (
    AUDIO_TRACK,
    CAPTION_TRACK,
    CAPTION_WIDTH,
    CAPTION_X_ALIGNMENT,
    HEIGHT,
    PLACEMENT_MAPPING,
    VIDEO_TRACK,
    WIDTH,
    is_caption_element,
)

logger = logging.getLogger(__name__)

VALID_Y_ALIGNMENTS = frozenset(PLACEMENT_MAPPING.values())


@dataclass
class ValidationResult:
    """Resultado de la validación."""
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __bool__(self):
        return self.is_valid


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


class StructuralValidator:
    """Validador del documento. No lanza excepciones por problemas de estructura."""

    def _validate_root(self, document: dict) -> tuple[list[str], list[str]]:
        """Dimensiones verticales y lista de composiciones."""
        errors = []
        warnings = []

        if document.get("width") != WIDTH or document.get("height") != HEIGHT:
            errors.append(
                f"Dimensiones {document.get('width')}x{document.get('height')}, "
                f"se esperaba {WIDTH}x{HEIGHT}"
            )

        elements = document.get("elements")
        if not isinstance(elements, list) or not elements:
            errors.append("El documento no tiene composiciones")

        if not document.get("output_format"):
            warnings.append("Falta output_format")

        return errors, warnings

    def _validate_video(self, label: str, videos: list[dict]) -> tuple[list[str], list[str]]:
        errors = []
        warnings = []

        if len(videos) != 1:
            errors.append(f"{label}: se esperaba 1 video, hay {len(videos)}")
            return errors, warnings

        video = videos[0]
        if video.get("track") != VIDEO_TRACK:
            errors.append(f"{label}: video en track {video.get('track')!r}, se esperaba {VIDEO_TRACK}")
        if not _non_empty_str(video.get("source")):
            errors.append(f"{label}: video sin source")
        if video.get("volume") != 0:
            warnings.append(f"{label}: volumen del video {video.get('volume')!r} (compite con la voz)")
        if video.get("fit") != "cover":
            warnings.append(f"{label}: fit {video.get('fit')!r} en lugar de 'cover'")

        return errors, warnings

    def _validate_audio(self, label: str, audios: list[dict]) -> tuple[list[str], list[str]]:
        errors = []

        if len(audios) != 1:
            errors.append(f"{label}: se esperaba 1 audio, hay {len(audios)}")
            return errors, []

        audio = audios[0]
        if audio.get("track") != AUDIO_TRACK:
            errors.append(f"{label}: audio en track {audio.get('track')!r}, se esperaba {AUDIO_TRACK}")
        if not audio.get("provider"):
            errors.append(f"{label}: audio sin provider")
        if audio.get("dynamic") is not True:
            errors.append(f"{label}: audio con dynamic={audio.get('dynamic')!r}")
        if not _non_empty_str(audio.get("id")):
            errors.append(f"{label}: audio sin id")

        return errors, []

    def _validate_caption(
        self, label: str, captions: list[dict], audios: list[dict], required: bool
    ) -> tuple[list[str], list[str]]:
        errors = []

        if not captions and not required:
            return errors, []
        if len(captions) != 1:
            errors.append(f"{label}: se esperaba 1 subtítulo, hay {len(captions)}")
            return errors, []

        caption = captions[0]
        if caption.get("track") != CAPTION_TRACK:
            errors.append(f"{label}: subtítulo en track {caption.get('track')!r}, se esperaba {CAPTION_TRACK}")
        if caption.get("width") != CAPTION_WIDTH:
            errors.append(f"{label}: ancho del subtítulo {caption.get('width')!r}")
        if caption.get("x_alignment") != CAPTION_X_ALIGNMENT:
            errors.append(f"{label}: x_alignment {caption.get('x_alignment')!r}")
        y_alignment = caption.get("y_alignment")
        if not (isinstance(y_alignment, str) and y_alignment in VALID_Y_ALIGNMENTS):
            errors.append(f"{label}: y_alignment {y_alignment!r} fuera de {sorted(VALID_Y_ALIGNMENTS)}")

        source = caption.get("transcript_source")
        if not _non_empty_str(source):
            errors.append(f"{label}: subtítulo sin transcript_source")
        elif len(audios) == 1 and source != audios[0].get("id"):
            errors.append(f"{label}: transcript_source {source!r} no coincide con el audio {audios[0].get('id')!r}")

        return errors, []

    def _validate_composition(
        self, index: int, composition: Any, require_captions: bool
    ) -> tuple[list[str], list[str]]:
        label = f"Escena {index + 1}"

        if not isinstance(composition, dict) or composition.get("type") != "composition":
            return [f"{label}: el elemento no es una composición"], []

        elements = composition.get("elements")
        if not isinstance(elements, list):
            return [f"{label}: composición sin elementos"], []

        elements = [el for el in elements if isinstance(el, dict)]
        videos = [el for el in elements if el.get("type") == "video"]
        audios = [el for el in elements if el.get("type") == "audio"]
        captions = [el for el in elements if is_caption_element(el)]

        all_errors = []
        all_warnings = []
        for errors, warnings in (
            self._validate_video(label, videos),
            self._validate_audio(label, audios),
            self._validate_caption(label, captions, audios, require_captions),
        ):
            all_errors.extend(errors)
            all_warnings.extend(warnings)

        return all_errors, all_warnings

    def validate(self, document: Any, require_captions: bool = True) -> ValidationResult:
        """
        Valida un documento completo.

        Args:
            document: Documento declarativo
            require_captions: False cuando el usuario desactivó los subtítulos

        Returns:
            ValidationResult con el resultado de la validación
        """
        if not isinstance(document, dict):
            return ValidationResult(is_valid=False, errors=["El documento no es un objeto JSON"])

        all_errors, all_warnings = self._validate_root(document)

        elements = document.get("elements")
        if isinstance(elements, list):
            for i, composition in enumerate(elements):
                errors, warnings = self._validate_composition(i, composition, require_captions)
                all_errors.extend(errors)
                all_warnings.extend(warnings)

        for warning in all_warnings:
            logger.debug(warning)

        return ValidationResult(
            is_valid=len(all_errors) == 0,
            errors=all_errors,
            warnings=all_warnings,
        )


def main():
    """Valida un documento JSON desde la línea de comandos."""
    import argparse
    import json
    from rich.console import Console
    from rich.panel import Panel

    parser = argparse.ArgumentParser(description="Structural Validator")
    parser.add_argument("--file", type=str, required=True, help="Archivo JSON con el documento")
    parser.add_argument("--no-captions", action="store_true", help="Permitir escenas sin subtítulos")
    args = parser.parse_args()

    console = Console()

    try:
        with open(args.file, "r", encoding="utf-8") as f:
            document = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Error leyendo archivo: {e}[/red]")
        raise SystemExit(1)

    result = StructuralValidator().validate(document, require_captions=not args.no_captions)

    if result.is_valid:
        console.print(Panel("[green]✓ Documento válido[/green]", title="Resultado"))
    else:
        console.print(Panel("[red]✗ Documento inválido[/red]", title="Resultado"))

    if result.errors:
        console.print("\n[red]Errores:[/red]")
        for error in result.errors:
            console.print(f"  • {error}")

    if result.warnings:
        console.print("\n[yellow]Advertencias:[/yellow]")
        for warning in result.warnings:
            console.print(f"  • {warning}")

    if not result.is_valid:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
