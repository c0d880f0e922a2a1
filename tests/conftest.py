"""
Fixtures compartidas: pool de clips, plan de escenas y petición de build.
"""

import pytest

from creador_plantillas.domain.models import ScenePlan, ScenePlanEntry, VideoAsset
from fakes import SCRIPT, URL_BEACH, URL_CITY, URL_FOREST


@pytest.fixture
def assets():
    return [
        VideoAsset(id="beach", url=URL_BEACH, title="Playa", description="olas al atardecer", tags=["mar"]),
        VideoAsset(id="city", url=URL_CITY, title="Ciudad", description="tráfico nocturno", tags=["noche"]),
        VideoAsset(id="forest", url=URL_FOREST, title="Bosque", description="árboles y niebla"),
    ]


@pytest.fixture
def plan(assets):
    return ScenePlan(scenes=[
        ScenePlanEntry(scene_number=1, script_text="El mar te calma.", video_asset=assets[0]),
        ScenePlanEntry(scene_number=2, script_text="La ciudad nunca duerme.", video_asset=assets[1]),
    ])


@pytest.fixture
def request_data():
    return {
        "script": SCRIPT,
        "videoAssets": [
            {"id": "beach", "url": URL_BEACH, "title": "Playa"},
            {"id": "city", "url": URL_CITY, "title": "Ciudad"},
        ],
        "voiceId": "voz-123",
        "styleProfile": {"tone": "calmado"},
    }
