import copy

import pytest

from midi2sheets.schema import SongConfig

BASE_CONFIG = {
    "id": "test-song",
    "title": "Test Song",
    "genre": "classical",
    "difficulty": "beginner",
    "key": "C major",
    "tempo": 120,
    "timeSignature": "4/4",
    "tags": ["test"],
    "musicalLanguage": {
        "description": "A test song.",
        "structure": "A",
        "keyMoments": ["m1: test"],
        "teachingGoals": ["Testing"],
        "styleTips": ["Play evenly"],
    },
}


@pytest.fixture
def config_data():
    return copy.deepcopy(BASE_CONFIG)


@pytest.fixture
def make_config():
    def _make(**overrides):
        data = copy.deepcopy(BASE_CONFIG)
        data.update(overrides)
        return SongConfig.model_validate(data)
    return _make
