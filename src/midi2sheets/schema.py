"""
Song config schema.

The human-authored config that accompanies each .mid file: metadata, the
musical-language layer, and per-measure overrides. Keys are camelCase on disk
(``timeSignature``, ``splitPoint``, ``measureOverrides`` ...), snake_case in Python.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Annotated, Any, List, Literal, Optional, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

Genre = Literal[
    "classical", "jazz", "pop", "blues", "rock",
    "rnb", "latin", "film", "ragtime", "new-age",
]
Difficulty = Literal["beginner", "intermediate", "advanced"]

GENRES = get_args(Genre)
DIFFICULTIES = get_args(Difficulty)

KEBAB_CASE = r"^[a-z0-9]+(-[a-z0-9]+)*$"

# int stays int (120, not 120.0) in the generated song JSON
Bpm = Union[Annotated[int, Field(ge=10, le=400)], Annotated[float, Field(ge=10, le=400)]]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MeasureOverride(_CamelModel):
    measure: int = Field(ge=1)
    fingering: Optional[str] = None
    teaching_note: Optional[str] = None
    dynamics: Optional[str] = None
    tempo_override: Optional[Bpm] = None


class MusicalLanguage(_CamelModel):
    description: str = Field(min_length=1)
    structure: str = Field(min_length=1)
    key_moments: List[str]
    teaching_goals: List[str]
    style_tips: List[str]


class SongConfig(_CamelModel):
    id: str = Field(pattern=KEBAB_CASE)
    title: str = Field(min_length=1)
    genre: Genre
    composer: Optional[str] = None
    arranger: Optional[str] = None
    difficulty: Difficulty
    key: str = Field(min_length=1)
    tempo: Optional[Bpm] = None
    time_signature: Optional[str] = None
    tags: List[str]
    source: Optional[str] = None
    musical_language: MusicalLanguage
    measure_overrides: Optional[List[MeasureOverride]] = None
    split_point: Optional[int] = Field(default=None, ge=0, le=127)


@dataclass
class ConfigError:
    field: str
    message: str


def validate_config(data: Any) -> List[ConfigError]:
    """Leere Liste = gültig."""
    try:
        SongConfig.model_validate(data)
    except ValidationError as exc:
        return [
            ConfigError(
                field=".".join(str(p) for p in err["loc"]) or "root",
                message=err["msg"],
            )
            for err in exc.errors()
        ]
    return []
