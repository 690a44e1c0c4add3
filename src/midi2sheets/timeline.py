from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

DEFAULT_TPB = 480
DEFAULT_BPM = 120
DEFAULT_MICROS_PER_BEAT = 500_000

# --- Decoded input (as delivered by the MIDI decoder) ---

@dataclass(frozen=True)
class MidiEvent:
    delta_time: int
    type: str                       # "note_on" | "note_off" | "set_tempo" | "time_signature" | other
    channel: int = 0
    note: int = 0
    velocity: int = 0
    tempo: int = DEFAULT_MICROS_PER_BEAT   # µs per beat (set_tempo)
    numerator: int = 4
    denominator: int = 2            # power-of-two exponent, as stored in the file

@dataclass
class MidiData:
    ticks_per_beat: Optional[int]
    tracks: List[List[MidiEvent]] = field(default_factory=list)

# --- Pass 1: resolved timeline ---

@dataclass(frozen=True)
class ResolvedNote:
    note_number: int
    start_tick: int
    duration_ticks: int
    velocity: int
    channel: int

    @property
    def end_tick(self) -> int:
        return self.start_tick + self.duration_ticks

@dataclass(frozen=True)
class TempoEvent:
    tick: int
    microseconds_per_beat: int

@dataclass(frozen=True)
class TimeSigEvent:
    tick: int
    numerator: int
    denominator: int

@dataclass
class MeasureWindow:
    number: int                     # 1-based
    start_tick: float
    end_tick: float                 # exclusive
    notes: List[ResolvedNote] = field(default_factory=list)

# --- Pass 2: notation output ---

@dataclass
class Measure:
    number: int
    right_hand: str
    left_hand: str
    fingering: Optional[str] = None
    teaching_note: Optional[str] = None
    dynamics: Optional[str] = None
    tempo_override: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "number": self.number,
            "rightHand": self.right_hand,
            "leftHand": self.left_hand,
        }
        if self.fingering is not None:
            out["fingering"] = self.fingering
        if self.teaching_note is not None:
            out["teachingNote"] = self.teaching_note
        if self.dynamics is not None:
            out["dynamics"] = self.dynamics
        if self.tempo_override is not None:
            out["tempoOverride"] = self.tempo_override
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Measure":
        return cls(
            number=int(data["number"]),
            right_hand=data["rightHand"],
            left_hand=data["leftHand"],
            fingering=data.get("fingering"),
            teaching_note=data.get("teachingNote"),
            dynamics=data.get("dynamics"),
            tempo_override=data.get("tempoOverride"),
        )

@dataclass
class SongRecord:
    id: str
    title: str
    genre: str
    difficulty: str
    key: str
    tempo: Union[int, float]
    time_signature: str             # "<num>/<den>"
    duration_seconds: int
    musical_language: Dict[str, Any]
    measures: List[Measure]
    tags: List[str] = field(default_factory=list)
    composer: Optional[str] = None
    arranger: Optional[str] = None
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "genre": self.genre,
        }
        if self.composer is not None:
            out["composer"] = self.composer
        if self.arranger is not None:
            out["arranger"] = self.arranger
        out.update({
            "difficulty": self.difficulty,
            "key": self.key,
            "tempo": self.tempo,
            "timeSignature": self.time_signature,
            "durationSeconds": self.duration_seconds,
            "musicalLanguage": dict(self.musical_language),
            "measures": [m.to_dict() for m in self.measures],
            "tags": list(self.tags),
        })
        if self.source is not None:
            out["source"] = self.source
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SongRecord":
        return cls(
            id=data["id"],
            title=data["title"],
            genre=data["genre"],
            difficulty=data["difficulty"],
            key=data["key"],
            tempo=data["tempo"],
            time_signature=data["timeSignature"],
            duration_seconds=int(data.get("durationSeconds", 0)),
            musical_language=dict(data.get("musicalLanguage") or {}),
            measures=[Measure.from_dict(m) for m in data.get("measures", [])],
            tags=list(data.get("tags", [])),
            composer=data.get("composer"),
            arranger=data.get("arranger"),
            source=data.get("source"),
        )
