from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union
from .timeline import MidiData, MidiEvent, ResolvedNote, TempoEvent, TimeSigEvent

logger = logging.getLogger(__name__)

# ---------- Note-on/off pairing ----------
#
# One state per (channel, note): Idle -> Pending -> (emit) -> Idle.
# A second note-on while Pending replaces the pending start; the earlier
# note-on is dropped and never emitted.

class _Idle:
    __slots__ = ()

    def __repr__(self) -> str:
        return "Idle"

IDLE = _Idle()

@dataclass(frozen=True)
class Pending:
    start_tick: int
    velocity: int

KeyState = Union[_Idle, Pending]

def _is_note_off(ev: MidiEvent) -> bool:
    return ev.type == "note_off" or (ev.type == "note_on" and ev.velocity == 0)

def _step(state: KeyState, ev: MidiEvent, tick: int) -> Tuple[KeyState, Optional[ResolvedNote]]:
    if ev.type == "note_on" and ev.velocity > 0:
        return Pending(start_tick=tick, velocity=ev.velocity), None
    if _is_note_off(ev) and isinstance(state, Pending):
        note = ResolvedNote(
            note_number=ev.note,
            start_tick=state.start_tick,
            duration_ticks=tick - state.start_tick,
            velocity=state.velocity,
            channel=ev.channel,
        )
        return IDLE, note
    return state, None

def _resolve_track(track: List[MidiEvent]) -> List[ResolvedNote]:
    out: List[ResolvedNote] = []
    states: Dict[Tuple[int, int], KeyState] = {}
    tick = 0
    for ev in track:
        tick += ev.delta_time
        if ev.type not in ("note_on", "note_off"):
            continue
        key = (ev.channel, ev.note)
        state, note = _step(states.get(key, IDLE), ev, tick)
        states[key] = state
        if note is not None:
            out.append(note)
    return out

def resolve_notes(midi: MidiData) -> List[ResolvedNote]:
    """Alle Tracks zu absoluten Noten auflösen, sortiert nach (start_tick, note_number)."""
    notes: List[ResolvedNote] = []
    for track in midi.tracks:
        notes.extend(_resolve_track(track))
    notes.sort(key=lambda n: (n.start_tick, n.note_number))
    logger.debug("resolved %d notes from %d tracks", len(notes), len(midi.tracks))
    return notes

# ---------- Meta events ----------

def extract_tempo_events(midi: MidiData) -> List[TempoEvent]:
    events: List[TempoEvent] = []
    for track in midi.tracks:
        tick = 0
        for ev in track:
            tick += ev.delta_time
            if ev.type == "set_tempo":
                events.append(TempoEvent(tick=tick, microseconds_per_beat=ev.tempo))
    # sort() ist stabil: gleiche Ticks bleiben in Fundreihenfolge
    events.sort(key=lambda e: e.tick)
    return events

def extract_time_signature_events(midi: MidiData) -> List[TimeSigEvent]:
    events: List[TimeSigEvent] = []
    for track in midi.tracks:
        tick = 0
        for ev in track:
            tick += ev.delta_time
            if ev.type == "time_signature":
                events.append(TimeSigEvent(
                    tick=tick,
                    numerator=ev.numerator,
                    denominator=2 ** ev.denominator,
                ))
    events.sort(key=lambda e: e.tick)
    return events
