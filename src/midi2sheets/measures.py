from __future__ import annotations
import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple, Union
from .timeline import (
    Measure, MeasureWindow, ResolvedNote, TempoEvent, TimeSigEvent, DEFAULT_BPM
)
from .hands import (
    separate_hands, format_hand, DEFAULT_SPLIT_POINT, DEFAULT_CHORD_TOLERANCE
)
from .util.time import bpm_from_micro

logger = logging.getLogger(__name__)

DEFAULT_TIME_SIG: Tuple[int, int] = (4, 4)

Number = Union[int, float]

# ---------- Tempo / Taktart ----------

def resolve_tempo(events: Sequence[TempoEvent], config_tempo: Optional[Number] = None) -> Number:
    """Config tempo wins, then the first tempo event, then 120 BPM."""
    if config_tempo is not None:
        return config_tempo
    if events:
        return bpm_from_micro(events[0].microseconds_per_beat)
    return DEFAULT_BPM

def _parse_fraction(text: Optional[str]) -> Optional[Tuple[int, int]]:
    if not text:
        return None
    parts = text.split("/")
    if len(parts) != 2:
        return None
    try:
        num, den = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if num <= 0 or den <= 0:
        return None
    return num, den

def parse_time_signature(text: Optional[str]) -> Tuple[int, int]:
    """'6/8' -> (6, 8); anything unparsable -> (4, 4)."""
    return _parse_fraction(text) or DEFAULT_TIME_SIG

def resolve_time_signature(events: Sequence[TimeSigEvent],
                           config_ts: Optional[str] = None) -> Tuple[int, int]:
    """
    Reihenfolge: Config-String (falls gültig) -> erstes Taktart-Event -> 4/4.
    Parse-Fehler fallen still auf die nächste Quelle zurück.
    """
    parsed = _parse_fraction(config_ts)
    if parsed is not None:
        return parsed
    if events:
        return events[0].numerator, events[0].denominator
    return DEFAULT_TIME_SIG

# ---------- Geometrie ----------

def ticks_per_measure(tpb: int, numerator: int, denominator: int) -> Number:
    """480 tpb: 4/4 -> 1920, 3/4 -> 1440, 6/8 -> 1440."""
    tpm = tpb * numerator * (4 / denominator)
    return int(tpm) if float(tpm).is_integer() else tpm

def last_note_tick(notes: Sequence[ResolvedNote]) -> int:
    return max((n.end_tick for n in notes), default=0)

def compute_total_measures(notes: Sequence[ResolvedNote], tpm: Number) -> int:
    # counted by note end, so a note ringing into the next bar adds that bar
    return max(1, math.ceil(last_note_tick(notes) / tpm))

def slice_into_measures(notes: Sequence[ResolvedNote], total: int, tpm: Number) -> List[MeasureWindow]:
    """Exactly `total` windows [i*tpm, (i+1)*tpm); a note belongs to the bar it starts in."""
    windows: List[MeasureWindow] = []
    for m in range(total):
        start = m * tpm
        end = (m + 1) * tpm
        windows.append(MeasureWindow(
            number=m + 1,
            start_tick=start,
            end_tick=end,
            notes=[n for n in notes if start <= n.start_tick < end],
        ))
    return windows

# ---------- Assembly ----------

def _apply_override(measure: Measure, ov: Optional[dict]) -> None:
    if not ov:
        return
    if ov.get("fingering"):
        measure.fingering = ov["fingering"]
    if ov.get("teaching_note"):
        measure.teaching_note = ov["teaching_note"]
    if ov.get("dynamics"):
        measure.dynamics = ov["dynamics"]
    if ov.get("tempo_override") is not None:
        measure.tempo_override = ov["tempo_override"]

def build_measures(
    notes: Sequence[ResolvedNote],
    total: int,
    tpm: Number,
    tpb: int,
    split_point: int = DEFAULT_SPLIT_POINT,
    overrides: Optional[Sequence[dict]] = None,
    chord_tolerance: int = DEFAULT_CHORD_TOLERANCE,
) -> List[Measure]:
    """
    overrides: dicts with 'measure' (1-based) and optional 'fingering',
    'teaching_note', 'dynamics', 'tempo_override'. Later entries for the same
    measure replace earlier ones.
    """
    by_number: Dict[int, dict] = {}
    for ov in overrides or []:
        by_number[int(ov["measure"])] = ov

    measures: List[Measure] = []
    for win in slice_into_measures(notes, total, tpm):
        rh, lh = separate_hands(win.notes, split_point)
        measure = Measure(
            number=win.number,
            right_hand=format_hand(rh, tpb, chord_tolerance),
            left_hand=format_hand(lh, tpb, chord_tolerance),
        )
        _apply_override(measure, by_number.get(win.number))
        measures.append(measure)

    unused = sorted(set(by_number) - {m.number for m in measures})
    if unused:
        logger.warning("overrides for measures %s lie outside 1..%d and were ignored", unused, total)
    return measures
