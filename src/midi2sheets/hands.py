from __future__ import annotations
from typing import List, Sequence, Tuple
from .timeline import ResolvedNote

DEFAULT_SPLIT_POINT = 60      # Middle C (C4)
DEFAULT_CHORD_TOLERANCE = 10  # ticks
REST_TOKEN = "R:w"

NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# (beats, code)
DURATIONS: List[Tuple[float, str]] = [
    (4.0, "w"),
    (3.0, "h."),
    (2.0, "h"),
    (1.5, "q."),
    (1.0, "q"),
    (0.75, "e."),
    (0.5, "e"),
    (0.25, "s"),
]
TRIPLETS: List[Tuple[float, str]] = [
    (4 / 3, "ht"),
    (2 / 3, "qt"),
    (1 / 3, "et"),
]
DURATION_TOLERANCE = 0.1
# Triplets are checked first; the window stays under half the gap between
# 2/3 and 0.75 (1/3 and 0.25). 0.4 beats matches nothing and falls back to "e".
TRIPLET_TOLERANCE = 0.04

# Grobe Kaskade, wenn nichts innerhalb der Toleranz liegt
FALLBACK: List[Tuple[float, str]] = [
    (3.0, "w"),
    (1.5, "h"),
    (0.75, "q"),
    (0.375, "e"),
]

# ---------- Hands ----------

def separate_hands(notes: Sequence[ResolvedNote],
                   split_point: int = DEFAULT_SPLIT_POINT) -> Tuple[List[ResolvedNote], List[ResolvedNote]]:
    """(right_hand, left_hand): note_number >= split_point goes right."""
    right = [n for n in notes if n.note_number >= split_point]
    left = [n for n in notes if n.note_number < split_point]
    return right, left

def group_into_chords(notes: Sequence[ResolvedNote],
                      tolerance: int = DEFAULT_CHORD_TOLERANCE) -> List[List[ResolvedNote]]:
    """
    Gruppiert fast gleichzeitige Noten zu Akkorden.
    Verglichen wird immer mit der ersten Note der Gruppe (Anker), nicht mit der
    vorherigen – Abstände summieren sich also nicht über eine Kette.
    """
    if not notes:
        return []
    groups: List[List[ResolvedNote]] = []
    current = [notes[0]]
    for n in notes[1:]:
        if n.start_tick - current[0].start_tick <= tolerance:
            current.append(n)
        else:
            groups.append(current)
            current = [n]
    groups.append(current)
    return groups

def is_chord(group: Sequence[ResolvedNote]) -> bool:
    return len(group) >= 2

# ---------- Notation ----------

def midi_note_to_scientific(note_number: int) -> str:
    """60 -> "C4", 69 -> "A4", 21 -> "A0"."""
    octave = note_number // 12 - 1
    return f"{NOTE_NAMES[note_number % 12]}{octave}"

def ticks_to_duration(ticks: int, tpb: int) -> str:
    ratio = ticks / tpb
    for beats, code in TRIPLETS:
        if abs(ratio - beats) < TRIPLET_TOLERANCE:
            return code
    for beats, code in DURATIONS:
        if abs(ratio - beats) < DURATION_TOLERANCE:
            return code
    for threshold, code in FALLBACK:
        if ratio >= threshold:
            return code
    return "s"

def format_note(note: ResolvedNote, tpb: int) -> str:
    return f"{midi_note_to_scientific(note.note_number)}:{ticks_to_duration(note.duration_ticks, tpb)}"

def chord_to_string(chord: Sequence[ResolvedNote], tpb: int) -> str:
    if len(chord) == 1:
        return format_note(chord[0], tpb)
    # Akkord: Dauer der längsten Note
    longest = max(n.duration_ticks for n in chord)
    names = " ".join(midi_note_to_scientific(n.note_number)
                     for n in sorted(chord, key=lambda n: n.note_number))
    return f"{names}:{ticks_to_duration(longest, tpb)}"

def format_hand(notes: Sequence[ResolvedNote], tpb: int,
                tolerance: int = DEFAULT_CHORD_TOLERANCE) -> str:
    groups = group_into_chords(notes, tolerance)
    if not groups:
        return REST_TOKEN
    return " ".join(chord_to_string(g, tpb) for g in groups)
