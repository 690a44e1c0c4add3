# src/midi2sheets/decode.py
from __future__ import annotations
import io
from typing import List
import mido
from .timeline import MidiData, MidiEvent

# Decoder errors (OSError, EOFError, ValueError from mido) are not caught here.

def _event_from_message(msg) -> MidiEvent:
    t = msg.type
    if t in ("note_on", "note_off"):
        return MidiEvent(msg.time, t, channel=msg.channel, note=msg.note, velocity=msg.velocity)
    if t == "set_tempo":
        return MidiEvent(msg.time, t, tempo=msg.tempo)
    if t == "time_signature":
        # mido liefert den Nenner bereits aufgelöst (8), im File steht der Exponent (3)
        return MidiEvent(msg.time, t, numerator=msg.numerator,
                         denominator=msg.denominator.bit_length() - 1)
    return MidiEvent(msg.time, t)

def from_mido(mid: mido.MidiFile) -> MidiData:
    tracks: List[List[MidiEvent]] = []
    for track in mid.tracks:
        tracks.append([_event_from_message(msg) for msg in track])
    return MidiData(ticks_per_beat=mid.ticks_per_beat or None, tracks=tracks)

def decode_midi_file(path: str) -> MidiData:
    return from_mido(mido.MidiFile(path))

def decode_midi_bytes(data: bytes) -> MidiData:
    return from_mido(mido.MidiFile(file=io.BytesIO(data)))
