# src/midi2sheets/ingest.py
"""
MIDI -> SongRecord.

The MIDI provides notes, timing and structure; the song config provides
metadata, the musical-language layer, teaching notes and fingering.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Optional
from .timeline import MidiData, SongRecord
from .schema import SongConfig
from .resolve import resolve_notes, extract_tempo_events, extract_time_signature_events
from .measures import (
    resolve_tempo, resolve_time_signature, ticks_per_measure,
    compute_total_measures, last_note_tick, build_measures,
)
from .hands import DEFAULT_SPLIT_POINT, DEFAULT_CHORD_TOLERANCE
from .util.time import ticks_to_seconds, round_half_up
from .decode import decode_midi_file

logger = logging.getLogger(__name__)

def midi_to_song_record(midi: MidiData, config: SongConfig,
                        cfg: Optional[Dict[str, Any]] = None) -> SongRecord:
    cfg = cfg or {}
    tpb = int(midi.ticks_per_beat or cfg.get("ticks_per_beat", 480))
    split_point = config.split_point
    if split_point is None:
        split_point = int(cfg.get("split_point", DEFAULT_SPLIT_POINT))
    tolerance = int(cfg.get("chord_tolerance", DEFAULT_CHORD_TOLERANCE))

    # 1) Events
    notes = resolve_notes(midi)
    tempos = extract_tempo_events(midi)
    timesigs = extract_time_signature_events(midi)

    # 2) Tempo / Taktart
    tempo = resolve_tempo(tempos, config.tempo)
    num, den = resolve_time_signature(timesigs, config.time_signature)

    # 3) Geometrie
    tpm = ticks_per_measure(tpb, num, den)
    total = compute_total_measures(notes, tpm)

    # 4) Takte
    overrides = [ov.model_dump() for ov in (config.measure_overrides or [])]
    measures = build_measures(notes, total, tpm, tpb, split_point, overrides, tolerance)

    # 5) Dauer
    seconds = ticks_to_seconds(last_note_tick(notes), tempos, tpb)

    logger.debug("%s: notes=%d tempo=%s ts=%d/%d tpb=%d measures=%d seconds=%.3f",
                 config.id, len(notes), tempo, num, den, tpb, total, seconds)

    return SongRecord(
        id=config.id,
        title=config.title,
        genre=config.genre,
        composer=config.composer,
        arranger=config.arranger,
        difficulty=config.difficulty,
        key=config.key,
        tempo=tempo,
        time_signature=f"{num}/{den}",
        duration_seconds=round_half_up(seconds),
        musical_language=config.musical_language.model_dump(by_alias=True),
        measures=measures,
        tags=list(config.tags),
        source=config.source,
    )

def midi_file_to_song_record(path: str, config: SongConfig,
                             cfg: Optional[Dict[str, Any]] = None) -> SongRecord:
    return midi_to_song_record(decode_midi_file(path), config, cfg)
