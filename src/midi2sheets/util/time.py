from __future__ import annotations
import math
from typing import Sequence
from ..timeline import TempoEvent, DEFAULT_MICROS_PER_BEAT

def round_half_up(value: float) -> int:
    # x.5 always goes up (round() would go to even)
    return int(math.floor(value + 0.5))

def bpm_from_micro(microseconds_per_beat: int) -> int:
    return round_half_up(60_000_000 / microseconds_per_beat)

def ticks_to_seconds(target_tick: float, tempo_events: Sequence[TempoEvent], tpb: int) -> float:
    """
    Elapsed seconds from tick 0 to target_tick, integrated over the tempo map.
    Before the first change the rate is the first event's rate (or 120 BPM without events).
    """
    seconds = 0.0
    current_tick = 0
    rate = tempo_events[0].microseconds_per_beat if tempo_events else DEFAULT_MICROS_PER_BEAT

    for ev in tempo_events:
        if ev.tick >= target_tick:
            break
        if ev.tick > current_tick:
            seconds += (ev.tick - current_tick) / tpb * (rate / 1_000_000)
            current_tick = ev.tick
        rate = ev.microseconds_per_beat

    if current_tick < target_tick:
        seconds += (target_tick - current_tick) / tpb * (rate / 1_000_000)
    return seconds
