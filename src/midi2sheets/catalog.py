# src/midi2sheets/catalog.py
"""
Song catalog: in-memory store of generated song records.

Owned by whoever creates it; there is no module-level instance.
"""
from __future__ import annotations
import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union
from .timeline import SongRecord
from .schema import GENRES, DIFFICULTIES, KEBAB_CASE

logger = logging.getLogger(__name__)

TIME_SIG_RE = re.compile(r"^\d+/\d+$")
MIN_TEMPO, MAX_TEMPO = 10, 400

class CatalogError(ValueError):
    pass

@dataclass
class CatalogStats:
    total_songs: int
    total_measures: int
    by_genre: Dict[str, int] = field(default_factory=dict)
    by_difficulty: Dict[str, int] = field(default_factory=dict)

def validate_song(song: SongRecord) -> List[str]:
    """Liste von Fehlermeldungen; leer = gültig."""
    errors: List[str] = []
    if not re.match(KEBAB_CASE, song.id or ""):
        errors.append(f'id "{song.id}" must be kebab-case')
    if not song.title:
        errors.append("title is empty")
    if song.genre not in GENRES:
        errors.append(f'genre "{song.genre}" is not one of {", ".join(GENRES)}')
    if song.difficulty not in DIFFICULTIES:
        errors.append(f'difficulty "{song.difficulty}" is not one of {", ".join(DIFFICULTIES)}')
    if not (MIN_TEMPO <= song.tempo <= MAX_TEMPO):
        errors.append(f"tempo {song.tempo} outside {MIN_TEMPO}-{MAX_TEMPO}")
    if not TIME_SIG_RE.match(song.time_signature or ""):
        errors.append(f'timeSignature "{song.time_signature}" must look like "3/4"')
    if not song.measures:
        errors.append("measures must not be empty")
    for i, m in enumerate(song.measures):
        if m.number != i + 1:
            errors.append(f"measure[{i}] has number {m.number}, expected {i + 1}")
        if not m.right_hand or not m.left_hand:
            errors.append(f"measure[{i}] has an empty hand")
    return errors

class SongCatalog:
    def __init__(self, songs: Optional[Iterable[SongRecord]] = None):
        self._songs: Dict[str, SongRecord] = {}
        if songs:
            self.register_many(songs)

    def __len__(self) -> int:
        return len(self._songs)

    def __contains__(self, song_id: str) -> bool:
        return song_id in self._songs

    # ---------- write ----------

    def register(self, song: SongRecord):
        if song.id in self._songs:
            raise CatalogError(f'Duplicate song id "{song.id}"')
        errors = validate_song(song)
        if errors:
            raise CatalogError(f'Song "{song.id}" is invalid: ' + "; ".join(errors))
        self._songs[song.id] = song

    def register_many(self, songs: Iterable[SongRecord]):
        for s in songs:
            self.register(s)

    def load_dir(self, path: Union[str, Path]) -> int:
        """Registriert alle *.json Song-Records in `path` (alphabetisch). Gibt die Anzahl zurück."""
        n = 0
        for p in sorted(Path(path).glob("*.json")):
            data = json.loads(p.read_text(encoding="utf-8"))
            self.register(SongRecord.from_dict(data))
            n += 1
        logger.debug("loaded %d songs from %s", n, path)
        return n

    # ---------- read ----------

    def get(self, song_id: str) -> Optional[SongRecord]:
        return self._songs.get(song_id)

    def all(self) -> List[SongRecord]:
        return list(self._songs.values())

    def by_genre(self, genre: str) -> List[SongRecord]:
        return [s for s in self._songs.values() if s.genre == genre]

    def by_difficulty(self, difficulty: str) -> List[SongRecord]:
        return [s for s in self._songs.values() if s.difficulty == difficulty]

    def search(self,
               genre: Optional[str] = None,
               difficulty: Optional[str] = None,
               query: Optional[str] = None,
               tags: Optional[Sequence[str]] = None,
               max_duration: Optional[float] = None) -> List[SongRecord]:
        """All filters combine with AND; `tags` matches if any tag matches."""
        out = []
        q = (query or "").strip().lower()
        wanted = {t.lower() for t in (tags or [])}
        for s in self._songs.values():
            if genre and s.genre != genre:
                continue
            if difficulty and s.difficulty != difficulty:
                continue
            if max_duration is not None and s.duration_seconds > max_duration:
                continue
            if wanted and not wanted & {t.lower() for t in s.tags}:
                continue
            if q and not _matches(s, q):
                continue
            out.append(s)
        return out

    def stats(self) -> CatalogStats:
        by_genre = {g: 0 for g in GENRES}
        by_difficulty = {d: 0 for d in DIFFICULTIES}
        total_measures = 0
        for s in self._songs.values():
            by_genre[s.genre] = by_genre.get(s.genre, 0) + 1
            by_difficulty[s.difficulty] = by_difficulty.get(s.difficulty, 0) + 1
            total_measures += len(s.measures)
        return CatalogStats(
            total_songs=len(self._songs),
            total_measures=total_measures,
            by_genre=by_genre,
            by_difficulty=by_difficulty,
        )

    def validate(self):
        problems = []
        for s in self._songs.values():
            problems.extend(f"{s.id}: {e}" for e in validate_song(s))
        if problems:
            raise CatalogError("Catalog validation failed:\n  " + "\n  ".join(problems))

def _matches(song: SongRecord, q: str) -> bool:
    haystack = [song.title, song.composer or "", str(song.musical_language.get("description", ""))]
    haystack.extend(song.tags)
    return any(q in h.lower() for h in haystack)
