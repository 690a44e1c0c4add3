from __future__ import annotations
import json
import os
import re
from typing import Iterable, List
import yaml
from .timeline import SongRecord

# ---------- interne Helfer ----------

def _ensure_parent(path: str):
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)

def _sanitize_filename(name: str) -> str:
    name = re.sub(r"[^\w\s\-\.\(\)\[\]]+", "_", name.strip())
    name = re.sub(r"\s+", " ", name)
    return name or "song"

# ---------- öffentliche Writer-APIs ----------

def write_song_json(record: SongRecord, out_path: str, indent: int = 2):
    _ensure_parent(out_path)
    with open(out_path, "w", encoding="utf-8") as fh:
        json.dump(record.to_dict(), fh, indent=indent, ensure_ascii=False)
        fh.write("\n")

def write_song_yaml(record: SongRecord, out_path: str):
    _ensure_parent(out_path)
    with open(out_path, "w", encoding="utf-8") as fh:
        yaml.safe_dump(record.to_dict(), fh, sort_keys=False, allow_unicode=True)

def song_output_paths(records: Iterable[SongRecord], out_dir: str,
                      template: str = "{id}.json") -> List[str]:
    """Zielpfade, die write_songs_separately für `records` verwenden würde."""
    return [os.path.join(out_dir, template.format(index=idx, id=_sanitize_filename(rec.id), genre=rec.genre))
            for idx, rec in enumerate(records, start=1)]

def write_songs_separately(records: Iterable[SongRecord], out_dir: str,
                           template: str = "{id}.json", indent: int = 2) -> List[str]:
    """
    Schreibt pro Song eine eigene JSON-Datei.
    - template: Dateinamen-Template; Platzhalter: {index}, {id}, {genre}
    """
    records = list(records)
    os.makedirs(out_dir, exist_ok=True)
    paths = song_output_paths(records, out_dir, template)
    for rec, path in zip(records, paths):
        write_song_json(rec, path, indent=indent)
    return paths
