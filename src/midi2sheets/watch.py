# src/midi2sheets/watch.py
from __future__ import annotations
import logging
import os
import time
from typing import Callable, Dict, Iterable, Optional, Any

from watchdog.events import FileSystemEventHandler
from watchdog.observers.polling import PollingObserver

from .config import load_song_config
from .ingest import midi_file_to_song_record
from .write import write_song_json, write_song_yaml

logger = logging.getLogger(__name__)

class SongSourceWatcher(FileSystemEventHandler):
    """Calls on_change when one of `paths` is modified, created or moved into place."""

    def __init__(self, paths: Iterable[str], on_change: Callable[[], None], debounce: float = 0.3):
        super().__init__()
        self.paths = {os.path.abspath(p) for p in paths}
        self.on_change = on_change
        self.debounce = debounce
        self._last_sig: Optional[float] = None

    def _maybe_signal(self, candidate_path: str):
        if os.path.abspath(candidate_path) in self.paths:
            now = time.monotonic()
            if self._last_sig is None or now - self._last_sig >= self.debounce:
                self._last_sig = now
                self.on_change()

    def on_modified(self, event):
        self._maybe_signal(event.src_path)

    def on_created(self, event):
        self._maybe_signal(event.src_path)

    def on_moved(self, event):
        # Bei atomarem Save ist meist dest_path die beobachtete Datei
        dest = getattr(event, "dest_path", None)
        self._maybe_signal(dest or event.src_path)

def rebuild(midi_path: str, config_path: str, out_path: str,
            cfg: Optional[Dict[str, Any]] = None, fmt: str = "json"):
    cfg = cfg or {}
    record = midi_file_to_song_record(midi_path, load_song_config(config_path), cfg)
    if fmt == "yaml":
        write_song_yaml(record, out_path)
    else:
        write_song_json(record, out_path, indent=int(cfg.get("json_indent", 2)))
    logger.info("rebuilt %s (%d measures)", out_path, len(record.measures))
    return record

def watch_song(midi_path: str, config_path: str, out_path: str,
               cfg: Optional[Dict[str, Any]] = None, fmt: str = "json") -> PollingObserver:
    """Startet einen Observer; Aufrufer ist für stop()/join() zuständig."""
    def on_change():
        try:
            rebuild(midi_path, config_path, out_path, cfg, fmt)
        except Exception:
            # weiter beobachten, nächstes Speichern versucht es erneut
            logger.exception("rebuild of %s failed", out_path)

    handler = SongSourceWatcher([midi_path, config_path], on_change)
    observer = PollingObserver()
    for d in {os.path.dirname(os.path.abspath(p)) for p in (midi_path, config_path)}:
        observer.schedule(handler, d, recursive=False)
    observer.start()
    return observer
