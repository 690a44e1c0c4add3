from __future__ import annotations
import argparse, logging, pathlib, sys, time, traceback
from pydantic import ValidationError
from . import ingest, write
from .catalog import SongCatalog, CatalogError
from .config import load_config, load_song_config, read_song_config_data
from .schema import validate_config

CONFIG_SUFFIXES = (".yaml", ".yml", ".json")

def _config_for(midi_path: pathlib.Path):
    for suffix in CONFIG_SUFFIXES:
        cand = midi_path.with_suffix(suffix)
        if cand.exists():
            return cand
    return None

def _validate_only(path: pathlib.Path) -> int:
    errors = validate_config(read_song_config_data(path))
    if not errors:
        print(f"[cli] {path}: OK")
        return 0
    for e in errors:
        print(f"[cli] {path}: {e.field}: {e.message}", file=sys.stderr)
    return 1

def _catalog(path: pathlib.Path) -> int:
    catalog = SongCatalog()
    try:
        catalog.load_dir(path)
        catalog.validate()
    except CatalogError as exc:
        print(f"[cli] ERROR: {exc}", file=sys.stderr)
        return 1
    st = catalog.stats()
    print(f"[cli] songs={st.total_songs} measures={st.total_measures}")
    for genre, n in st.by_genre.items():
        if n:
            print(f"[cli]   {genre:<10} {n}")
    return 0

def _batch(in_dir: pathlib.Path, out_dir: pathlib.Path, cfg: dict) -> int:
    jobs = []
    for midi_path in sorted(in_dir.glob("*.mid")):
        cfg_path = _config_for(midi_path)
        if cfg_path is None:
            print(f"[cli] WARNING: no config for {midi_path.name}, skipped")
            continue
        jobs.append((midi_path, cfg_path))

    try:
        song_cfgs = [load_song_config(cfg_path) for _, cfg_path in jobs]
    except ValidationError as exc:
        print(f"[cli] ERROR: invalid song config:\n{exc}", file=sys.stderr)
        return 1

    try:
        records = [ingest.midi_file_to_song_record(str(midi_path), song_cfg, cfg)
                   for (midi_path, _), song_cfg in zip(jobs, song_cfgs)]
    except Exception:
        traceback.print_exc()
        return 2

    # Ausgabe darf keine Song-Config überschreiben
    configs = {cfg_path.resolve() for _, cfg_path in jobs}
    clashes = [p for p in write.song_output_paths(records, str(out_dir)) if pathlib.Path(p).resolve() in configs]
    if clashes:
        for p in clashes:
            print(f"[cli] ERROR: output would overwrite the song config {p}", file=sys.stderr)
        print("[cli] use --out-dir to write somewhere else", file=sys.stderr)
        return 1

    paths = write.write_songs_separately(records, str(out_dir), indent=int(cfg.get("json_indent", 2)))
    print(f"[cli] wrote {len(paths)} songs -> {out_dir}")
    return 0

def main(argv=None):
    p = argparse.ArgumentParser(description="MIDI + song config -> LLM-readable piano notation")
    p.add_argument("--in", dest="infile", default=None, help="Input MIDI file (.mid)")
    p.add_argument("--config", dest="config", default=None,
                   help="Song config (.yaml/.json); default: next to the MIDI file")
    p.add_argument("--out", dest="outfile", default=None, help="Output file (default: input with .json/.yaml)")
    p.add_argument("--format", dest="fmt", choices=("json", "yaml"), default="json")
    p.add_argument("--settings", dest="settings", default=None, help="Pipeline settings YAML")
    p.add_argument("--watch", action="store_true", help="Rebuild whenever the MIDI or config changes")

    p.add_argument("--in-dir", dest="in_dir", default=None, help="Convert every .mid with a sibling config")
    p.add_argument("--out-dir", dest="out_dir", default=None, help="Output directory for --in-dir")
    p.add_argument("--validate-config", dest="validate_config", default=None, help="Only validate a song config")
    p.add_argument("--catalog-dir", dest="catalog_dir", default=None,
                   help="Load + validate a directory of song JSON files and print stats")
    p.add_argument("-v", "--verbose", action="store_true")

    args = p.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    if args.validate_config:
        sys.exit(_validate_only(pathlib.Path(args.validate_config).expanduser().resolve()))
    if args.catalog_dir:
        sys.exit(_catalog(pathlib.Path(args.catalog_dir).expanduser().resolve()))

    cfg = load_config(args.settings)

    if args.in_dir:
        in_dir = pathlib.Path(args.in_dir).expanduser().resolve()
        out_dir = pathlib.Path(args.out_dir or args.in_dir).expanduser().resolve()
        sys.exit(_batch(in_dir, out_dir, cfg))

    if not args.infile:
        p.error("--in is required (or use --in-dir / --validate-config / --catalog-dir)")

    in_path = pathlib.Path(args.infile).expanduser().resolve()
    if not in_path.exists():
        print(f"[cli] ERROR: Input not found: {in_path}", file=sys.stderr)
        sys.exit(1)
    cfg_path = pathlib.Path(args.config).expanduser().resolve() if args.config else _config_for(in_path)
    if cfg_path is None or not cfg_path.exists():
        print(f"[cli] ERROR: Song config not found for {in_path}", file=sys.stderr)
        sys.exit(1)
    out_path = (pathlib.Path(args.outfile).expanduser().resolve() if args.outfile
                else in_path.with_suffix("." + args.fmt))
    if out_path == cfg_path:
        print(f"[cli] ERROR: output would overwrite the song config {cfg_path}", file=sys.stderr)
        sys.exit(1)

    print(f"[cli] infile = {in_path}")
    print(f"[cli] config = {cfg_path}")

    try:
        song_cfg = load_song_config(cfg_path)
    except ValidationError as exc:
        print(f"[cli] ERROR: invalid song config:\n{exc}", file=sys.stderr)
        sys.exit(1)

    try:
        record = ingest.midi_file_to_song_record(str(in_path), song_cfg, cfg)
    except Exception:
        traceback.print_exc()
        sys.exit(2)

    if args.fmt == "yaml":
        write.write_song_yaml(record, str(out_path))
    else:
        write.write_song_json(record, str(out_path), indent=int(cfg.get("json_indent", 2)))
    print(f"[cli] {args.fmt:<5} -> {out_path}")
    print(f"[cli] Done. measures={len(record.measures)} tempo={record.tempo} "
          f"ts={record.time_signature} seconds={record.duration_seconds}")

    if args.watch:
        from .watch import watch_song
        observer = watch_song(str(in_path), str(cfg_path), str(out_path), cfg, args.fmt)
        print("[cli] watching for changes (Ctrl+C to stop)")
        try:
            while True:
                time.sleep(1.0)
        except KeyboardInterrupt:
            pass
        finally:
            observer.stop()
            observer.join(1)

if __name__ == "__main__":
    main()
