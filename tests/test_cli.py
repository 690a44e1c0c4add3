import json

import pytest
import yaml

from midi2sheets.cli import main
from midi2sheets.ingest import midi_to_song_record
from midi2sheets.write import write_song_json

from tests.midi_utils import build_midi, build_midi_data


@pytest.fixture
def song_files(tmp_path, config_data):
    midi_path = tmp_path / "song.mid"
    build_midi([(60, 0, 1), (64, 0, 1), (67, 0, 1), (43, 0, 4)]).save(str(midi_path))
    cfg_path = tmp_path / "song.yaml"
    cfg_path.write_text(yaml.safe_dump(config_data), encoding="utf-8")
    return midi_path, cfg_path


def test_convert_to_json(song_files, tmp_path):
    midi_path, cfg_path = song_files
    out = tmp_path / "result.json"
    main(["--in", str(midi_path), "--config", str(cfg_path), "--out", str(out)])
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["measures"][0]["rightHand"] == "C4 E4 G4:q"
    assert data["measures"][0]["leftHand"] == "G2:w"


def test_config_found_next_to_midi(song_files):
    midi_path, _ = song_files
    main(["--in", str(midi_path), "--format", "yaml", "--out", str(midi_path.with_name("out.yaml"))])
    data = yaml.safe_load(midi_path.with_name("out.yaml").read_text(encoding="utf-8"))
    assert data["tempo"] == 120


def test_missing_input_exits_1(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["--in", str(tmp_path / "nope.mid")])
    assert exc.value.code == 1


def test_invalid_config_exits_1(song_files, config_data):
    midi_path, cfg_path = song_files
    config_data["genre"] = "polka"
    cfg_path.write_text(yaml.safe_dump(config_data), encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main(["--in", str(midi_path), "--config", str(cfg_path), "--out", str(cfg_path.with_name("x.json"))])
    assert exc.value.code == 1


def test_broken_midi_exits_2(song_files):
    midi_path, cfg_path = song_files
    midi_path.write_bytes(b"garbage")
    with pytest.raises(SystemExit) as exc:
        main(["--in", str(midi_path), "--config", str(cfg_path), "--out", str(cfg_path.with_name("x.json"))])
    assert exc.value.code == 2


def test_validate_config_flag(song_files, capsys):
    _, cfg_path = song_files
    with pytest.raises(SystemExit) as exc:
        main(["--validate-config", str(cfg_path)])
    assert exc.value.code == 0
    assert "OK" in capsys.readouterr().out


def test_batch_conversion(song_files, tmp_path):
    out_dir = tmp_path / "out"
    with pytest.raises(SystemExit) as exc:
        main(["--in-dir", str(tmp_path), "--out-dir", str(out_dir)])
    assert exc.value.code == 0
    assert json.loads((out_dir / "test-song.json").read_text(encoding="utf-8"))["id"] == "test-song"


def test_catalog_dir(tmp_path, make_config, capsys):
    for song_id in ("first-song", "second-song"):
        rec = midi_to_song_record(build_midi_data([(60, 0, 1)]), make_config(id=song_id))
        write_song_json(rec, str(tmp_path / f"{song_id}.json"))
    with pytest.raises(SystemExit) as exc:
        main(["--catalog-dir", str(tmp_path)])
    assert exc.value.code == 0
    assert "songs=2 measures=2" in capsys.readouterr().out


def test_batch_refuses_to_overwrite_song_config(tmp_path, config_data):
    build_midi([(60, 0, 1)]).save(str(tmp_path / "song.mid"))
    config_data.update(id="song", splitPoint=40,
                       measureOverrides=[{"measure": 1, "teachingNote": "Count to four"}])
    cfg_path = tmp_path / "song.json"
    cfg_path.write_text(json.dumps(config_data), encoding="utf-8")
    before = cfg_path.read_text(encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        main(["--in-dir", str(tmp_path)])
    assert exc.value.code == 1
    assert cfg_path.read_text(encoding="utf-8") == before

    with pytest.raises(SystemExit) as exc:
        main(["--in-dir", str(tmp_path), "--out-dir", str(tmp_path / "out")])
    assert exc.value.code == 0
    assert json.loads((tmp_path / "out" / "song.json").read_text(encoding="utf-8"))["measures"]
    assert "measureOverrides" in json.loads(cfg_path.read_text(encoding="utf-8"))


def test_batch_broken_midi_exits_2(tmp_path, config_data, capsys):
    (tmp_path / "bad.mid").write_bytes(b"garbage")
    (tmp_path / "bad.yaml").write_text(yaml.safe_dump(config_data), encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main(["--in-dir", str(tmp_path), "--out-dir", str(tmp_path / "out")])
    assert exc.value.code == 2
    assert "Traceback" in capsys.readouterr().err
    assert not (tmp_path / "out").exists()


def test_batch_invalid_config_exits_1(song_files, tmp_path):
    _, cfg_path = song_files
    cfg_path.write_text(yaml.safe_dump({"id": "Not Kebab"}), encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main(["--in-dir", str(tmp_path), "--out-dir", str(tmp_path / "out")])
    assert exc.value.code == 1
