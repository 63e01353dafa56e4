import json
from pathlib import Path

import pytest

from relroot.config import NormalizeConfig
from relroot.normalizers import Piece, RollingStoneNormalizer
from relroot.normalizers.base import ChordRecord
from relroot.registry import get_corpus_registry
from relroot.scripts.normalize import Vocabulary, normalize_pieces, process_corpus
from relroot.scripts.vocabulary import collect_vocabulary
from relroot.utils import load_config

RS_SONG = "Warning: check bar 3\n[C] I | IV . | V7/IV | I64 V | R | bVII |\n"


def write_rolling_stone(root: Path) -> Path:
    root.mkdir(parents=True)
    (root / "hey-jude_dt.txt").write_text(RS_SONG)
    (root / "silence_dt.txt").write_text("[C] R | Q |\n")
    return root


def test_vocabulary_counts(tmp_path: Path) -> None:
    vocab = Vocabulary("test")
    vocab.add("V7")
    vocab.add("I")
    vocab.add("V7")
    vocab.update(["IV"])

    assert len(vocab) == 3
    assert "V7" in vocab
    assert "ii" not in vocab
    assert vocab.tokens == ["I", "IV", "V7"]
    assert vocab.counts["V7"] == 2

    path = tmp_path / "vocab.json"
    vocab.save(path)
    data = json.loads(path.read_text())
    assert data["name"] == "test"
    assert data["tokens"] == ["I", "IV", "V7"]
    assert data["counts"]["V7"] == 2


def test_process_corpus_end_to_end(tmp_path: Path) -> None:
    cfg = NormalizeConfig(
        corpus="rolling_stone",
        data_raw=write_rolling_stone(tmp_path / "raw"),
        data_processed=tmp_path / "out",
    )
    sequences = process_corpus(cfg)

    expected = ["I", "IV", "IV", "Id7", "V(64)", "-VII"]
    # A song without a single chord is dropped.
    assert sequences == {"hey_jude_dt": expected}

    output = json.loads(cfg.output_path.read_text())
    assert output["corpus"] == "rolling_stone"
    assert output["pieces"] == {"hey_jude_dt": expected}
    assert output["roots"] == {"hey_jude_dt": ["I", "IV", "IV", "Id", "V", "-VII"]}
    assert output["modes"] == {"hey_jude_dt": ["major"] * 6}
    assert "years" not in output
    assert output["raw"]["hey_jude_dt"] == ["I", "IV", "IV", "V7/IV", "I64", "V", "bVII"]

    vocab = json.loads(cfg.vocab_path.read_text())
    assert vocab["tokens"] == sorted(set(expected))
    assert vocab["counts"]["IV"] == 2


def test_process_corpus_without_raw(tmp_path: Path) -> None:
    cfg = NormalizeConfig(
        corpus="rolling_stone",
        data_raw=write_rolling_stone(tmp_path / "raw"),
        data_processed=tmp_path / "out",
        keep_raw=False,
    )
    process_corpus(cfg)
    assert "raw" not in json.loads(cfg.output_path.read_text())


def test_process_corpus_writes_years(tmp_path: Path) -> None:
    raw = write_rolling_stone(tmp_path / "raw")
    (raw / "song_list_DS.csv").write_text("fname,year\nhey-jude,1968\nsilence,1999\n")
    cfg = NormalizeConfig(corpus="rolling_stone", data_raw=raw, data_processed=tmp_path / "out")
    process_corpus(cfg)
    # Only pieces that survive normalization are listed.
    assert json.loads(cfg.output_path.read_text())["years"] == {"hey_jude_dt": 1968}


def test_process_corpus_missing_input(tmp_path: Path) -> None:
    cfg = NormalizeConfig(corpus="rolling_stone", data_raw=tmp_path / "nope")
    with pytest.raises(FileNotFoundError):
        process_corpus(cfg)


def test_normalize_pieces_parallel_matches_serial() -> None:
    pieces = [
        Piece(f"song{i}", [ChordRecord(f"song{i}", "major", t) for t in ("I", "V7/V", "I64", "V")])
        for i in range(4)
    ]
    normalizer = RollingStoneNormalizer()
    serial = normalize_pieces(normalizer, pieces)
    parallel = normalize_pieces(normalizer, pieces, workers=2)
    assert serial == parallel
    assert list(parallel) == ["song0", "song1", "song2", "song3"]
    assert [c.token for c in serial["song0"]] == ["I", "IId7", "V(64)"]


def test_normalize_pieces_keeps_first_duplicate() -> None:
    pieces = [
        Piece("a", [ChordRecord("a", "major", "I")]),
        Piece("a", [ChordRecord("a", "major", "V")]),
    ]
    chords = normalize_pieces(RollingStoneNormalizer(), pieces)
    assert list(chords) == ["a"]
    assert [c.token for c in chords["a"]] == ["I"]


def test_collect_vocabulary_across_corpora(tmp_path: Path) -> None:
    first = tmp_path / "a.json"
    second = tmp_path / "b.json"
    first.write_text(json.dumps({"corpus": "a", "pieces": {"x": ["I", "V7"]}}))
    second.write_text(json.dumps({"corpus": "b", "pieces": {"y": ["V7", "-VII"], "z": []}}))

    vocab = collect_vocabulary([first, second])
    assert vocab.name == "all"
    assert vocab.tokens == ["-VII", "I", "V7"]
    assert vocab.counts["V7"] == 2


def test_collect_vocabulary_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        collect_vocabulary([tmp_path / "missing.json"])


def test_registry() -> None:
    for corpus in ("abc", "rolling_stone", "tavern", "billboard"):
        registry = get_corpus_registry(corpus)
        assert registry.normalizer_class.name == corpus
    with pytest.raises(ValueError):
        get_corpus_registry("hooktheory")


def test_load_config(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"corpus": "tavern", "data_raw": "TAVERN", "workers": 4}))
    cfg = load_config(path)
    assert cfg.corpus == "tavern"
    assert cfg.data_raw == Path("TAVERN")
    assert cfg.workers == 4
    assert cfg.output_path == Path("relroot_data/tavern.json")
