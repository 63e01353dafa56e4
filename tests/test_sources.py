from pathlib import Path

import pytest

from relroot.rules import MAJOR, MINOR
from relroot.sources import (
    extract_abc_pieces,
    extract_billboard_pieces,
    extract_rolling_stone_pieces,
    extract_tavern_pieces,
)
from relroot.sources.billboard import read_index
from relroot.sources.rolling_stone import _tokenize, read_song_years

ABC_CSV = """\
op,no,mov,numeral,form,figbass,changes,relativeroot,pedal,local_key
18,1,1,I,,,,,,I
18,1,1,vii,o,7,,V,,I
18,1,1,V,,7,4,,,I
18,1,2,i,,64,,,,i
18,1,2,V,,7,,,,i
18,1,2,IV,,,,,I,bVI
"""


def write_abc(root: Path) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    (root / "all_annotations.csv").write_text(ABC_CSV)
    return root


def test_extract_abc_pieces_groups_by_movement(tmp_path: Path) -> None:
    pieces = extract_abc_pieces(write_abc(tmp_path / "abc"))
    assert [p.piece_id for p in pieces] == ["op18_no1_mv1", "op18_no1_mv2"]

    first = pieces[0]
    assert first.raw == ["I", "viio7", "V7(4)"]
    assert first.records[1].applied_to == "V"
    assert first.records[0].applied_to is None
    assert all(r.mode == MAJOR for r in first.records)


def test_extract_abc_pieces_modes_and_pedal(tmp_path: Path) -> None:
    second = extract_abc_pieces(write_abc(tmp_path / "abc"))[1]
    assert [r.mode for r in second.records] == [MINOR, MINOR, MAJOR]
    # Chords over a pedal are replaced by the pedal.
    assert second.raw[-1] == "I"


def test_extract_abc_pieces_accepts_file_path(tmp_path: Path) -> None:
    root = write_abc(tmp_path / "abc")
    pieces = extract_abc_pieces(root / "all_annotations.csv")
    assert len(pieces) == 2


def test_extract_abc_pieces_missing(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        extract_abc_pieces(tmp_path)


def test_rolling_stone_tokenize_expands_repeats() -> None:
    content = "Warning: odd bar\n[C] I | IV . | V7/IV | R | . bVII |\n"
    assert _tokenize(content) == ["I", "IV", "IV", "V7/IV", "bVII"]


def test_rolling_stone_repeat_copies_bar_lines() -> None:
    # A dot after a bar line repeats the bar line, not the chord before it.
    assert _tokenize("[C] I | . IV |\n") == ["I", "IV"]
    assert _tokenize("[C] R . V |\n") == ["V"]
    assert _tokenize(". I") == ["I"]


def test_extract_rolling_stone_pieces(tmp_path: Path) -> None:
    (tmp_path / "hey-jude_dt.txt").write_text("[F] I | V | . |\n")
    (tmp_path / "notes.txt").write_text("ignored")
    pieces = extract_rolling_stone_pieces(tmp_path)
    assert len(pieces) == 1
    assert pieces[0].piece_id == "hey_jude_dt"
    assert pieces[0].raw == ["I", "V"]
    assert pieces[0].records[0].mode == MAJOR
    assert pieces[0].year is None


def test_extract_rolling_stone_pieces_years(tmp_path: Path) -> None:
    (tmp_path / "hey-jude_dt.txt").write_text("[F] I | V |\n")
    (tmp_path / "dont-stop_dt.txt").write_text("[C] I |\n")
    (tmp_path / "song_list_DS.csv").write_text(
        "rank,fname,artist,year\n24,hey-jude,The Beatles,1968\n99,don't-stop,Fleetwood Mac,1977\n"
    )
    pieces = extract_rolling_stone_pieces(tmp_path)
    years = {p.piece_id: p.year for p in pieces}
    assert years == {"dont_stop_dt": 1977, "hey_jude_dt": 1968}


def test_read_song_years_skips_blank_years(tmp_path: Path) -> None:
    path = tmp_path / "song_list_DS.csv"
    path.write_text("fname,year\nmiind-games,1971\nnite-fever,\n")
    assert read_song_years(path) == {"mind_games": 1971}


def test_extract_rolling_stone_pieces_missing(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        extract_rolling_stone_pieces(tmp_path / "missing")


KRN = """\
!!!COM: Mozart
**kern\t**harm
*M3/4\t*M3/4
*C:\t*C:
4c\t4I
4d\t.
=1\t=1
4e\t4Ic
4f\t4V7
4g\t2I IV
*a:\t*a:
4a\t4i
*-\t*-
"""


def write_tavern(root: Path, krn: str = KRN) -> Path:
    encoder = root / "Mozart" / "K265" / "Encodings" / "Encoder_B"
    encoder.mkdir(parents=True)
    (encoder / "K265_T.krn").write_text(krn)
    return root


def test_extract_tavern_pieces(tmp_path: Path) -> None:
    pieces = extract_tavern_pieces(write_tavern(tmp_path))
    assert len(pieces) == 1
    piece = pieces[0]
    assert piece.piece_id == "K265"
    assert piece.raw == ["I", "Ic", "V7", "I", "IV", "i"]
    assert [r.mode for r in piece.records] == [MAJOR] * 5 + [MINOR]


def test_extract_tavern_pieces_without_key_infers_mode(tmp_path: Path) -> None:
    krn = "**kern\t**harm\n4c\t4i\n4d\t4V\n*-\t*-\n"
    piece = extract_tavern_pieces(write_tavern(tmp_path, krn))[0]
    assert [r.mode for r in piece.records] == [MINOR, MINOR]


SALAMI = """\
# title: Song
# artist: Band
# metre: 4/4
# tonic: C
0.0\tsilence
0.5\tA, intro, | C:maj | G:7 |
10.0\tB, verse
# tonic: D
20.0\tC, chorus, | D:maj |
"""

LAB = """\
0.5\t2.5\tC:maj
2.5\t4.5\tG:7
20.0\t22.0\tD:maj
22.0\t24.0\tN
24.0\t26.0\tA:7
"""


def write_billboard(root: Path) -> Path:
    song = root / "0003"
    song.mkdir(parents=True)
    (song / "salami_chords.txt").write_text(SALAMI)
    (song / "full.lab").write_text(LAB)
    (root / "0004").mkdir()
    return root


def test_extract_billboard_pieces_assigns_keys(tmp_path: Path) -> None:
    pieces = extract_billboard_pieces(write_billboard(tmp_path))
    assert len(pieces) == 1
    song = pieces[0]
    assert song.piece_id == "0003"
    assert song.raw == ["C:maj", "G:7", "D:maj", "N", "A:7"]
    assert [r.key for r in song.records] == ["C", "C", "D", "D", "D"]


def test_extract_billboard_pieces_missing(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        extract_billboard_pieces(tmp_path / "missing")


INDEX = """\
id,chart_date,target_rank,actual_rank,title,artist,peak_rank,weeks_on_chart
3,1961-07-03,56,57,I Don't Mind,James Brown,47,8
4,1971-08-07,32,31,You've Got A Friend,Roberta Flack & Donny Hathaway,29,12
5,1975-02-15,16,15,i don't mind!,James Brown,47,8
6,1980-01-05,90,,,,,
"""


def test_read_index(tmp_path: Path) -> None:
    path = tmp_path / "billboard-2.0-index.csv"
    path.write_text(INDEX)
    index = read_index(path)
    # Rows without a title have no annotations.
    assert sorted(index) == [3, 4, 5]
    assert index[3].title == "I Don't Mind"
    assert index[3].artist == "James Brown"
    assert index[4].year == 1971


def test_extract_billboard_pieces_with_index(tmp_path: Path) -> None:
    root = write_billboard(tmp_path)
    (root / "billboard-2.0-index.csv").write_text(INDEX)
    for name in ("0005", "0007"):
        song = root / name
        song.mkdir()
        (song / "salami_chords.txt").write_text(SALAMI)
        (song / "full.lab").write_text(LAB)

    pieces = extract_billboard_pieces(root)
    # 0005 repeats 0003's title and artist; 0007 is not in the index.
    assert [p.piece_id for p in pieces] == ["0003"]
    assert pieces[0].year == 1961
