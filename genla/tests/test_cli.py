from __future__ import annotations

from fractions import Fraction

import pytest

from genla.cli import build_parser, load_text_matrix, main
from genla.compressed import CompressedStorageFormat
from genla.errors import MalformedDataError
from genla.field import RATIONAL
from genla.matrix import Matrix


def write_matrix(path, text: str):
    path.write_text(text)
    return path


def test_load_text_matrix(tmp_path):
    source = write_matrix(tmp_path / "m.txt", "1 0 2\n0 3 0\n")
    assert load_text_matrix(source) == Matrix.from_grid([[1, 0, 2], [0, 3, 0]])


def test_load_single_row_with_delimiter(tmp_path):
    source = write_matrix(tmp_path / "m.csv", "1,2,3\n")
    assert load_text_matrix(source, delimiter=",").shape == (3, 1)


def test_encode_then_decode(tmp_path, capsys):
    source = write_matrix(tmp_path / "m.txt", "0 0\n5 0\n")
    target = tmp_path / "m.csc"
    assert main(["encode", str(source), str(target)]) == 0
    decoded = CompressedStorageFormat.from_bytes(target.read_bytes())
    assert decoded.col_pointers == (1, 1)

    assert main(["decode", str(target)]) == 0
    assert capsys.readouterr().out.splitlines() == ["[0.0, 0.0]", "[5.0, 0.0]"]


def test_info(tmp_path, capsys):
    source = write_matrix(tmp_path / "m.txt", "1 0\n0 0\n")
    target = tmp_path / "m.csc"
    main(["encode", str(source), str(target)])
    capsys.readouterr()
    assert main(["info", str(target)]) == 0
    out = capsys.readouterr().out
    assert "dimensions: 2x2" in out
    assert "non-zeros: 1" in out
    assert "compressed size: 20 bytes" in out
    assert "uncompressed size: 32 bytes" in out


def test_rational_field(tmp_path, capsys):
    source = write_matrix(tmp_path / "m.txt", "1/3 0\n0 -2\n")
    target = tmp_path / "m.csc"
    main(["--field", "rational", "encode", str(source), str(target)])
    decoded = CompressedStorageFormat.from_bytes(target.read_bytes(), RATIONAL)
    assert decoded.values == (Fraction(1, 3), Fraction(-2))
    main(["--field", "rational", "decode", str(target)])
    assert capsys.readouterr().out.splitlines()[0] == "[1/3, 0]"


def test_malformed_input_raises(tmp_path):
    target = tmp_path / "broken.csc"
    target.write_bytes(b"\x01\x02")
    with pytest.raises(MalformedDataError):
        main(["decode", str(target)])


def test_subcommand_is_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
