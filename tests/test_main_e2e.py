import struct
import pytest

from bitvec import BitVec
from container import BitVecContainer


def test_show_raw_file(raw_file, m, capsys):
    assert m.main(["show", str(raw_file)]) == 0
    assert capsys.readouterr().out == "1111.111 1.1..1.1 1...111.\n"

    assert m.main(["show", str(raw_file), "-n", "10", "-d"]) == 0
    assert capsys.readouterr().out == "BitVec{10: 1111.111 1.}\n"


def test_show_too_many_bits(raw_file, m, capsys):
    assert m.main(["show", str(raw_file), "-n", "25"]) == 1
    assert capsys.readouterr().out.startswith("[!]")


def test_show_missing_file(tmp_path, m, capsys):
    assert m.main(["show", str(tmp_path / "nope.bin")]) == 1
    assert "[!] File not found" in capsys.readouterr().out


def test_pack_unpack_roundtrip(tmp_path, m, capsys, sample_bools):
    packed = tmp_path / "bits.bvc"
    assert m.main(["pack", "1..11..1 11.", "-o", str(packed)]) == 0
    assert "11 bits" in capsys.readouterr().out

    with open(packed, "rb") as f:
        vec = BitVecContainer().load(f)
    assert vec == BitVec.from_bools(sample_bools)
    assert len(vec) == 11

    assert m.main(["show", "-c", str(packed), "-d"]) == 0
    assert capsys.readouterr().out == "BitVec{11: 1..11..1 11.}\n"

    raw = tmp_path / "bits.bin"
    assert m.main(["unpack", str(packed), "-o", str(raw)]) == 0
    assert raw.read_bytes() == bytes([0x99, 0x03])


def test_pack_raw(tmp_path, m):
    out = tmp_path / "bits.bin"
    assert m.main(["pack", "111", "-o", str(out), "--raw"]) == 0
    assert out.read_bytes() == bytes([0x07])


def test_pack_invalid_bits(tmp_path, m, capsys):
    out = tmp_path / "bits.bvc"
    assert m.main(["pack", "12", "-o", str(out)]) == 1
    assert capsys.readouterr().out.startswith("[!] Invalid bit character")
    assert not out.exists()


def test_unpack_bad_headers(tmp_path, m):
    arc = tmp_path / "bad.bvc"

    with open(arc, "wb") as f:
        f.write(b"BAD!" + struct.pack("<BQ", BitVecContainer.VERSION, 0))
    with pytest.raises(ValueError):
        m.unpack_container(str(arc), str(tmp_path / "out1"))

    with open(arc, "wb") as f:
        f.write(BitVecContainer.MAGIC + struct.pack("<BQ", 99, 0))
    with pytest.raises(ValueError):
        m.unpack_container(str(arc), str(tmp_path / "out2"))
