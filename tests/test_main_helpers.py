import pytest

from bitvec import BitVec


def test_parse_bits_accepts_show_output(m, sample_vec):
    assert m._parse_bits(str(sample_vec)) == sample_vec
    assert m._parse_bits("0110_1") == BitVec.from_bools(
        [False, True, True, False, True]
    )
    assert m._parse_bits("") == BitVec()


def test_parse_bits_rejects_other_characters(m):
    with pytest.raises(ValueError, match="position 2"):
        m._parse_bits("10x1")


def test_fmt_bits(m):
    assert m._fmt_bits(0) == "0 bits (0.00 B)"
    assert m._fmt_bits(1) == "1 bit (1.00 B)"
    assert m._fmt_bits(11) == "11 bits (2.00 B)"
    assert m._fmt_bits(8 * 1024) == "8192 bits (1.00 KiB)"
    assert m._fmt_bits(8 * 1536 * 1024) == "12582912 bits (1.50 MiB)"


def test_cli_parser_accepts_subcommands(m):
    parser = m.get_parser()
    ns = parser.parse_args(["show", "f.bin", "-n", "5", "-d"])
    assert ns.cmd in ("show", "s")
    assert ns.bits == 5 and ns.debug and not ns.container
    ns2 = parser.parse_args(["p", "1.1", "-o", "out.bvc", "--raw"])
    assert ns2.cmd in ("pack", "p")
    assert ns2.raw
    ns3 = parser.parse_args(["unpack", "in.bvc", "-o", "out.bin"])
    assert ns3.cmd in ("unpack", "u")


def test_cli_parser_requires_subcommand(m):
    with pytest.raises(SystemExit):
        m.get_parser().parse_args([])
