import sys
from pathlib import Path
import importlib
import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from bitvec import BitVec  # noqa: E402

SAMPLE_BYTES = bytes([0xef, 0xa5, 0x71])
SAMPLE_BOOLS = [True, False, False, True, True, False, False, True,
                True, True, False]


@pytest.fixture()
def m():
    """Lazily import the main module for tests to avoid module-level import."""
    return importlib.import_module("main")


@pytest.fixture()
def sample_vec():
    """24-bit vector built from ``ef a5 71``."""
    return BitVec.from_bytes(SAMPLE_BYTES)


@pytest.fixture()
def sample_bools():
    """Eleven bools packing to ``99 03``."""
    return list(SAMPLE_BOOLS)


@pytest.fixture()
def raw_file(tmp_path: Path):
    """Write ``ef a5 71`` to a raw byte file and return its path."""
    path = tmp_path / "sample.bin"
    path.write_bytes(SAMPLE_BYTES)
    return path


def assert_padding_zero(vec):
    """Assert the byte/bit-length relation and the zero-padding rule."""
    data = bytes(vec.as_bytes())
    assert len(data) == (len(vec) + 7) // 8
    tail = len(vec) % 8
    if tail:
        assert data[-1] >> tail == 0


@pytest.fixture()
def check_padding():
    """
    Fixture that provides the padding checker without importing conftest.
    """
    return assert_padding_zero
