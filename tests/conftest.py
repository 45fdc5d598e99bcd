"""
Pytest configuration and shared fixtures for test suite.
"""

import pytest
import tempfile
import shutil
from pathlib import Path

import numpy as np
from PIL import Image

from dupchecker.errors import ExtractionUnavailable
from dupchecker.scanner.features import FeatureExtractor


def _noise_image(seed: int, size=(96, 64)) -> Image.Image:
    """Random RGB noise; different seeds give unrelated images."""
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(size[1], size[0], 3), dtype=np.uint8)
    return Image.fromarray(pixels, 'RGB')


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture(autouse=True)
def isolated_user_config(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.dupchecker and credential file."""
    from dupchecker.user_config import get_user_config

    monkeypatch.setenv('DUPCHECKER_CONFIG_DIR', str(tmp_path / "config"))
    monkeypatch.setenv('DUPCHECKER_CREDENTIALS_FILE', str(tmp_path / "credentials.json"))
    for name in ('DUPCHECKER_THRESHOLD', 'DUPCHECKER_EXTRACTOR',
                 'DUPCHECKER_HASH_SIZE', 'DUPCHECKER_THUMBNAIL_SIZE'):
        monkeypatch.delenv(name, raising=False)
    config = get_user_config()
    config.reload()
    yield config
    config.reload()


@pytest.fixture
def sample_images(temp_dir):
    """
    Create a set of sample images for testing.

    Returns:
        dict with paths to:
        - a.png, b.png (byte-identical copies)
        - c.png (unrelated image)
        - wide.png (200x100, for thumbnail aspect checks)
        - upper.JPG (upper-case extension)
        - corrupted.png (not an image despite the extension)
        - notes.txt (unsupported extension)
        - nested/inner.png (inside a subdirectory)
    """
    images = {}

    base = _noise_image(1)
    path = temp_dir / "a.png"
    base.save(path, 'PNG')
    images['a'] = str(path)

    path = temp_dir / "b.png"
    base.save(path, 'PNG')
    images['b'] = str(path)

    path = temp_dir / "c.png"
    _noise_image(2).save(path, 'PNG')
    images['c'] = str(path)

    path = temp_dir / "wide.png"
    _noise_image(3, size=(200, 100)).save(path, 'PNG')
    images['wide'] = str(path)

    path = temp_dir / "upper.JPG"
    _noise_image(4).save(path, 'JPEG')
    images['upper'] = str(path)

    path = temp_dir / "corrupted.png"
    path.write_text("not an image")
    images['corrupted'] = str(path)

    path = temp_dir / "notes.txt"
    path.write_text("not an image either")
    images['notes'] = str(path)

    nested = temp_dir / "nested"
    nested.mkdir()
    path = nested / "inner.png"
    base.save(path, 'PNG')
    images['inner'] = str(path)

    return images


@pytest.fixture
def image_dir(temp_dir):
    """Directory with three decodable images: a.png, b.png, c.png."""
    for name, seed in (('a.png', 1), ('b.png', 2), ('c.png', 3)):
        _noise_image(seed).save(temp_dir / name, 'PNG')
    return temp_dir


class TableExtractor(FeatureExtractor):
    """
    Extractor returning fixed vectors by file name.

    Files missing from the table fail extraction. Every backend call is
    counted so tests can check memoization.
    """

    name = 'table'

    def __init__(self, table):
        self.table = {name: np.asarray(v, dtype=np.float64) for name, v in table.items()}
        self.calls = []

    def decode(self, record):
        return Path(record.source_path).name

    def compute(self, name):
        self.calls.append(name)
        if name not in self.table:
            raise ExtractionUnavailable(f"no vector for {name}")
        return self.table[name]


@pytest.fixture
def table_extractor():
    """Factory for TableExtractor instances."""
    return TableExtractor


@pytest.fixture
def make_records(temp_dir):
    """Factory building ImageRecords for named files (files need not exist)."""
    from dupchecker.models import ImageRecord

    def _make(*names):
        return [
            ImageRecord(source_path=str(temp_dir / name), index=i)
            for i, name in enumerate(names)
        ]

    return _make


@pytest.fixture
def credential_store(temp_dir):
    """CredentialStore backed by a file in the temp directory."""
    from dupchecker.credentials import CredentialStore

    return CredentialStore(temp_dir / "credentials.json")
