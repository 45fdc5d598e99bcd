"""
Unit tests for file discovery and catalog loading.
"""

import os
import pytest
from pathlib import Path

from PIL import Image

from dupchecker.credentials import AccessProvider
from dupchecker.errors import AccessDenied, DirectoryAccessError, ScanCancelled
from dupchecker.scanner import (
    find_image_files,
    is_supported_image,
    supported_extensions,
    load_image,
    create_thumbnail,
    load_catalog,
)


class RecordingProvider(AccessProvider):
    """Access provider that records acquire/release calls."""

    def __init__(self, deny=()):
        self.deny = {Path(p) for p in deny}
        self.acquired = []
        self.released = []

    def acquire(self, path):
        if path in self.deny:
            raise AccessDenied(f"denied: {path}")
        self.acquired.append(path)

    def release(self, path):
        self.released.append(path)


class TestFindImageFiles:
    """Test find_image_files function."""

    def test_finds_supported_files_only(self, sample_images, temp_dir):
        """Unsupported extensions are ignored."""
        files = find_image_files(temp_dir)
        names = [os.path.basename(f) for f in files]
        assert "notes.txt" not in names
        assert "a.png" in names

    def test_extension_case_insensitive(self, sample_images, temp_dir):
        files = find_image_files(temp_dir)
        assert sample_images['upper'] in files

    def test_direct_children_only(self, sample_images, temp_dir):
        """Subdirectories are not visited."""
        files = find_image_files(temp_dir)
        assert sample_images['inner'] not in files

    def test_sorted_by_name_and_absolute(self, sample_images, temp_dir):
        files = find_image_files(temp_dir)
        assert all(os.path.isabs(f) for f in files)
        assert [os.path.basename(f) for f in files] == sorted(os.path.basename(f) for f in files)

    def test_empty_directory(self, temp_dir):
        """Test scanning empty directory."""
        assert find_image_files(temp_dir) == []

    def test_missing_directory(self, temp_dir):
        with pytest.raises(DirectoryAccessError) as exc_info:
            find_image_files(temp_dir / "missing")
        assert "directory not found" in str(exc_info.value)

    def test_file_instead_of_directory(self, sample_images):
        with pytest.raises(DirectoryAccessError):
            find_image_files(sample_images['a'])

    def test_is_supported_image(self):
        assert is_supported_image("photo.JPEG")
        assert is_supported_image("/x/y/scan.tiff")
        assert not is_supported_image("notes.txt")

    def test_supported_extensions_subset(self):
        assert {'.jpg', '.png', '.gif', '.bmp'} <= supported_extensions()


class TestLoadImage:
    """Test load_image function."""

    def test_valid_image(self, sample_images):
        image = load_image(sample_images['wide'])
        assert image is not None
        assert image.size == (200, 100)

    def test_corrupted_image(self, sample_images):
        """Undecodable files yield None rather than raising."""
        assert load_image(sample_images['corrupted']) is None

    def test_missing_file(self, temp_dir):
        assert load_image(temp_dir / "nope.png") is None


class TestCreateThumbnail:
    """Test create_thumbnail function."""

    def test_fixed_size(self, sample_images):
        image = load_image(sample_images['wide'])
        thumb = create_thumbnail(image, (200, 200))
        assert thumb.size == (200, 200)
        assert thumb.mode == 'RGBA'

    def test_aspect_preserved_with_transparent_padding(self, sample_images):
        """A 2:1 image fills the middle band; the rest stays transparent."""
        image = load_image(sample_images['wide'])
        thumb = create_thumbnail(image, (200, 200))
        assert thumb.getpixel((100, 10))[3] == 0
        assert thumb.getpixel((100, 100))[3] == 255
        assert thumb.getpixel((100, 190))[3] == 0

    def test_small_image_not_upscaled(self):
        image = Image.new('L', (20, 10), color=128)
        thumb = create_thumbnail(image, (200, 200))
        assert thumb.size == (200, 200)
        assert thumb.getpixel((100, 100))[3] == 255
        assert thumb.getpixel((100, 80))[3] == 0

    def test_source_untouched(self, sample_images):
        image = load_image(sample_images['wide'])
        create_thumbnail(image, (50, 50))
        assert image.size == (200, 100)


class TestLoadCatalog:
    """Test load_catalog function."""

    def test_skips_undecodable_files(self, sample_images, temp_dir):
        records = load_catalog(temp_dir)
        names = [r.filename for r in records]
        assert "corrupted.png" not in names
        assert "notes.txt" not in names
        assert len(records) == 5

    def test_indices_follow_catalog_order(self, sample_images, temp_dir):
        records = load_catalog(temp_dir)
        assert [r.index for r in records] == list(range(len(records)))
        assert [r.filename for r in records] == sorted(r.filename for r in records)

    def test_thumbnails_attached(self, image_dir):
        records = load_catalog(image_dir, thumbnail_size=(64, 64))
        assert all(r.thumbnail is not None for r in records)
        assert all(r.thumbnail.size == (64, 64) for r in records)

    def test_unique_ids(self, image_dir):
        records = load_catalog(image_dir)
        assert len({r.id for r in records}) == len(records)

    def test_progress_callback(self, sample_images, temp_dir):
        """Progress counts every candidate file, decodable or not."""
        calls = []
        load_catalog(temp_dir, progress_callback=lambda done, total: calls.append((done, total)))
        assert calls == [(i, 6) for i in range(1, 7)]

    def test_empty_directory(self, temp_dir):
        calls = []
        records = load_catalog(temp_dir, progress_callback=lambda d, t: calls.append((d, t)))
        assert records == []
        assert calls == []

    def test_missing_directory(self, temp_dir):
        with pytest.raises(DirectoryAccessError):
            load_catalog(temp_dir / "missing")

    def test_cancel(self, image_dir):
        with pytest.raises(ScanCancelled):
            load_catalog(image_dir, cancel_check=lambda: True)

    def test_scoped_access_balanced(self, image_dir):
        """Every acquired location is released again."""
        provider = RecordingProvider()
        load_catalog(image_dir, access_provider=provider)
        assert len(provider.acquired) == 4
        assert sorted(map(str, provider.acquired)) == sorted(map(str, provider.released))

    def test_denied_directory(self, image_dir):
        provider = RecordingProvider(deny=[image_dir])
        with pytest.raises(DirectoryAccessError):
            load_catalog(image_dir, access_provider=provider)
        assert provider.released == []

    def test_denied_file_skipped(self, image_dir):
        provider = RecordingProvider(deny=[Path(os.path.abspath(image_dir / "b.png"))])
        records = load_catalog(image_dir, access_provider=provider)
        assert [r.filename for r in records] == ["a.png", "c.png"]
        assert [r.index for r in records] == [0, 1]
