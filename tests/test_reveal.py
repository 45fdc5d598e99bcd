"""
Unit tests for folder credentials, scoped access and the reveal action.
"""

import base64
import json
import os
import shutil

import pytest

from dupchecker.config import BOOKMARK_KEY
from dupchecker.credentials import (
    AccessProvider,
    CredentialStore,
    DirectoryCredential,
    FilesystemAccessProvider,
    scoped_access,
)
from dupchecker.errors import AccessDenied, CredentialError, RevealActionFailed
from dupchecker.models import ImageRecord
from dupchecker.reveal import remember_directory, reveal_image
from dupchecker.utils.platform import reveal_command


class CountingProvider(AccessProvider):
    """Access provider that counts acquire/release pairs."""

    def __init__(self, deny=False):
        self.deny = deny
        self.acquired = 0
        self.released = 0

    def acquire(self, path):
        if self.deny:
            raise AccessDenied("denied")
        self.acquired += 1

    def release(self, path):
        self.released += 1


class Launcher:
    """Fake file browser launcher."""

    def __init__(self, error=None):
        self.error = error
        self.opened = []

    def __call__(self, path):
        if self.error:
            raise self.error
        self.opened.append(path)


class TestScopedAccess:
    """Test scoped_access context manager."""

    def test_released_on_success(self, temp_dir):
        provider = CountingProvider()
        with scoped_access(temp_dir, provider):
            assert provider.acquired == 1
        assert provider.released == 1

    def test_released_on_error(self, temp_dir):
        provider = CountingProvider()
        with pytest.raises(RuntimeError):
            with scoped_access(temp_dir, provider):
                raise RuntimeError("failure inside scope")
        assert provider.released == 1

    def test_denied_not_released(self, temp_dir):
        provider = CountingProvider(deny=True)
        with pytest.raises(AccessDenied):
            with scoped_access(temp_dir, provider):
                pass
        assert provider.released == 0

    def test_default_provider(self, temp_dir, monkeypatch):
        """Without an explicit provider the process-wide one is used."""
        provider = CountingProvider()
        monkeypatch.setattr('dupchecker.credentials.get_access_provider', lambda: provider)
        with scoped_access(temp_dir):
            pass
        assert provider.acquired == provider.released == 1

    def test_filesystem_provider_missing_path(self, temp_dir):
        with pytest.raises(AccessDenied):
            FilesystemAccessProvider().acquire(temp_dir / "missing")


class TestDirectoryCredential:
    """Test credential create/resolve."""

    def test_round_trip(self, temp_dir):
        blob = DirectoryCredential.create(temp_dir)
        directory, is_stale = DirectoryCredential.resolve(blob)
        assert str(directory) == os.path.abspath(str(temp_dir))
        assert is_stale is False

    def test_stale_when_directory_removed(self, temp_dir):
        folder = temp_dir / "gone"
        folder.mkdir()
        blob = DirectoryCredential.create(folder)
        folder.rmdir()
        _, is_stale = DirectoryCredential.resolve(blob)
        assert is_stale is True

    def test_malformed(self):
        with pytest.raises(CredentialError):
            DirectoryCredential.resolve(b"!!not base64 json!!")

    def test_unknown_version(self, temp_dir):
        blob = base64.urlsafe_b64encode(json.dumps({'version': 99, 'path': str(temp_dir)}).encode())
        with pytest.raises(CredentialError):
            DirectoryCredential.resolve(blob)


class TestCredentialStore:
    """Test CredentialStore persistence."""

    def test_save_and_load(self, credential_store):
        credential_store.save("key", b"\x00\x01blob")
        assert credential_store.load("key") == b"\x00\x01blob"

    def test_persists_across_instances(self, credential_store):
        credential_store.save("key", b"blob")
        assert CredentialStore(credential_store.path).load("key") == b"blob"

    def test_missing_key(self, credential_store):
        assert credential_store.load("absent") is None

    def test_delete(self, credential_store):
        credential_store.save("key", b"blob")
        assert credential_store.delete("key") is True
        assert credential_store.load("key") is None
        assert credential_store.delete("key") is False

    def test_corrupt_file(self, credential_store):
        credential_store.path.write_text("{ not json")
        assert credential_store.load("key") is None

    def test_default_path_from_user_config(self, tmp_path):
        assert CredentialStore().path == tmp_path / "credentials.json"


class TestRevealImage:
    """Test reveal_image function."""

    @pytest.fixture
    def record(self, sample_images):
        return ImageRecord(source_path=sample_images['a'], index=0)

    def test_reveal(self, record, temp_dir, credential_store):
        remember_directory(temp_dir, credential_store)
        launcher = Launcher()
        assert reveal_image(record, store=credential_store, launcher=launcher) == record.source_path
        assert launcher.opened == [record.source_path]
        assert os.path.exists(record.source_path)

    def test_remember_directory_uses_bookmark_key(self, temp_dir, credential_store):
        blob = remember_directory(temp_dir, credential_store)
        assert credential_store.load(BOOKMARK_KEY) == blob

    def test_no_credential(self, record, credential_store):
        launcher = Launcher()
        with pytest.raises(RevealActionFailed):
            reveal_image(record, store=credential_store, launcher=launcher)
        assert launcher.opened == []

    def test_malformed_credential(self, record, credential_store):
        credential_store.save(BOOKMARK_KEY, b"garbage")
        with pytest.raises(RevealActionFailed):
            reveal_image(record, store=credential_store, launcher=Launcher())

    def test_file_removed(self, record, temp_dir, credential_store):
        remember_directory(temp_dir, credential_store)
        os.remove(record.source_path)
        launcher = Launcher()
        with pytest.raises(RevealActionFailed):
            reveal_image(record, store=credential_store, launcher=launcher)
        assert launcher.opened == []

    def test_launcher_failure_leaves_file(self, record, temp_dir, credential_store):
        """A failed reveal never touches the file."""
        remember_directory(temp_dir, credential_store)
        with pytest.raises(RevealActionFailed):
            reveal_image(record, store=credential_store, launcher=Launcher(OSError("no browser")))
        assert os.path.exists(record.source_path)

    def test_stale_folder(self, temp_dir, credential_store):
        folder = temp_dir / "moved"
        folder.mkdir()
        shutil.copy(__file__, folder / "x.png")
        record = ImageRecord(source_path=str(folder / "x.png"), index=0)
        remember_directory(folder, credential_store)
        shutil.rmtree(folder)
        with pytest.raises(RevealActionFailed):
            reveal_image(record, store=credential_store, launcher=Launcher())

    def test_file_outside_credentialed_folder(self, temp_dir, credential_store):
        """Only files inside the stored folder can be revealed."""
        picked = temp_dir / "picked"
        other = temp_dir / "other"
        picked.mkdir()
        other.mkdir()
        shutil.copy(__file__, other / "x.png")
        record = ImageRecord(source_path=str(other / "x.png"), index=0)
        remember_directory(picked, credential_store)
        launcher = Launcher()
        provider = CountingProvider()
        with pytest.raises(RevealActionFailed, match="outside the credentialed folder"):
            reveal_image(record, store=credential_store, launcher=launcher, provider=provider)
        assert launcher.opened == []
        assert provider.acquired == provider.released == 1

    def test_sibling_prefix_folder_rejected(self, temp_dir, credential_store):
        """A folder sharing the name prefix is not inside the stored one."""
        (temp_dir / "photos").mkdir()
        (temp_dir / "photos2").mkdir()
        shutil.copy(__file__, temp_dir / "photos2" / "x.png")
        record = ImageRecord(source_path=str(temp_dir / "photos2" / "x.png"), index=0)
        remember_directory(temp_dir / "photos", credential_store)
        with pytest.raises(RevealActionFailed):
            reveal_image(record, store=credential_store, launcher=Launcher())

    def test_access_released_after_failure(self, record, temp_dir, credential_store):
        remember_directory(temp_dir, credential_store)
        provider = CountingProvider()
        with pytest.raises(RevealActionFailed):
            reveal_image(
                record,
                store=credential_store,
                launcher=Launcher(OSError("no browser")),
                provider=provider,
            )
        assert provider.acquired == provider.released == 1

    def test_access_denied(self, record, temp_dir, credential_store):
        remember_directory(temp_dir, credential_store)
        with pytest.raises(RevealActionFailed):
            reveal_image(
                record,
                store=credential_store,
                launcher=Launcher(),
                provider=CountingProvider(deny=True),
            )


class TestRevealCommand:
    """Test platform reveal commands."""

    def test_macos(self):
        assert reveal_command('/photos/a.jpg', system='Darwin') == ['open', '-R', '/photos/a.jpg']

    def test_windows(self):
        assert reveal_command('C:\\photos\\a.jpg', system='Windows') == [
            'explorer', '/select,C:\\photos\\a.jpg'
        ]

    def test_linux_opens_parent(self):
        assert reveal_command('/photos/a.jpg', system='Linux') == ['xdg-open', '/photos']
