import tempfile
from pathlib import Path

import pytest


@pytest.fixture
def home(tmp_path, monkeypatch) -> Path:
    """A throwaway home directory so the real ~/.config/nageru is never touched."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


@pytest.fixture
def tmp_dir(tmp_path, monkeypatch) -> Path:
    """Redirect tempfile.gettempdir() so generated uploads land in the test dir."""
    out = tmp_path / "tmp"
    out.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(out))
    return out
