"""Tests for the config store."""

import pytest

from nageru.utils.config import (
    NageruConfig,
    get_config_path,
    import_config,
    load_config,
    parse_config,
    save_config,
)
from nageru.utils.exceptions import ConfigIOError, ConfigValidationError
from nageru.utils.prompt import StaticCredentialProvider


class ExplodingProvider:
    def ask_token(self):
        raise AssertionError("should not prompt when a config exists")

    def ask_channel(self):
        raise AssertionError("should not prompt when a config exists")


def test_get_config_path_creates_directory(home):
    path = get_config_path()
    assert path == home / ".config" / "nageru" / "config.toml"
    assert path.parent.is_dir()
    assert not path.exists()


def test_get_config_path_fails_when_directory_cannot_be_created(tmp_path):
    blocker = tmp_path / "file-not-dir"
    blocker.write_text("x")
    with pytest.raises(ConfigIOError):
        get_config_path(home=blocker)


def test_bootstrap_round_trip(home):
    config = load_config(StaticCredentialProvider("xoxb-123", "general"))
    assert config == NageruConfig("xoxb-123", ["general"])
    assert get_config_path().exists()

    again = load_config(ExplodingProvider())
    assert again.slack_token == "xoxb-123"
    assert again.channels == ["general"]


def test_bootstrap_rejects_empty_token_and_writes_nothing(home):
    with pytest.raises(ConfigValidationError):
        load_config(StaticCredentialProvider("", "general"))
    assert not get_config_path().exists()


def test_load_reads_config_written_by_older_releases(home):
    get_config_path().write_text('SlackToken = "xoxp-old"\nChannels = ["a", "b"]\n')
    config = load_config(ExplodingProvider())
    assert config == NageruConfig("xoxp-old", ["a", "b"])


def test_load_corrupt_config_raises(home):
    get_config_path().write_text("SlackToken = \n")
    with pytest.raises(ConfigValidationError):
        load_config(ExplodingProvider())


def test_import_then_load(home, tmp_path):
    src = tmp_path / "mine.toml"
    src.write_text('# team workspace\nSlackToken = "xoxb-imported"\nChannels = ["general", "eng"]\n')

    imported = import_config(src)
    assert imported.channels == ["general", "eng"]

    loaded = load_config(ExplodingProvider())
    assert loaded == NageruConfig("xoxb-imported", ["general", "eng"])
    # copied verbatim, comments included
    assert get_config_path().read_bytes() == src.read_bytes()


def test_import_replaces_instead_of_merging(home, tmp_path):
    save_config(NageruConfig("xoxb-old", ["random"]))
    src = tmp_path / "new.toml"
    src.write_text('SlackToken = "xoxb-new"\n')

    import_config(src)
    assert load_config(ExplodingProvider()) == NageruConfig("xoxb-new", [])


def test_import_malformed_leaves_config_untouched(home, tmp_path):
    save_config(NageruConfig("xoxb-keep", ["general"]))
    before = get_config_path().read_bytes()

    src = tmp_path / "broken.toml"
    src.write_text("SlackToken = [unterminated\n")
    with pytest.raises(ConfigValidationError):
        import_config(src)

    assert get_config_path().read_bytes() == before
    assert [p.name for p in get_config_path().parent.iterdir()] == ["config.toml"]


def test_import_missing_source(home, tmp_path):
    with pytest.raises(ConfigIOError):
        import_config(tmp_path / "nope.toml")


@pytest.mark.parametrize("text", [
    'Channels = ["general"]\n',
    'SlackToken = 42\n',
    'SlackToken = "  "\n',
    'SlackToken = "x"\nChannels = "general"\n',
    'SlackToken = "x"\nChannels = [1, 2]\n',
    'SlackToken = "x"\nChannels = ["general", ""]\n',
    'not toml at all',
])
def test_parse_config_rejects_bad_shapes(text):
    with pytest.raises(ConfigValidationError):
        parse_config(text, "test.toml")


def test_parse_config_ignores_unknown_keys():
    config = parse_config(b'SlackToken = "x"\nTheme = "dark"\n', "test.toml")
    assert config == NageruConfig("x", [])


def test_terminal_provider_strips_answers():
    from unittest.mock import patch

    from nageru.utils.prompt import TerminalCredentialProvider

    provider = TerminalCredentialProvider()
    with patch("nageru.utils.prompt.Prompt.ask", side_effect=["  xoxb-typed \n", "general\n"]) as ask:
        assert provider.ask_token() == "xoxb-typed"
        assert provider.ask_channel() == "general"
    assert ask.call_args_list[0].kwargs["password"] is True


def test_terminal_provider_end_of_input(home):
    from unittest.mock import patch

    from nageru.utils.prompt import TerminalCredentialProvider

    with patch("nageru.utils.prompt.Prompt.ask", side_effect=EOFError):
        with pytest.raises(ConfigIOError):
            load_config(TerminalCredentialProvider())
    assert not get_config_path().exists()


def test_bootstrap_blank_channel_means_no_defaults(home):
    config = load_config(StaticCredentialProvider("xoxb-123", "   "))
    assert config == NageruConfig("xoxb-123", [])
    assert load_config(ExplodingProvider()) == NageruConfig("xoxb-123", [])


def test_failed_write_is_a_config_error_even_if_cleanup_fails(home, monkeypatch):
    import os

    def refuse(*args, **kwargs):
        raise PermissionError("read-only filesystem")

    monkeypatch.setattr(os, "replace", refuse)
    monkeypatch.setattr(os, "remove", refuse)

    with pytest.raises(ConfigIOError) as excinfo:
        save_config(NageruConfig("xoxb-x", ["general"]))
    assert isinstance(excinfo.value.cause, PermissionError)
