import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

import tomli
import tomli_w

from .exceptions import ConfigIOError, ConfigValidationError
from .prompt import CredentialProvider, TerminalCredentialProvider
from .util import random_hex, remove_quietly, smkdirs

CONFIG_DIR = '.config/nageru'
CONFIG_FILENAME = 'config.toml'

# Key names kept compatible with config files written by earlier releases.
TOKEN_KEY = 'SlackToken'
CHANNELS_KEY = 'Channels'

logger = logging.getLogger(__name__)


@dataclass
class NageruConfig:
    """Slack token and the channels a file goes to when no --channel is given."""
    slack_token: str
    channels: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {TOKEN_KEY: self.slack_token, CHANNELS_KEY: list(self.channels)}


def get_config_path(home: Optional[Union[str, Path]] = None) -> Path:
    """Return ``<home>/.config/nageru/config.toml``, creating the directory if absent."""
    try:
        home = Path(home) if home is not None else Path.home()
    except (RuntimeError, KeyError) as e:
        raise ConfigIOError(os.path.join('~', CONFIG_DIR, CONFIG_FILENAME), e, action='locate')

    config_dir = home / CONFIG_DIR
    try:
        if smkdirs(str(home), CONFIG_DIR):
            logger.debug(f'Created config directory {config_dir}')
    except OSError as e:
        raise ConfigIOError(config_dir, e, action='create directory for')
    return config_dir / CONFIG_FILENAME


def parse_config(text: Union[str, bytes], source) -> NageruConfig:
    """Decode and validate a TOML config record. ``source`` is only used in errors."""
    if isinstance(text, bytes):
        try:
            text = text.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ConfigValidationError(source, f'not UTF-8 text ({e.reason})')

    try:
        data = tomli.loads(text)
    except tomli.TOMLDecodeError as e:
        raise ConfigValidationError(source, str(e))

    token = data.get(TOKEN_KEY)
    if not isinstance(token, str):
        raise ConfigValidationError(source, f'{TOKEN_KEY} must be a string')
    if not token.strip():
        raise ConfigValidationError(source, f'{TOKEN_KEY} is empty')

    channels = data.get(CHANNELS_KEY, [])
    if not isinstance(channels, list) or not all(isinstance(c, str) for c in channels):
        raise ConfigValidationError(source, f'{CHANNELS_KEY} must be a list of strings')
    if not all(c.strip() for c in channels):
        raise ConfigValidationError(source, f'{CHANNELS_KEY} contains an empty channel')

    return NageruConfig(slack_token=token, channels=channels)


def _write_atomic(dst: Path, content: bytes):
    """Write to a sibling temp file, then rename it over ``dst``."""
    tmp = dst.with_name(f'.{dst.name}.{random_hex(4)}.tmp')
    try:
        with open(tmp, 'wb') as f:
            f.write(content)
        os.replace(tmp, dst)
    except OSError as e:
        remove_quietly(str(tmp))
        raise ConfigIOError(dst, e, action='write')


def save_config(config: NageruConfig, home=None) -> Path:
    dst = get_config_path(home)
    _write_atomic(dst, tomli_w.dumps(config.to_dict()).encode('utf-8'))
    logger.info(f'Config saved to {dst}')
    return dst


def import_config(source_path, home=None) -> NageruConfig:
    """Replace the canonical config with the file at ``source_path``.

    The source is validated first and then copied byte for byte, so comments
    and formatting in the user's file survive. Nothing is merged with the
    existing config, and a source that fails validation leaves it untouched.
    """
    dst = get_config_path(home)
    try:
        with open(source_path, 'rb') as f:
            content = f.read()
    except OSError as e:
        raise ConfigIOError(source_path, e, action='read')

    config = parse_config(content, source_path)
    _write_atomic(dst, content)
    logger.info(f'Imported config {source_path} -> {dst}')
    return config


def load_config(credentials: Optional[CredentialProvider] = None, home=None) -> NageruConfig:
    """Read the canonical config, bootstrapping it from ``credentials`` on first run."""
    src = get_config_path(home)

    if not src.exists():
        logger.debug(f'{src} does not exist, asking for credentials')
        if credentials is None:
            credentials = TerminalCredentialProvider(config_path=src)
        token = credentials.ask_token()
        channel = credentials.ask_channel()
        # Blank means no default channel; --channel has to name one.
        channels = [channel] if channel.strip() else []
        config = NageruConfig(slack_token=token, channels=channels)
        # Same rules as an imported file.
        parse_config(tomli_w.dumps(config.to_dict()), src)
        save_config(config, home)
        return config

    try:
        with open(src, 'rb') as f:
            content = f.read()
    except OSError as e:
        raise ConfigIOError(src, e, action='read')
    return parse_config(content, src)
