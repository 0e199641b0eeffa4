import logging
import os
import secrets
from typing import Optional

from rich.console import Console

RANDOM_NAME_BYTES = 16

logger = logging.getLogger(__name__)

console = Console(stderr=True, highlight=False)


def print_err(*args, **kwargs):
    """Print a user-facing message to stderr through rich.

    Markup is off so paths with square brackets print as they are, and
    soft wrapping keeps a diagnostic on one line.
    """
    kwargs.setdefault('markup', False)
    kwargs.setdefault('soft_wrap', True)
    console.print(*args, **kwargs)


def random_hex(nbytes: int = RANDOM_NAME_BYTES) -> str:
    return secrets.token_hex(nbytes)


def smkdirs(parent: str, *child: str) -> Optional[str]:
    """Safe mkdir. Returns path if created, None if existed."""
    if parent is None:
        raise ValueError('parent must be specified')

    child = [c.lstrip('/') for c in child]
    dir_path = os.path.join(parent, *child)

    if not os.path.isdir(dir_path):
        os.makedirs(dir_path, exist_ok=True)
        return dir_path
    return None


def remove_quietly(path: str) -> bool:
    """Delete ``path`` if it still exists. Returns True if a file was removed.

    A file that cannot be removed is logged and left behind.
    """
    try:
        os.remove(path)
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning(f"Could not remove {path}: {e}")
        return False
