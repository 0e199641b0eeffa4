"""
Turns the positional ``file`` argument into something that can be uploaded.

No argument means stdin is buffered to a temp file, a directory is zipped,
anything else is used as is. Generated files live only as long as the
``resolve_input`` context unless the caller asks to keep them.
"""

import logging
import os
import sys
import tempfile
import zipfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from .utils.exceptions import InputIOError
from .utils.util import random_hex, remove_quietly

BUFFER_SIZE = 4096

logger = logging.getLogger(__name__)


@dataclass
class ResolvedSource:
    path: str
    filename: str
    temporary: bool
    stream: Optional[BinaryIO] = None


def stdin_to_tmp(stdin: BinaryIO, path: str) -> int:
    """Copy ``stdin`` into ``path`` in BUFFER_SIZE chunks. Returns bytes written."""
    written = 0
    with open(path, 'wb') as f:
        while True:
            chunk = stdin.read(BUFFER_SIZE)
            if not chunk:
                break
            f.write(chunk)
            written += len(chunk)
    return written


def zip_directory(dir_path: str, zip_path: str) -> int:
    """Zip ``dir_path`` into ``zip_path`` with entries rooted at the directory's own name.

    Returns the number of files archived.
    """
    base_dir = Path(dir_path).resolve()
    out = Path(zip_path).resolve()
    root = base_dir.name
    count = 0
    with zipfile.ZipFile(zip_path, 'w', compression=zipfile.ZIP_DEFLATED) as zf:
        zf.write(base_dir, root + '/')
        for p in sorted(base_dir.rglob('*')):
            if p == out:
                continue
            arcname = (Path(root) / p.relative_to(base_dir)).as_posix()
            if p.is_dir():
                zf.write(p, arcname + '/')
            else:
                zf.write(p, arcname)
                count += 1
    return count


def _stdin_binary(stdin) -> BinaryIO:
    if stdin is None:
        stdin = sys.stdin
    return getattr(stdin, 'buffer', stdin)


def _buffer_stdin(stdin, tmp_dir: str) -> str:
    path = os.path.join(tmp_dir, random_hex())
    try:
        n = stdin_to_tmp(_stdin_binary(stdin), path)
    except (OSError, ValueError) as e:
        remove_quietly(path)
        raise InputIOError('<stdin>', e, action='read input from')
    logger.debug(f'Buffered {n} bytes of stdin into {path}')
    return path


def _archive_directory(dir_path: str, tmp_dir: str) -> str:
    base = os.path.basename(os.path.normpath(dir_path))
    zip_path = os.path.join(tmp_dir, f'{base}-{random_hex()}.zip')
    try:
        n = zip_directory(dir_path, zip_path)
    except (OSError, zipfile.BadZipFile, ValueError) as e:
        remove_quietly(zip_path)
        raise InputIOError(dir_path, e, action='compress directory')
    logger.debug(f'Archived {n} files from {dir_path} into {zip_path}')
    return zip_path


@contextmanager
def resolve_input(file_arg: Optional[str], stdin=None, tmp_dir: Optional[str] = None,
                  keep: bool = False) -> Iterator[ResolvedSource]:
    """Yield an open ResolvedSource for ``file_arg``.

    The stream is closed and any file generated here is deleted when the
    context exits, on success or failure. ``keep=True`` leaves generated files
    in place.
    """
    tmp_dir = tmp_dir or tempfile.gettempdir()
    generated = None

    try:
        if not file_arg:
            generated = _buffer_stdin(stdin, tmp_dir)
            path = generated
        elif os.path.isdir(file_arg):
            generated = _archive_directory(file_arg, tmp_dir)
            path = generated
        else:
            path = file_arg

        try:
            stream = open(path, 'rb')
        except OSError as e:
            raise InputIOError(path, e, action='open')

        source = ResolvedSource(
            path=path,
            filename=os.path.basename(path),
            temporary=generated is not None,
            stream=stream,
        )
        with stream:
            yield source
    finally:
        if generated is not None:
            if keep:
                logger.info(f'Keeping {generated}')
            elif remove_quietly(generated):
                logger.debug(f'Removed {generated}')
