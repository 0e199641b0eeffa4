"""
nageru — Throw a file, a directory or piped output into a Slack channel.

Usage:
    nageru report.pdf -m "weekly numbers"
    nageru ./logs -c C0123456789
    make 2>&1 | nageru -t "build log"
"""

import argparse
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from rich.logging import RichHandler

from .__version__ import NAGERU_VERSION
from .input_source import resolve_input
from .slack_api import SlackUploader, UploadRequest
from .utils.config import CONFIG_DIR, CONFIG_FILENAME, import_config, load_config
from .utils.exceptions import ConfigValidationError, NageruError
from .utils.util import console, print_err

logger = logging.getLogger("nageru")

CONFIG_DISPLAY_PATH = f"~/{CONFIG_DIR}/{CONFIG_FILENAME}"


@dataclass(frozen=True)
class Options:
    """Parsed command line. Built once and passed down explicitly."""
    config: Optional[str] = None
    message: Optional[str] = None
    channel: Optional[str] = None
    title: Optional[str] = None
    file: Optional[str] = None
    keep_temp: bool = False
    verbose: bool = False


def create_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nageru",
        description=f"Upload a file, a directory (zipped) or stdin to Slack. (Version: {NAGERU_VERSION})."
    )

    parser.add_argument(
        "--config",
        metavar="CONFIG",
        help="Load a config file (toml) and make it the current config. "
             f"[stored at: {CONFIG_DISPLAY_PATH}]"
    )

    parser.add_argument(
        "-m", "--message",
        metavar="MESSAGE",
        help="Comment attached to the file."
    )

    parser.add_argument(
        "-c", "--channel",
        metavar="CHANNEL",
        help="Channel in which your file will be sent. Overrides the channels in the config."
    )

    parser.add_argument(
        "-t", "--title",
        metavar="TITLE",
        help="Title attached to the file."
    )

    parser.add_argument(
        "-k", "--keep",
        action="store_true",
        dest="keep_temp",
        help="Keep the temp file made from stdin or the zip made from a directory. [default: False]"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print debug logs to stderr. [default: False]"
    )

    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {NAGERU_VERSION}"
    )

    parser.add_argument(
        "file",
        nargs="?",
        help="File or directory to upload. Reads stdin when omitted."
    )

    return parser


def parse_options(params: Optional[List[str]] = None) -> Options:
    args = create_argument_parser().parse_args(params)
    return Options(
        config=args.config,
        message=args.message,
        channel=args.channel,
        title=args.title,
        file=args.file,
        keep_temp=args.keep_temp,
        verbose=args.verbose,
    )


def setup_logging(verbose: bool):
    handler = RichHandler(console=console, show_path=False, show_time=verbose)
    root = logging.getLogger()
    for h in list(root.handlers):
        if isinstance(h, RichHandler):
            root.removeHandler(h)
    root.addHandler(handler)
    root.setLevel(logging.WARNING)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def resolve_channels(channel: Optional[str], defaults: List[str]) -> List[str]:
    """--channel replaces the configured list; otherwise the list is used as is."""
    if channel:
        return [channel]
    if not defaults:
        raise ConfigValidationError(
            CONFIG_DISPLAY_PATH,
            "no channels configured, pass --channel or add Channels to the config",
        )
    return list(defaults)


def run(options: Options, stdin=None, credentials=None,
        uploader_factory: Optional[Callable[[str], SlackUploader]] = None) -> dict:
    """One upload. Every failure surfaces as a NageruError."""
    if options.config:
        import_config(options.config)

    config = load_config(credentials)
    channels = resolve_channels(options.channel, config.channels)

    uploader_factory = uploader_factory or SlackUploader
    uploader = uploader_factory(config.slack_token)

    with resolve_input(options.file, stdin, keep=options.keep_temp) as source:
        request = UploadRequest(
            channels=channels,
            filename=source.filename,
            source=source.stream,
            comment=options.message,
            title=options.title,
        )
        logger.debug(f'Sending {source.path} as {request.filename} to {", ".join(channels)}')
        result = uploader.upload(request)

    if options.keep_temp and source.temporary:
        print_err(f"Kept {source.path}")
    return result


def main(params: Optional[List[str]] = None, stdin=None, credentials=None,
         uploader_factory=None) -> int:
    """Main entry point."""
    options = parse_options(params)
    setup_logging(options.verbose)

    try:
        run(options, stdin=stdin, credentials=credentials, uploader_factory=uploader_factory)
    except KeyboardInterrupt:
        print_err("\nUpload cancelled by user.")
        return 130
    except NageruError as e:
        print_err(f"❌ {e}")
        return 1

    print_err("✅ Uploaded.")
    return 0

