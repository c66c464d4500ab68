"""``foam-lookup-entry`` command-line entry point.

Usage::

    foam-lookup-entry -dict <path> -key <a.b.c> [-batch]

Exit status is 0 on success, otherwise the ``code`` of the error raised
(see ``foam_lookup.errors``).
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import NoReturn

from .config import Settings
from .errors import (
    DictionaryFileNotFound,
    DictionaryReadError,
    FoamLookupError,
    MissingKeyArgument,
    UsageError,
)
from .lookup import resolve
from .reader import read_dictionary, read_file
from .writer import render_entry

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


class _ArgumentParser(argparse.ArgumentParser):
    """Parser that raises instead of exiting, so -batch can silence it."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="foam-lookup-entry",
        description="Read the specified dictionary file and look up a key value.",
        allow_abbrev=False,
    )
    parser.add_argument(
        "-dict",
        metavar="dictionary",
        help="Dictionary file where to look for the key (default: standard input).",
    )
    parser.add_argument(
        "-key",
        metavar="value",
        help="Key to look up. Use dot-syntax to access sub-dictionaries, e.g. a.b.c.",
    )
    parser.add_argument(
        "-batch",
        action="store_true",
        help="Fail silently with exit status > 0.",
    )
    return parser


def _configure_logging(batch: bool) -> None:
    package_logger = logging.getLogger("foam_lookup")
    if batch:
        package_logger.setLevel(logging.CRITICAL + 1)
        return
    package_logger.setLevel(logging.NOTSET)
    logging.basicConfig(stream=sys.stderr, format=_LOG_FORMAT)


def _read_stdin() -> str:
    buffer = getattr(sys.stdin, "buffer", None)
    if buffer is None:
        return sys.stdin.read()
    try:
        return buffer.read().decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DictionaryReadError(f"cannot decode input: {exc.reason}") from exc


def lookup_value(dict_path: str | None, key: str | None, settings: Settings) -> str:
    """Read the dictionary, resolve *key* and return its rendered text."""
    if key is None:
        raise MissingKeyArgument()

    if dict_path is not None:
        if not os.path.exists(dict_path):
            raise DictionaryFileNotFound(dict_path)
        dictionary = read_file(dict_path)
    else:
        dictionary = read_dictionary(_read_stdin())

    logger.debug("Looking up %s in %s", key, dictionary.name or "<stdin>")
    return render_entry(resolve(dictionary, key), settings.write_precision)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    argv = sys.argv[1:] if argv is None else argv
    try:
        args = parser.parse_args(argv)
    except UsageError as exc:
        if "-batch" not in argv:
            parser.print_usage(sys.stderr)
            print(f"{parser.prog}: error: {exc}", file=sys.stderr)
        return exc.code

    _configure_logging(args.batch)
    settings = Settings.from_env()
    if not args.batch:
        logging.getLogger("foam_lookup").setLevel(settings.log_level)

    try:
        value = lookup_value(args.dict, args.key, settings)
    except MissingKeyArgument as exc:
        if not args.batch:
            parser.print_help(sys.stderr)
        return exc.code
    except DictionaryFileNotFound as exc:
        if not args.batch:
            print(exc, file=sys.stderr)
        # the empty line is printed in batch mode too
        print()
        return exc.code
    except FoamLookupError as exc:
        if not args.batch:
            print(exc, file=sys.stderr)
        return exc.code

    print(value)
    return 0


def run() -> None:
    """Console-script wrapper around :func:`main`."""
    sys.exit(main())


if __name__ == "__main__":
    run()
