"""Entry point for kan CLI."""

import logging
import os
import sys

from kan.cli import build_parser
from kan.cli._common import report_error
from kan.constants import LOG_LEVEL_ENV
from kan.errors import KanError


def configure_logging(verbose: bool) -> None:
    level = os.environ.get(LOG_LEVEL_ENV, "").upper() or ("INFO" if verbose else "WARNING")
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    configure_logging(args.verbose)
    try:
        sys.exit(args.func(args))
    except KanError as e:
        sys.exit(report_error(e, args.json))


if __name__ == "__main__":
    main()
