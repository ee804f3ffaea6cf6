"""Diagnostic logging for the migrator.

Progress lines go to stdout through :mod:`.progress`; everything logged here
goes to stderr and, optionally, a rotating file. Each record carries the
``component`` that emitted it, e.g. ``RateGovernor``.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

DEFAULT_COMPONENT = 'migrate'

TIME_FIELD = '{time:YYYY-MM-DD HH:mm:ss}'
LOCATION_FIELD = '{name}:{function}:{line}'


def build_format(verbose: bool = False, colors: bool = True) -> str:
    """Build a record format with a component column.

    Args:
        verbose: Add the emitting module, function and line
        colors: Wrap fields in loguru color markup

    Returns:
        A loguru format string
    """
    fields = [
        (TIME_FIELD, 'green'),
        ('{level: <8}', 'level'),
        ('{extra[component]: <21}', 'cyan'),
    ]
    if verbose:
        fields.append((LOCATION_FIELD, 'dim'))
    fields.append(('{message}', 'level'))

    if not colors:
        return ' | '.join(field for field, _ in fields)
    return ' | '.join(f'<{color}>{field}</{color}>' for field, color in fields)


def setup_logging(
    level: str = 'INFO',
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    verbose: bool = False,
) -> None:
    """Route loguru records to stderr and an optional log file.

    Calling it again replaces the previous sinks, so the CLI can start with
    defaults and reconfigure once the config file is loaded.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path, rotated at 10 MB
        log_format: Console format overriding the built one
        verbose: Show the source location of each console record
    """
    logger.remove()
    logger.configure(extra={'component': DEFAULT_COMPONENT})

    logger.add(
        sys.stderr,
        format=log_format or build_format(verbose),
        level=level,
        colorize=True,
        backtrace=verbose,
        diagnose=False,
    )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        # Files always get the source location
        logger.add(
            log_file,
            format=build_format(verbose=True, colors=False),
            level=level,
            rotation='10 MB',
            retention='30 days',
            compression='gz',
            backtrace=True,
            diagnose=False,
        )

    logger.bind(component=DEFAULT_COMPONENT).debug(
        f'Logging at {level}' + (f', also to {log_file}' if log_file else '')
    )
