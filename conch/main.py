#!/usr/bin/env python3
"""
Conch - a small command-line interpreter

This is the main entry point for Conch.

Usage:
    conch                   interactive read-loop
    conch -c 'LINE'         run one line and exit with its status
    conch SCRIPT            run a file line by line

Author: Conch Developers
Version: 1.0.0
"""

import argparse
import sys
from typing import Optional, List

from conch import __version__
from conch.core.config_loader import ConfigLoader, get_config
from conch.exceptions import ConchError
from conch.logger import Logger, LogLevel
from conch.shell.shell import Shell, EXIT_ERROR


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='conch',
        description='Run command lines with pipes, redirections and && || ; & ( ).',
    )
    parser.add_argument('script', nargs='?', help='file of command lines to run')
    parser.add_argument('-c', dest='command', metavar='LINE', help='run one command line and exit')
    parser.add_argument('--config', metavar='FILE', help='JSON configuration file')
    parser.add_argument('--log-level', metavar='LEVEL', help='override logging.level')
    parser.add_argument('--log-file', metavar='FILE', help='override logging.log_file')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def _setup_logging(args: argparse.Namespace) -> None:
    config = get_config().logging
    level = args.log_level or config.level
    Logger.initialize(
        level=LogLevel.from_name(level),
        log_file=args.log_file or config.log_file,
        use_colors=config.use_colors,
        console_output=config.console_output,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Startup sequence:
    1. Parse arguments
    2. Load configuration
    3. Initialize logging
    4. Run one line, a script, or the interactive loop

    Returns:
        Process exit status
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is not None and args.script is not None:
        parser.error("-c and SCRIPT are mutually exclusive")

    try:
        if args.config:
            ConfigLoader().load(args.config)
        _setup_logging(args)
    except (ConchError, ValueError) as e:
        print(f"conch: {e}", file=sys.stderr)
        return EXIT_ERROR

    shell = Shell()

    if args.command is not None:
        shell.run_line(args.command)
        return shell.last_status

    if args.script is not None:
        try:
            with open(args.script, 'r', encoding='utf-8') as f:
                script = f.read()
        except OSError as e:
            print(f"conch: {args.script}: {e.strerror}", file=sys.stderr)
            return EXIT_ERROR
        return shell.run_script(script)

    try:
        return shell.run()
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130


if __name__ == '__main__':
    sys.exit(main())
