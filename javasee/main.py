#!/usr/bin/env python3
"""javasee/main.py - CLI entry-point for the javasee structural linter.

Usage examples
--------------
    # Check the current directory with ./javasee.yml
    javasee check

    # Check some paths, JSON output, a single rule
    javasee check src/ Extra.java --format json --rule com.example.no_println

    # Ad-hoc search for a pattern
    javasee find '_.println(...)' src/

    # Verify rules compile and their before/after examples behave
    javasee test

    # Write a starter configuration
    javasee init

Exit codes
----------
    0   Success, no issues.
    1   Error (bad pattern, unreadable script, internal failure).
    2   Issues found.
    3   Configuration file not found.
    4   Configuration file is not valid YAML.
    5   Configuration file has the wrong shape.
    6   Configuration file could not be loaded for another reason.

The module doubles as ``python -m javasee`` via the companion
``javasee/__main__.py`` which simply calls :func:`main`.
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap
from importlib import resources
from pathlib import Path
from typing import Optional, Sequence, TextIO

from . import __version__
from .analyzer import Analyzer
from .config import DEFAULT_CONFIG_NAME, Config, load_config
from .errors import (
    ConfigError,
    ConfigNotFoundError,
    ConfigSchemaError,
    ConfigSyntaxError,
    FatalError,
    PatternCompileError,
)
from .formatters import FORMATTERS, Formatter, make_formatter
from .java_parser import JavaParser
from .outcomes import Issue, RuleError, ScriptError
from .rules import RuleSpec, check_examples, compile_rule
from .scripts import ScriptEnumerator, load_scripts

_log = logging.getLogger("javasee")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_FAILURE: int = 2
EXIT_CONFIG_FILE_NOT_FOUND: int = 3
EXIT_CONFIG_FILE_SYNTAX_ERROR: int = 4
EXIT_CONFIG_FILE_SCHEMA_ERROR: int = 5
EXIT_CONFIG_FILE_UNKNOWN_ERROR: int = 6

TEMPLATE_RESOURCE_NAME = "template.yml"


# ===========================================================================
# Utility helpers
# ===========================================================================

_LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def _configure_logging(verbosity: int) -> None:
    """Attach a fresh stderr handler to the ``javasee`` logger.

    The default level is WARNING; ``-v`` gives INFO and ``-vv`` DEBUG.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    ))
    logger = logging.getLogger("javasee")
    logger.setLevel(_LOG_LEVELS.get(verbosity, logging.DEBUG))
    for old in list(logger.handlers):
        logger.removeHandler(old)
    logger.addHandler(handler)


def _open_output(dest: Optional[str]) -> TextIO:
    """``sys.stdout`` for ``None`` or ``"-"``, else *dest* opened for writing."""
    if dest in (None, "-"):
        return sys.stdout
    path = Path(dest).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return path.open("w", encoding="utf-8")


def _config_exit_code(error: ConfigError) -> int:
    if isinstance(error, ConfigNotFoundError):
        return EXIT_CONFIG_FILE_NOT_FOUND
    if isinstance(error, ConfigSyntaxError):
        return EXIT_CONFIG_FILE_SYNTAX_ERROR
    if isinstance(error, ConfigSchemaError):
        return EXIT_CONFIG_FILE_SCHEMA_ERROR
    return EXIT_CONFIG_FILE_UNKNOWN_ERROR


def _load_config(args: argparse.Namespace, formatter: Formatter) -> "Config | int":
    """Load ``args.config``; on failure report it and return the exit code."""
    root = Path(args.root) if getattr(args, "root", None) else None
    try:
        return load_config(Path(args.config), root=root)
    except ConfigError as exc:
        formatter.on_config_error(args.config, exc)
        formatter.on_finish()
        return _config_exit_code(exc)


def _report(analyzer: Analyzer, formatter: Formatter) -> "tuple[int, int]":
    """Feed every outcome to *formatter*; returns ``(issues, errors)``."""
    issues = errors = 0
    for outcome in analyzer.run():
        formatter.consume(outcome)
        if isinstance(outcome, Issue):
            issues += 1
        elif isinstance(outcome, (ScriptError, RuleError)):
            errors += 1
    return issues, errors


# ===========================================================================
# Sub-commands
# ===========================================================================

def cmd_check(args: argparse.Namespace) -> int:
    """Run every configured rule over the given paths."""
    out = _open_output(args.output)
    try:
        formatter = make_formatter(args.format, stdout=out)
        formatter.on_start()

        config = _load_config(args, formatter)
        if isinstance(config, int):
            return config

        if args.rule is not None and config.rule(args.rule) is None and not any(
            err.rule_id == args.rule for err in config.rule_errors
        ):
            _log.error("no rule with id %r in %s", args.rule, args.config)
            return EXIT_ERROR

        enumerator = ScriptEnumerator(
            args.paths or [config.root], exclude=config.exclude, root=config.root
        )
        analyzer = Analyzer(
            config.rules,
            load_scripts(enumerator, JavaParser()),
            rule_errors=config.rule_errors,
            rule_id=args.rule,
            jobs=args.jobs,
        )
        try:
            issues, errors = _report(analyzer, formatter)
        except FatalError as exc:
            formatter.on_fatal_error(exc)
            formatter.on_finish()
            return EXIT_ERROR
        formatter.on_finish()
    finally:
        if out is not sys.stdout:
            out.close()

    _log.info("%d issues, %d errors", issues, errors)
    if issues:
        return EXIT_FAILURE
    return EXIT_ERROR if errors else EXIT_OK


def cmd_find(args: argparse.Namespace) -> int:
    """Search the given paths for one ad-hoc pattern."""
    try:
        rule = compile_rule(RuleSpec(id="find", message=args.pattern, patterns=(args.pattern,)))
    except PatternCompileError as exc:
        sys.stderr.write(f"{exc}\n")
        return EXIT_ERROR

    out = _open_output(args.output)
    try:
        formatter = make_formatter(args.format, stdout=out)
        formatter.on_start()
        analyzer = Analyzer(
            [rule],
            load_scripts(ScriptEnumerator(args.paths or ["."]), JavaParser()),
            max_issues=args.max,
        )
        try:
            issues, _ = _report(analyzer, formatter)
        except FatalError as exc:
            formatter.on_fatal_error(exc)
            formatter.on_finish()
            return EXIT_ERROR
        formatter.on_finish()
        if args.format == "text":
            suffix = " (truncated)" if analyzer.truncated else ""
            out.write(f"{issues} results{suffix}\n")
    finally:
        if out is not sys.stdout:
            out.close()
    return EXIT_OK


def cmd_test(args: argparse.Namespace) -> int:
    """Check that rules compile and that their examples behave."""
    formatter = make_formatter("text")
    config = _load_config(args, formatter)
    if isinstance(config, int):
        return config

    failures = 0
    for rule_error in config.rule_errors:
        failures += 1
        print(f"{rule_error.rule_id}: pattern does not compile")
        print(textwrap.indent(str(rule_error.error), "    "))

    parser = JavaParser()
    examples = 0
    for rule in config.rules:
        if not rule.before and not rule.after:
            _log.info("rule %s has no examples", rule.id)
            continue
        for result in check_examples(rule, parser):
            examples += 1
            if result.passed:
                continue
            failures += 1
            where = f"{result.rule_id}: {result.section}[{result.index}]"
            if result.error is not None:
                print(f"{where} does not parse")
                print(textwrap.indent(str(result.error), "    "))
            elif result.section == "before":
                print(f"{where} should match but did not")
            else:
                print(f"{where} should not match but matched {result.matched} times")

    total = len(config.rules) + len(config.rule_errors)
    print(f"Tested {total} rules with {examples} examples: {failures} failures")
    return EXIT_ERROR if failures else EXIT_OK


def cmd_init(args: argparse.Namespace) -> int:
    """Write a starter configuration file."""
    dest = Path(args.config)
    if dest.exists() and not args.force:
        _log.error("%s already exists (use --force to overwrite)", dest)
        return EXIT_ERROR
    template = resources.files("javasee").joinpath(TEMPLATE_RESOURCE_NAME).read_text(
        encoding="utf-8"
    )
    dest.write_text(template, encoding="utf-8")
    print(f"Wrote {dest}")
    return EXIT_OK


def cmd_version(args: argparse.Namespace) -> int:
    print(f"javasee {__version__}")
    return EXIT_OK


def cmd_help(args: argparse.Namespace) -> int:
    _build_parser().print_help()
    return EXIT_OK


# ===========================================================================
# Argument parser
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    """Construct the full CLI argument parser with subcommands."""

    # --- Top-level parser --------------------------------------------------
    parser = argparse.ArgumentParser(
        prog="javasee",
        description=(
            "javasee - structural pattern linter for Java.\n\n"
            "Flags expressions matching the patterns configured in\n"
            "javasee.yml."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              javasee check src/ --format json
              javasee find '_.println("debug")' src/
              javasee test --config javasee.yml
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    def _add_config_arg(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "-c", "--config",
            default=DEFAULT_CONFIG_NAME,
            metavar="FILE",
            help=f"Configuration file (default: {DEFAULT_CONFIG_NAME}).",
        )

    def _add_output_args(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "-o", "--output",
            default=None,
            metavar="FILE",
            help='Output file ("-" or omit for stdout).',
        )
        p.add_argument(
            "-f", "--format",
            choices=sorted(FORMATTERS),
            default="text",
            help="Report format (default: text).",
        )

    # --- check -------------------------------------------------------------
    p_check = subparsers.add_parser(
        "check",
        help="Check Java files against the configured rules.",
        description=(
            "Load the configuration, parse every .java file under the given "
            "paths and report each expression matching a rule."
        ),
    )
    p_check.add_argument(
        "paths",
        nargs="*",
        metavar="PATH",
        help="Files or directories to check (default: the root directory).",
    )
    _add_config_arg(p_check)
    p_check.add_argument(
        "--root",
        default=None,
        metavar="DIR",
        help="Project root exclude globs are relative to "
             "(default: the configuration file's directory).",
    )
    p_check.add_argument(
        "-r", "--rule",
        default=None,
        metavar="ID",
        help="Only apply the rule with this id.",
    )
    p_check.add_argument(
        "-j", "--jobs",
        type=int,
        default=1,
        metavar="N",
        help="Analyze scripts on N worker threads (default: 1).",
    )
    _add_output_args(p_check)
    p_check.set_defaults(func=cmd_check)

    # --- find --------------------------------------------------------------
    p_find = subparsers.add_parser(
        "find",
        help="Find expressions matching a pattern.",
        description="Search Java files for one pattern given on the command line.",
    )
    p_find.add_argument("pattern", metavar="PATTERN", help="Pattern to search for.")
    p_find.add_argument(
        "paths",
        nargs="*",
        metavar="PATH",
        help="Files or directories to search (default: .).",
    )
    p_find.add_argument(
        "--max",
        type=int,
        default=None,
        metavar="N",
        help="Stop after N matches.",
    )
    _add_output_args(p_find)
    p_find.set_defaults(func=cmd_find)

    # --- test --------------------------------------------------------------
    p_test = subparsers.add_parser(
        "test",
        help="Test rule patterns against their examples.",
        description=(
            "Compile every rule and check that its 'before' examples match "
            "and its 'after' examples do not."
        ),
    )
    _add_config_arg(p_test)
    p_test.set_defaults(func=cmd_test)

    # --- init --------------------------------------------------------------
    p_init = subparsers.add_parser(
        "init",
        help="Write a starter configuration file.",
    )
    _add_config_arg(p_init)
    p_init.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing file.",
    )
    p_init.set_defaults(func=cmd_init)

    # --- version / help ----------------------------------------------------
    p_version = subparsers.add_parser("version", help="Show version and exit.")
    p_version.set_defaults(func=cmd_version)

    p_help = subparsers.add_parser("help", help="Show this help.")
    p_help.set_defaults(func=cmd_help)

    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI on *argv* (default ``sys.argv[1:]``) and return the exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    # No subcommand given: print help.
    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_ERROR

    try:
        return args.func(args)
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_ERROR
    except Exception as exc:
        _log.error("Unhandled exception: %s", exc, exc_info=True)
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
