"""CLI entry point for form-builder.

Validates and renders forms locally, or loads and submits them against a
form builder microservice.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from formbuilder.config import FormBuilderSettings
from formbuilder.core import get_logger, setup_logging
from formbuilder.render import render_form_html
from formbuilder.session import FormBuilder, FormStatus
from formbuilder.validation import validate_answers
from formbuilder.view import build_tree

# Load environment variables from .env file
load_dotenv()

logger = get_logger("cli")


def _read_json(path: str | None) -> Any:
    if not path:
        return None
    if path == "-":
        return json.load(sys.stdin)
    return json.loads(Path(path).read_text(encoding="utf-8"))


def _write_output(text: str, output: str | None) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
        logger.info(f"Wrote {output}")
    else:
        print(text)


# =============================================================================
# Local Commands
# =============================================================================


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate answers against a schema file."""
    try:
        schema = _read_json(args.schema)
        answers = _read_json(args.answers) or {}
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read input: {e}")
        return 1

    errors = validate_answers(schema, answers, max_depth=args.max_depth)
    print(json.dumps(errors, indent=2))
    return 1 if errors else 0


def cmd_render(args: argparse.Namespace) -> int:
    """Render a schema file to HTML."""
    try:
        schema = _read_json(args.schema)
        answers = _read_json(args.answers) or {}
        hints = _read_json(args.hints) or {}
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read input: {e}")
        return 1

    view = build_tree(schema, hints, answers, max_depth=args.max_depth)
    _write_output(render_form_html(view), args.output)
    return 0


# =============================================================================
# Remote Commands
# =============================================================================


def _settings(args: argparse.Namespace) -> FormBuilderSettings:
    return FormBuilderSettings.from_environment(
        base_url=args.base_url,
        form_fname=args.form,
        oidc_url=args.oidc_url,
    )


async def _fetch(args: argparse.Namespace) -> int:
    async with FormBuilder(_settings(args)) as builder:
        await builder.load()
        _write_output(builder.render_html(), args.output)
        return 0 if builder.status is FormStatus.IDLE else 1


async def _submit(args: argparse.Namespace) -> int:
    answers = _read_json(args.answers) or {}
    async with FormBuilder(_settings(args)) as builder:
        builder.on("form-submit-error", lambda detail: logger.error(detail["error"]))

        await builder.load()
        if builder.status is FormStatus.LOAD_ERROR:
            logger.error(f"Could not load form: {builder.error}")
            return 1

        for name, value in answers.items():
            builder.set_nested_value(name, value)
        await builder.submit()

        if builder.field_errors:
            print(json.dumps(builder.field_errors, indent=2))
            return 1

        if builder.status is FormStatus.FORWARDED:
            logger.info(f"Forwarded to form '{builder.fname}'")
            _write_output(builder.render_html(), args.output)
            return 0

        if builder.status is FormStatus.SUCCESS:
            messages = builder.server_messages
            print(messages.message_header or "Form submitted successfully!")
            for message in messages.messages:
                print(f"  {message}")
            return 0

        return 1


def cmd_fetch(args: argparse.Namespace) -> int:
    """Load a remote form and print its HTML."""
    return asyncio.run(_fetch(args))


def cmd_submit(args: argparse.Namespace) -> int:
    """Load a remote form, apply answers and submit them."""
    try:
        return asyncio.run(_submit(args))
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read answers: {e}")
        return 1


# =============================================================================
# Parser
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="formbuilder",
        description="Schema-driven forms: validate, render, fetch and submit",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    validate_parser = subparsers.add_parser(
        "validate", help="Validate answers against a schema file"
    )
    validate_parser.add_argument("schema", help="Schema JSON file")
    validate_parser.add_argument("answers", help="Answers JSON file ('-' for stdin)")
    validate_parser.set_defaults(func=cmd_validate)

    render_parser = subparsers.add_parser("render", help="Render a schema file to HTML")
    render_parser.add_argument("schema", help="Schema JSON file")
    render_parser.add_argument("--answers", help="Answers JSON file")
    render_parser.add_argument("--hints", help="UI hints JSON file")
    render_parser.add_argument("--output", "-o", help="Write HTML to this file")
    render_parser.set_defaults(func=cmd_render)

    for sub in (validate_parser, render_parser):
        sub.add_argument(
            "--max-depth",
            type=int,
            default=FormBuilderSettings.max_depth,
            help="Maximum schema nesting depth",
        )

    fetch_parser = subparsers.add_parser("fetch", help="Load a remote form")
    fetch_parser.set_defaults(func=cmd_fetch)

    submit_parser = subparsers.add_parser("submit", help="Submit answers to a remote form")
    submit_parser.add_argument("answers", help="Answers JSON file ('-' for stdin)")
    submit_parser.set_defaults(func=cmd_submit)

    for sub in (fetch_parser, submit_parser):
        sub.add_argument("--base-url", help="Service base URL (FBMS_BASE_URL)")
        sub.add_argument("--form", help="Form name (FBMS_FORM_FNAME)")
        sub.add_argument("--oidc-url", help="Token endpoint (FBMS_OIDC_URL)")
        sub.add_argument("--output", "-o", help="Write HTML to this file")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)
    try:
        return args.func(args)
    except ValueError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
