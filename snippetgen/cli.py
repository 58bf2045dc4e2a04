"""CLI entrypoints for snippetgen commands."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from .config import load_config
from .errors import ConfigError, SnippetGenError, categorize_error, describe_cause
from .generator import SnippetGenerator
from .logging import configure_logging, get_logger
from .models import PackageSnippet

FORMATS = ("markdown", "json", "both")


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to .snippetgen.yml or its directory (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snippetgen",
        description="Generate AI-consumable documentation snippets for packages and repositories.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate a snippet for a package name, registry URL or repository URL.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_config_option(generate_parser)
    generate_parser.add_argument(
        "identifier",
        help="Package name, npm URL or GitHub repository URL.",
    )
    generate_parser.add_argument(
        "--type",
        dest="source_type",
        default=None,
        help="Force the source type (github, npm or openapi).",
    )
    generate_parser.add_argument(
        "--format",
        choices=FORMATS,
        default="markdown",
        help="Output format (defaults to markdown).",
    )
    generate_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write output to this path instead of stdout.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_config_option(serve_parser)
    serve_parser.add_argument("--host", default="0.0.0.0", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for snippetgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), component=args.command)

    if args.command == "generate":
        try:
            generator = SnippetGenerator.from_config(load_config(args.config))
            snippet = asyncio.run(generator.generate(args.identifier, args.source_type))
        except ConfigError as exc:
            parser.exit(1, f"{exc}\n")
        except SnippetGenError as exc:
            parser.exit(1, _failure_message(exc))
        except Exception as exc:
            get_logger("cli").debug("Unexpected generation failure", exc_info=True)
            parser.exit(1, _failure_message(exc))
        _emit(snippet, args.format, args.output)
    elif args.command == "serve":
        from .service import run_service

        try:
            run_service(args.host, args.port, config_path=args.config)
        except ConfigError as exc:
            parser.exit(1, f"{exc}\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _failure_message(exc: Exception) -> str:
    category = categorize_error(exc)
    message = f"snippetgen generate failed: {category.message}"
    cause = describe_cause(exc)
    if cause and cause != category.message:
        message += f" ({cause})"
    return message + "\nRun with --verbose for more details.\n"


def render(snippet: PackageSnippet, output_format: str) -> dict[str, str]:
    """Return the rendered documents keyed by file suffix."""
    rendered: dict[str, str] = {}
    if output_format in ("markdown", "both"):
        rendered[".md"] = snippet.markdown
    if output_format in ("json", "both"):
        rendered[".json"] = json.dumps(snippet.to_dict(), indent=2) + "\n"
    return rendered


def _emit(snippet: PackageSnippet, output_format: str, output: Path | None) -> None:
    rendered = render(snippet, output_format)
    if output is None:
        print("\n".join(text.rstrip("\n") for text in rendered.values()))
        return
    for suffix, text in rendered.items():
        path = output if len(rendered) == 1 else output.with_suffix(suffix)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        print(f"Snippet written to {_relativize(path)}")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
