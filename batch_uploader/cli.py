"""Command line interface for batch_uploader package."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from rich.logging import RichHandler

from .cli_progress import (
    BatchProgressDisplay,
    ConsoleNotifier,
    confirm_retry,
    render_configuration_summary,
)
from .models import UploadConfig, UploadItem
from .orchestrator import BatchUploadOrchestrator
from .services.http_upload import HTTPUploadService


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Configure logging.

    Default behavior is silent unless --debug or a log level (flag or
    BATCH_UPLOAD_LOG_LEVEL) is provided. Returns a string describing effective mode.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    logging.disable(logging.NOTSET)

    if silent or (not debug and not log_level):
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

    handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return logging.getLevelName(level)


def _strip_optional_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def _load_env_file(path: Path, override: bool = False) -> None:
    if not path.exists():
        raise CLIError(f"env file not found: {path}")
    if not path.is_file():
        raise CLIError(f"env path is not a file: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"could not read env file {path}: {exc}") from exc

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue

        value = _strip_optional_quotes(value.strip())
        if override or key not in os.environ:
            os.environ[key] = value


def _resolve_default_env_file() -> Optional[Path]:
    default_env = Path(".env")
    return default_env if default_env.exists() and default_env.is_file() else None


def _collect_items(sources: Sequence[Path]) -> List[UploadItem]:
    """Turn CLI paths into upload items; folders contribute their files recursively."""
    items: List[UploadItem] = []
    for source in sources:
        path = Path(source).expanduser()
        if path.is_file():
            items.append(UploadItem.from_path(path))
        elif path.is_dir():
            items.extend(
                UploadItem.from_path(child)
                for child in sorted(path.rglob("*"))
                if child.is_file()
            )
        else:
            raise CLIError(f"source does not exist: {path}")
    return items


async def _run_batch(items: Sequence[UploadItem], config: UploadConfig, interactive: bool) -> int:
    if not config.endpoint:
        raise CLIError("no upload endpoint set (use --endpoint or BATCH_UPLOAD_ENDPOINT)")

    display = BatchProgressDisplay()
    async with BatchUploadOrchestrator(
        HTTPUploadService.from_config(config),
        ConsoleNotifier(),
        config=config,
    ) as orchestrator:
        display.attach(orchestrator)
        cycle = await orchestrator.upload_batch(items)
        # Size/validation rejections are never retried, so they stay unresolved.
        rejected = len(cycle.batch.failures) - len(cycle.batch.retry_set)

        # At most one notification per cycle carries a retry action.
        while interactive and cycle.retry_actions:
            action = cycle.retry_actions[0]
            if not confirm_retry(action.names):
                break
            cycle = await action()
            rejected += len(cycle.batch.failures) - len(cycle.batch.retry_set)

        return 0 if cycle.success and not rejected else 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="batch-up",
        description="Upload a set of files, report failures by kind and offer retries.",
    )
    parser.add_argument("sources", nargs="*", type=Path, help="Files or folders to upload")
    parser.add_argument(
        "-e",
        "--endpoint",
        default=None,
        help="Upload endpoint URL (default from BATCH_UPLOAD_ENDPOINT)",
    )
    parser.add_argument(
        "-p",
        "--parallel",
        type=int,
        default=None,
        help="Maximum uploads in flight (default 1: one file at a time)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-request timeout in seconds",
    )
    parser.add_argument(
        "--no-input",
        action="store_true",
        help="Never prompt for retries",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR; default from BATCH_UPLOAD_LOG_LEVEL)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="batch-up (from batch_uploader)",
    )
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    used_env_file = args.env_file or _resolve_default_env_file()
    if used_env_file is not None:
        try:
            _load_env_file(Path(used_env_file))
        except CLIError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level or os.getenv("BATCH_UPLOAD_LOG_LEVEL"),
    )

    if not args.sources:
        parser.print_help()
        return 0

    try:
        items = _collect_items(args.sources)
        config = UploadConfig.from_env(
            endpoint=args.endpoint,
            max_parallel=args.parallel,
            timeout=args.timeout,
        )
    except (CLIError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    if not items:
        print("Nothing to upload.", file=sys.stderr)
        return 0

    interactive = not args.no_input and sys.stdin.isatty()
    render_configuration_summary(
        {
            "Files": len(items),
            "Endpoint": config.endpoint or "(missing)",
            "Parallel": config.max_parallel,
            "Timeout": f"{config.timeout:g}s",
            "Retry Prompt": "yes" if interactive else "no",
            "Env File": str(used_env_file) if used_env_file else "-",
            "Logging": effective_log_mode,
        }
    )

    try:
        return asyncio.run(_run_batch(items, config, interactive))
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
