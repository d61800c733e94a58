"""Shared CLI helpers and decorators."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, TypeVar

import click

from .config import AppConfig, load_config
from .exceptions import (
    ConfigurationError,
    ImportRolledBack,
    LiteAdminError,
    NotFoundError,
    ValidationError,
)
from .logging import Logger, get_logger

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(slots=True)
class CLIContext:
    """Runtime context shared across CLI invocations."""

    config: AppConfig
    db_path: Path
    read_only: bool
    verbose: bool
    logger: Logger


pass_cli_context = click.make_pass_decorator(CLIContext)


def common_cli_options(func: F) -> F:
    """Decorator injecting shared CLI options and context creation."""

    @click.option("--config", "config_path", type=click.Path(path_type=str), help="Path to config file.")
    @click.option("--db", "db_path", type=click.Path(path_type=str), help="Override database path.")
    @click.option("--read-only", is_flag=True, help="Open the database read-only.")
    @click.option("--verbose", is_flag=True, help="Enable verbose logging output.")
    @click.pass_context
    @functools.wraps(func)
    def wrapper(
        ctx: click.Context,
        *args: Any,
        config_path: str | None = None,
        db_path: str | None = None,
        read_only: bool = False,
        verbose: bool = False,
        **kwargs: Any,
    ) -> Any:
        try:
            app_config = load_config(config_path)
        except ConfigurationError as exc:
            raise click.ClickException(str(exc)) from exc

        logger = get_logger(verbose=verbose)
        if db_path:
            app_config = app_config.with_database_path(db_path)
        if read_only:
            app_config = app_config.with_read_only(True)

        cli_ctx = CLIContext(
            config=app_config,
            db_path=app_config.database.path,
            read_only=app_config.database.read_only,
            verbose=verbose,
            logger=logger,
        )
        ctx.obj = cli_ctx
        kwargs["cli_ctx"] = cli_ctx
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def handle_cli_errors(func: F) -> F:
    """Convert project exceptions into Click-friendly errors."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except ConfigurationError as exc:
            raise click.ClickException(f"Configuration error: {exc}") from exc
        except ValidationError as exc:
            raise click.ClickException(f"Invalid input: {exc}") from exc
        except NotFoundError as exc:
            raise click.ClickException(f"Not found: {exc}") from exc
        except ImportRolledBack as exc:
            result = exc.result
            detail = "; ".join(result.errors)
            raise click.ClickException(
                f"{exc} ({result.failed_count} failed row(s)): {detail}"
            ) from exc
        except LiteAdminError as exc:
            raise click.ClickException(str(exc)) from exc
        except (click.ClickException, click.Abort):
            raise
        except Exception as exc:  # pragma: no cover
            raise click.ClickException(f"Unexpected error: {exc}") from exc

    return wrapper  # type: ignore[return-value]
