"""Logging configuration"""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .config import ClientSettings, get_settings


def setup_logging(settings: ClientSettings | None = None) -> None:
    """Configure application logging with Rich handler"""
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level, logging.INFO)

    console = Console(width=120)
    rich_handler = RichHandler(
        console=console,
        show_time=True,
        show_level=True,
        show_path=False,
        # game text is full of [brackets]; opt in per record with extra={"markup": True}
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
        tracebacks_width=120,
    )
    rich_handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%Y-%m-%d %H:%M:%S]"))

    # force=True: uvicorn configures the root logger first
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%Y-%m-%d %H:%M:%S]",
        handlers=[rich_handler],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.ERROR)

    logger = logging.getLogger("DartMacro")
    data_dir = escape(str(settings.data_dir))
    logger.info(
        f"[bold green]✓[/bold green] Logging: {settings.log_level} | Data: {data_dir}",
        extra={"markup": True},
    )
