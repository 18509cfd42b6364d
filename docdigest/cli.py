"""Command line interface for the docdigest toolkit."""

from __future__ import annotations

import asyncio
import json
import signal
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer
import uvicorn
from loguru import logger

from .batch import BatchReport, BatchScheduler, RemoteSummarizer
from .config import AppConfig, load_config
from .config.inspector import check_config, explain_config
from .summary import Document, DocumentProcessor, SummaryPipeline, TooManyFiles
from .web import create_app

_LOG_SINK_ID: int | None = None


@dataclass(slots=True)
class CLIState:
    """Holds shared state between Typer commands."""

    config_path: Path
    _config: AppConfig | None = None

    def ensure_config(self) -> AppConfig:
        if self._config is None:
            if self.config_path.exists():
                logger.info("Loading configuration from {}", self.config_path)
                self._config = load_config(AppConfig, self.config_path)
            else:
                logger.warning("Configuration file {} not found; using defaults", self.config_path)
                self._config = AppConfig()
            _configure_logging(self._config.logging_level)
        return self._config


app = typer.Typer(help="Summarise documents and extract keywords with an LLM provider")
config_app = typer.Typer(help="Validate and document configuration files")
app.add_typer(config_app, name="config")


def _default_config_path() -> Path:
    repo_root = Path(__file__).resolve().parents[1]
    return repo_root / "config" / "example.toml"


def _configure_logging(level: str) -> None:
    """Route the CLI's own stderr sink at ``level``, replacing loguru's default handler."""

    global _LOG_SINK_ID
    if _LOG_SINK_ID is None:
        try:
            logger.remove(0)
        except ValueError:
            pass  # default handler already removed by the host application
    else:
        logger.remove(_LOG_SINK_ID)
    _LOG_SINK_ID = logger.add(sys.stderr, level=level)


def _normalize_format(value: str) -> str:
    return value.lower()


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):  # pragma: no cover
        raise RuntimeError("CLI context is not initialised")
    return state


def _exit(code: int) -> None:
    raise typer.Exit(code)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    config: Path = typer.Option(
        _default_config_path(),
        help="Path to the TOML configuration file",
    ),
) -> None:
    """Initialise CLI state."""

    ctx.obj = CLIState(config_path=config.resolve())
    if ctx.invoked_subcommand is None:
        logger.warning("No command provided. Try 'summarize FILE...' or 'status'.")
        _exit(0)


@app.command(help="Show configuration status")
def status(ctx: typer.Context) -> None:
    config = _get_state(ctx).ensure_config()
    _report_system_status(config)


def _resolve_instruction(config: AppConfig, prompt: str | None, preset: str | None) -> str | None:
    if prompt is not None:
        return prompt
    if preset is not None:
        try:
            return config.prompts.lookup(preset).text
        except KeyError:
            available = ", ".join(p.name for p in config.prompts.presets) or "none"
            logger.error("Unknown prompt preset '{}' (available: {})", preset, available)
            return None
    return config.prompts.default


def _build_processor(config: AppConfig, server: str | None) -> DocumentProcessor:
    if server:
        headers: dict[str, str] = {}
        auth = config.web.auth if config.web else None
        if auth and auth.enabled and auth.token:
            headers[auth.header_name] = auth.token
        logger.info("Sending documents to summary server {}", server)
        return RemoteSummarizer(server, headers=headers)
    return SummaryPipeline(config.provider)


async def _run_batch(
    processor: DocumentProcessor,
    documents: list[Document],
    *,
    instruction: str,
    credential: str,
) -> BatchReport:
    scheduler = BatchScheduler(processor)
    try:
        batch = scheduler.enqueue(documents)
        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, batch.cancel)
            handler_installed = True
        except (NotImplementedError, RuntimeError):
            handler_installed = False
        try:
            return await scheduler.run(batch, instruction=instruction, credential=credential)
        finally:
            if handler_installed:
                loop.remove_signal_handler(signal.SIGINT)
    finally:
        await processor.aclose()


@app.command(help="Summarise documents and extract keywords")
def summarize(
    ctx: typer.Context,
    paths: list[Path] = typer.Argument(..., help="Documents to summarise (pdf, docx, txt, md, csv, json)"),
    prompt: str | None = typer.Option(None, "--prompt", help="Instruction sent with every document"),
    preset: str | None = typer.Option(None, "--preset", help="Name of a saved prompt preset"),
    api_key: str | None = typer.Option(
        None,
        "--api-key",
        help="Provider API key (defaults to provider.api_key from the configuration)",
    ),
    server: str | None = typer.Option(
        None,
        "--server",
        help="Base URL of a running 'docdigest serve' instance; summarise locally when omitted",
    ),
    output: Path | None = typer.Option(None, "--output", help="Write the JSON report to this file"),
) -> None:
    config = _get_state(ctx).ensure_config()

    instruction = _resolve_instruction(config, prompt, preset)
    if instruction is None:
        _exit(2)
        return
    if not instruction.strip():
        logger.error("An instruction is required")
        _exit(2)
        return

    credential = api_key or config.provider.resolve_api_key()
    if not credential:
        logger.error("A provider API key is required; pass --api-key or set provider.api_key")
        _exit(2)
        return

    documents: list[Document] = []
    for path in paths:
        if not path.is_file():
            logger.error("File not found: {}", path)
            _exit(2)
            return
        documents.append(Document(name=path.name, content=path.read_bytes()))

    processor = _build_processor(config, server)
    try:
        report = asyncio.run(_run_batch(processor, documents, instruction=instruction, credential=credential))
    except TooManyFiles as exc:
        logger.error("{}", exc.message)
        _exit(2)
        return

    rendered = json.dumps(report.to_dict(), indent=2, ensure_ascii=False)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(rendered + "\n", encoding="utf-8")
        logger.info("Report written to {}", output)
    else:
        typer.echo(rendered)

    if report.failed:
        _exit(1)


@app.command(help="Run the summarisation API server")
def serve(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", help="Host to bind the API server to"),
    port: int = typer.Option(8000, help="Port to bind the API server to"),
) -> None:
    config = _get_state(ctx).ensure_config()
    app_instance = create_app(config)
    logger.info("Starting API server on {}:{}", host, port)
    uvicorn.run(app_instance, host=host, port=port, log_level=config.logging_level.lower())


@config_app.command(help="Validate the configuration file")
def check(
    ctx: typer.Context,
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for validation results",
        callback=_normalize_format,
    ),
) -> None:
    state = _get_state(ctx)
    result, exit_code, _ = check_config(state.config_path)

    if format == "json":
        print(json.dumps(result, indent=2, ensure_ascii=False, default=str))
        _exit(exit_code)

    if result["status"] == "ok":
        logger.info("Configuration OK: {} (model {})", result["config_path"], result["model"])
        for warning in result["warnings"]:
            logger.warning(warning)
    else:
        error: dict[str, Any] = result["error"]
        logger.error(
            "Configuration error ({}) for {}: {}",
            error["type"],
            result["config_path"],
            error["message"],
        )
        for detail in error.get("details", []):
            location = detail["loc"] or "<root>"
            logger.error("  - {}: {} ({})", location, detail["message"], detail["type"])

    _exit(exit_code)


@config_app.command(help="Describe available configuration fields")
def explain(
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for configuration schema",
        callback=_normalize_format,
    ),
) -> None:
    fields = explain_config()

    if format == "json":
        print(json.dumps({"fields": fields}, indent=2, ensure_ascii=False, default=str))
        return

    logger.info("Configuration schema ({} fields):", len(fields))
    for field in fields:
        default_value = field["default"]
        if isinstance(default_value, (dict, list)):
            default_repr = json.dumps(default_value, ensure_ascii=False, default=str)
        else:
            default_repr = str(default_value)
        logger.info(
            "- {} [{}] required={} default={} :: {}",
            field["name"],
            field["type"],
            field["required"],
            default_repr,
            field["description"] or "(no description)",
        )


def _report_system_status(config: AppConfig) -> None:
    provider = config.provider
    logger.info("Logging level: {}", config.logging_level)
    logger.info("Provider: {} (model {})", provider.base_url, provider.resolved_model)
    logger.info("Provider API key configured: {}", "yes" if provider.api_key else "no")
    logger.info("Prompt presets: {}", len(config.prompts.presets))
    for preset in config.prompts.presets:
        logger.info("  - {}", preset.name)
    if config.web is None:
        logger.info("Web service: defaults")
    else:
        auth_enabled = bool(config.web.auth and config.web.auth.enabled)
        logger.info("Web service: {} (auth={})", config.web.title, "on" if auth_enabled else "off")


def main(argv: list[str] | None = None) -> int:
    """Entry point compatible with setuptools console scripts."""

    try:
        result = app(args=argv, standalone_mode=False)
    except typer.Exit as exc:  # pragma: no cover - Typer translates exit codes
        return exc.exit_code
    if isinstance(result, int):
        return result
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
