#!/usr/bin/env python3
"""
Command-line interface for chat-parser.

Renders a Claude Code stream-json session as a color-coded transcript and
reports each entry as a Buildkite annotation.

Examples:
    chat-parser session.jsonl
    claude -p --output-format=stream-json ... | chat-parser -
    claude -p --output-format=stream-json ... | chat-parser - -o session.jsonl
"""

from __future__ import annotations

import contextlib
from typing import TextIO, TypeGuard

import pydantic
import typer

from chat_parser.cli.logger import CLILogger
from chat_parser.config.base import AnnotationMode, ChatParserSettings, ColorMode, settings
from chat_parser.exceptions import ChatParserError
from chat_parser.protocols import LoggerProtocol
from chat_parser.services.annotations import AnnotationEmitter, BackgroundAnnotationEmitter
from chat_parser.services.classifier import EventClassifier
from chat_parser.services.disclosure import DisclosureLimits
from chat_parser.services.formatting import DisclosurePolicy
from chat_parser.services.ingestion import STDIN_MARKER, iter_raw_lines, open_source
from chat_parser.services.processor import TranscriptProcessor, open_capture
from chat_parser.services.renderer import TranscriptRenderer
from chat_parser.sinks import AnnotationSink, BuildkiteAnnotationSink

app = typer.Typer(
    name='chat-parser',
    help='Render a Claude Code stream-json session as a transcript with Buildkite annotations',
    add_completion=False,
)


# Type guards and validators


def _is_color_mode(value: str) -> TypeGuard[ColorMode]:
    return value in ('auto', 'always', 'never')


def _is_annotation_mode(value: str) -> TypeGuard[AnnotationMode]:
    return value in ('auto', 'on', 'off')


def _validate_color(value: str | None) -> ColorMode | None:
    """Validate and narrow color mode for typer callback."""
    if value is None:
        return None
    if _is_color_mode(value):
        return value
    raise typer.BadParameter("Must be 'auto', 'always' or 'never'")


def _validate_annotations(value: str | None) -> AnnotationMode | None:
    """Validate and narrow annotation mode for typer callback."""
    if value is None:
        return None
    if _is_annotation_mode(value):
        return value
    raise typer.BadParameter("Must be 'auto', 'on' or 'off'")


@app.command()
def parse(
    ctx: typer.Context,
    source: str = typer.Argument(..., metavar='INPUT', help="Session JSONL file, or '-' to read from stdin"),
    output: str | None = typer.Option(
        None, '--output', '-o', help='Save the raw input stream to a file (only when reading from stdin)'
    ),
    annotations: str | None = typer.Option(
        None,
        '--annotations',
        help='Buildkite annotations: auto (when running in Buildkite), on or off',
        callback=_validate_annotations,
    ),
    color: str | None = typer.Option(
        None, '--color', help='Transcript colors: auto, always or never', callback=_validate_color
    ),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose diagnostics on stderr'),
) -> None:
    """Render a session transcript from a file or a live stream on stdin."""
    if output is not None and source != STDIN_MARKER:
        raise typer.BadParameter(
            f"can only be used when streaming from stdin ('{STDIN_MARKER}')", param_hint="'-o' / '--output'", ctx=ctx
        )

    logger = CLILogger(verbose=verbose)

    # First attribute access loads the settings; usage errors above never touch them
    try:
        annotation_mode = annotations or settings.ANNOTATIONS
        color_mode = color or settings.COLOR
    except (pydantic.ValidationError, FileNotFoundError) as e:
        typer.secho(f'Error: invalid configuration: {e}', fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    try:
        _run(source, output, annotation_mode, color_mode, settings, logger)
    except ChatParserError as e:
        typer.secho(f'Error: {e.stage} failed: {e}', fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


def _run(
    source: str,
    output: str | None,
    annotations: AnnotationMode,
    color: ColorMode,
    config: ChatParserSettings,
    logger: CLILogger,
) -> None:
    """Open sinks and source, then process the stream to the end."""
    # Fail fast on the capture file before reading any input
    capture = open_capture(output) if output else None
    stream: TextIO | None = None
    try:
        stream = open_source(source)
        renderer = TranscriptRenderer(policy=_terminal_policy(config), color=color)
        with contextlib.ExitStack() as stack:
            emitter = _build_emitter(_build_sink(annotations, config, logger), config, logger)
            if emitter is not None:
                stack.enter_context(emitter)
            processor = TranscriptProcessor(
                classifier=EventClassifier(logger),
                renderer=renderer,
                emitter=emitter,
                capture=capture,
                capture_path=output or '',
                logger=logger,
            )
            renderer.render_header()
            processor.run(iter_raw_lines(stream, source))

        if emitter is not None:
            logger.info(f'Annotations: {emitter.delivered} delivered, {emitter.failed} failed')
    finally:
        if stream is not None:
            if source == STDIN_MARKER:
                stream.detach()  # Leave the process's stdin open
            else:
                stream.close()
        if capture is not None:
            capture.close()


def _terminal_policy(config: ChatParserSettings) -> DisclosurePolicy:
    return DisclosurePolicy(
        tool_input=DisclosureLimits(config.TERMINAL_PREVIEW_LINES, config.TERMINAL_TOOL_INPUT_PREVIEW_CHARS),
        tool_result=DisclosureLimits(config.TERMINAL_PREVIEW_LINES, config.TERMINAL_TOOL_RESULT_PREVIEW_CHARS),
    )


def _annotation_policy(config: ChatParserSettings) -> DisclosurePolicy:
    return DisclosurePolicy(
        tool_input=DisclosureLimits(config.PREVIEW_LINES, config.TOOL_INPUT_PREVIEW_CHARS),
        tool_result=DisclosureLimits(config.PREVIEW_LINES, config.TOOL_RESULT_PREVIEW_CHARS),
    )


def _build_sink(mode: AnnotationMode, config: ChatParserSettings, logger: LoggerProtocol) -> AnnotationSink | None:
    """Pick the annotation sink for this run, or None when annotations are disabled."""
    if mode == 'off':
        return None
    if mode == 'auto' and not BuildkiteAnnotationSink.detected(config.ANNOTATE_COMMAND):
        logger.info('Not running in a Buildkite job, annotations disabled')
        return None
    return BuildkiteAnnotationSink(config.ANNOTATE_COMMAND, config.ANNOTATION_TIMEOUT_SECONDS)


def _build_emitter(
    sink: AnnotationSink | None, config: ChatParserSettings, logger: LoggerProtocol
) -> AnnotationEmitter | None:
    if sink is None:
        return None
    policy = _annotation_policy(config)
    priority = config.ANNOTATION_PRIORITY
    prefix = config.ANNOTATION_CONTEXT_PREFIX
    if config.ANNOTATION_WORKERS > 0:
        return BackgroundAnnotationEmitter(sink, config.ANNOTATION_WORKERS, logger, policy, priority, prefix)
    return AnnotationEmitter(sink, logger, policy, priority, prefix)


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == '__main__':
    main()
