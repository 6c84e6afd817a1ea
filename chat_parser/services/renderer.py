"""
Transcript renderer - prints classified entries to the primary output, one at a time.

Format:

    [001] [00:00] SYSTEM:      Session initialized (ID: abc123, Model: m1)

    [002] [00:03] ASSISTANT:   I'll look at the repository first.

                               🔧 Using tool: `Bash` with {
                                 "command": "ls"
                               ▸ more input:
                               }

Speaker styles only affect presentation. Colors are emitted according to the
color mode: 'auto' keeps them for terminals and strips them for pipes.
"""

from __future__ import annotations

from typing import TextIO

import typer

from chat_parser.config.base import ColorMode
from chat_parser.exceptions import RenderError
from chat_parser.schemas.entries import ChatEntry
from chat_parser.schemas.types import Speaker
from chat_parser.services.formatting import DisclosurePolicy, LineTone, format_terminal
from chat_parser.services.ingestion import format_elapsed

__all__ = ['PREFIX_WIDTH', 'TranscriptRenderer', 'color_flag']

HEADER = '=== Claude Code Chat Transcript ==='
PREFIX_WIDTH = 26

# (speaker label style, content style) per speaker
_SPEAKER_STYLES: dict[Speaker, tuple[dict[str, object], dict[str, object]]] = {
    'ASSISTANT': ({'fg': typer.colors.GREEN, 'bold': True}, {'fg': typer.colors.GREEN}),
    'USER': ({'fg': typer.colors.BLUE, 'bold': True}, {'fg': typer.colors.BLUE}),
    'SYSTEM': ({'fg': typer.colors.YELLOW, 'bold': True}, {'fg': typer.colors.BRIGHT_BLACK}),
    'OTHER': ({'fg': typer.colors.WHITE}, {'fg': typer.colors.WHITE}),
}

_TONE_STYLES: dict[LineTone, dict[str, object]] = {
    'tool': {'fg': typer.colors.GREEN},
    'result': {'fg': typer.colors.MAGENTA},
    'error': {'fg': typer.colors.RED},
    'muted': {'dim': True},
}


def color_flag(mode: ColorMode) -> bool | None:
    """Map a color mode onto click's `color` argument (None = detect terminal)."""
    return {'auto': None, 'always': True, 'never': False}[mode]


class TranscriptRenderer:
    """
    Writes the human-readable transcript.

    Any failure to write is fatal: the transcript is the primary deliverable,
    so RenderError propagates and ends the run.
    """

    def __init__(
        self,
        out: TextIO | None = None,
        policy: DisclosurePolicy | None = None,
        color: ColorMode = 'auto',
    ) -> None:
        """
        Initialize renderer.

        Args:
            out: Output stream (default: standard output at write time)
            policy: Disclosure thresholds for the terminal
            color: Color mode
        """
        self.out = out
        self.policy = policy or DisclosurePolicy()
        self.color = color_flag(color)

    def render_header(self) -> None:
        """Print the transcript banner."""
        self._write(typer.style(HEADER, fg=typer.colors.CYAN, bold=True) + '\n\n')

    def render(self, entry: ChatEntry) -> bool:
        """
        Print one entry.

        Returns:
            True if something was printed (entries with empty content are skipped)

        Raises:
            RenderError: If the output stream cannot be written
        """
        if not entry.content:
            return False

        self._write(self.format(entry), entry.line_number)
        return True

    def format(self, entry: ChatEntry) -> str:
        """Styled text for an entry, including the trailing newline(s)."""
        label_style, content_style = _SPEAKER_STYLES[entry.speaker]

        number = f'[{entry.line_number:03d}]'
        timestamp = f'[{format_elapsed(entry.elapsed)}]'
        label = f'{entry.speaker_label}:'
        plain_prefix = f'{number} {timestamp} {label}'
        width = max(PREFIX_WIDTH, len(plain_prefix))
        padding = ' ' * (width - len(plain_prefix) + 1)
        indent = ' ' * (width + 1)

        prefix = (
            typer.style(number, fg=typer.colors.BRIGHT_BLACK)
            + ' '
            + typer.style(timestamp, dim=True)
            + ' '
            + typer.style(label, **label_style)  # type: ignore[arg-type]
            + padding
        )

        output: list[str] = []
        for index, line in enumerate(format_terminal(entry.blocks, self.policy)):
            style = _TONE_STYLES.get(line.tone, content_style)
            text = typer.style(line.text, **style) if line.text else ''  # type: ignore[arg-type]
            if index == 0:
                output.append(prefix + text)
            elif line.text:
                output.append(indent + text)
            else:
                output.append('')

        if entry.was_json:
            output.append('')
        return '\n'.join(output) + '\n'

    def _write(self, text: str, line_number: int | None = None) -> None:
        try:
            typer.echo(text, file=self.out, nl=False, color=self.color)
        except (OSError, ValueError) as e:
            raise RenderError(e, line_number) from e
