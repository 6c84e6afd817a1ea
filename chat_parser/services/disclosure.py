"""
Progressive disclosure - bounded previews of long content without losing any of it.

Tool inputs and tool results can be arbitrarily large. Content within the
limits is shown whole; anything longer is split into an inline preview and a
remainder that the output surface presents as a collapsible block.

Split rule:
- More lines than max_lines: preview is the first max_lines lines, remainder
  the rest.
- Otherwise (one or few very long lines): preview is the first max_chars
  characters plus an ellipsis, remainder the characters after them.

Every character of the input lands in exactly one of preview or remainder;
`Disclosure.original` puts them back together.
"""

from __future__ import annotations

import attrs

__all__ = [
    'ELLIPSIS',
    'Disclosure',
    'DisclosureLimits',
    'TOOL_INPUT_LIMITS',
    'TOOL_RESULT_LIMITS',
    'disclose',
]

ELLIPSIS = '...'


@attrs.define(frozen=True)
class DisclosureLimits:
    """Thresholds above which content is split into preview and remainder."""

    max_lines: int = 2
    max_chars: int = 300


TOOL_INPUT_LIMITS = DisclosureLimits(max_lines=2, max_chars=300)
TOOL_RESULT_LIMITS = DisclosureLimits(max_lines=2, max_chars=400)


@attrs.define(frozen=True)
class Disclosure:
    """Result of splitting content.

    Fields:
        preview: Always shown inline
        remainder: Shown on demand; empty when the whole content fit
        truncated: True when the preview was cut mid-line and ends with ELLIPSIS
        line_split: True when preview and remainder were separated at a newline
    """

    preview: str
    remainder: str = ''
    truncated: bool = False
    line_split: bool = False

    @property
    def collapsed(self) -> bool:
        return bool(self.remainder)

    @property
    def original(self) -> str:
        """Reconstruct the content that was split."""
        if self.line_split:
            return f'{self.preview}\n{self.remainder}'
        if self.truncated:
            return self.preview.removesuffix(ELLIPSIS) + self.remainder
        return self.preview


def disclose(text: str, limits: DisclosureLimits) -> Disclosure:
    """Split text into a preview and a collapsible remainder."""
    lines = text.split('\n')

    if len(lines) <= limits.max_lines and len(text) <= limits.max_chars:
        return Disclosure(preview=text)

    if len(lines) > limits.max_lines:
        return Disclosure(
            preview='\n'.join(lines[: limits.max_lines]),
            remainder='\n'.join(lines[limits.max_lines :]),
            line_split=True,
        )

    return Disclosure(
        preview=text[: limits.max_chars] + ELLIPSIS,
        remainder=text[limits.max_chars :],
        truncated=True,
    )
