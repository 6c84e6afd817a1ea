"""
Buildkite annotation sink.

Implements AnnotationSink by running `buildkite-agent annotate` once per entry,
with the markdown body on stdin. The same --context replaces the previous
annotation, so re-processing a line updates its record instead of adding one.
"""

from __future__ import annotations

import os
import shutil
import subprocess

from chat_parser.exceptions import AnnotationDeliveryError
from chat_parser.schemas.entries import Annotation


class BuildkiteAnnotationSink:
    """Buildkite agent CLI annotation sink."""

    def __init__(self, command: str = 'buildkite-agent', timeout: float = 30.0) -> None:
        """
        Initialize Buildkite sink.

        Args:
            command: buildkite-agent executable name or path
            timeout: Seconds to wait for each annotate call
        """
        self.command = command
        self.timeout = timeout

    @staticmethod
    def detected(command: str = 'buildkite-agent') -> bool:
        """True when running inside a Buildkite job with the agent CLI on PATH."""
        return os.environ.get('BUILDKITE') == 'true' and shutil.which(command) is not None

    def annotate(self, annotation: Annotation) -> None:
        """
        Create or replace the annotation for `annotation.context`.

        Raises:
            AnnotationDeliveryError: If the agent cannot be run, times out or exits non-zero
        """
        args = [
            self.command,
            'annotate',
            '--style',
            annotation.style,
            '--context',
            annotation.context,
            '--priority',
            str(annotation.priority),
        ]

        try:
            subprocess.run(
                args,
                input=annotation.body,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',  # lone surrogates from undecodable input bytes
                check=True,
                timeout=self.timeout,
            )
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or '').strip()
            reason = f'{self.command} exited with status {e.returncode}'
            raise AnnotationDeliveryError(annotation.context, f'{reason}: {stderr}' if stderr else reason) from e
        except subprocess.TimeoutExpired as e:
            raise AnnotationDeliveryError(annotation.context, f'{self.command} timed out after {self.timeout}s') from e
        except OSError as e:
            raise AnnotationDeliveryError(annotation.context, f'cannot run {self.command}: {e}') from e
