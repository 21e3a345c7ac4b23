"""
Morphological analyzers.

Japanese has no spaces between words, so sentences are segmented and reduced
to dictionary forms by an analyzer. Two backends share the ``Analyzer``
protocol:

- JumanppAnalyzer: runs the jumanpp executable once per sentence
- FugashiAnalyzer: in-process MeCab via fugashi (UniDic lemmas)

Everything else depends only on the protocol.
"""

from __future__ import annotations

import shlex
import subprocess
from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

from loguru import logger

from iplusone.exceptions import TokenizeError

if TYPE_CHECKING:
    from iplusone.config import Settings

# https://github.com/ku-nlp/jumanpp/blob/master/docs/output.md
ALIAS_MARKER = "@"
SPACE_TOKEN = "\\␣"
LEMMA_FIELD = 2
MIN_FIELDS = 12


class Analyzer(Protocol):
    """Splits one sentence into dictionary-form words."""

    def tokenize(self, sentence: str) -> list[str]:
        """Return base forms in sentence order. Raises TokenizeError."""
        ...


def parse_jumanpp_output(
    output: str,
    lemma_field: int = LEMMA_FIELD,
    min_fields: int = MIN_FIELDS,
) -> list[str]:
    """
    Extract dictionary forms from jumanpp output.

    One token per line, space separated. The last field may be a quoted
    string containing spaces, so only a minimum field count is checked.
    Alias lines (alternative analyses of the previous token) start with '@'.
    Short lines, including the trailing EOS, are skipped.
    """
    words = []
    for line in output.splitlines():
        if line.startswith(ALIAS_MARKER):
            continue

        fields = line.split(" ")
        if len(fields) < min_fields:
            continue

        lemma = fields[lemma_field]
        if lemma == SPACE_TOKEN:
            continue

        words.append(lemma)
    return words


class JumanppAnalyzer:
    """Out-of-process analyzer: one jumanpp invocation per sentence."""

    def __init__(self, command: str | Sequence[str] = "jumanpp", timeout: float = 30.0):
        self.command = [command] if isinstance(command, str) else list(command)
        self.timeout = timeout

    def tokenize(self, sentence: str) -> list[str]:
        try:
            result = subprocess.run(
                self.command,
                input=sentence.encode("utf-8"),
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            logger.error("Error calling {}: {}", self.command[0], exc)
            raise TokenizeError(f"Could not run {self.command[0]}: {exc}") from exc

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            logger.error("{} exited with {}: {}", self.command[0], result.returncode, stderr)
            raise TokenizeError(f"{self.command[0]} exited with status {result.returncode}")

        try:
            output = result.stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise TokenizeError(f"Undecodable output from {self.command[0]}") from exc

        return parse_jumanpp_output(output)


class FugashiAnalyzer:
    """In-process analyzer backed by fugashi/MeCab with a UniDic dictionary."""

    def __init__(self, tagger_args: str = ""):
        try:
            import fugashi
        except ImportError as exc:
            raise TokenizeError(
                "fugashi not installed. Run: pip install 'iplusone[fugashi]'"
            ) from exc

        try:
            self._tagger = fugashi.Tagger(tagger_args)
        except RuntimeError as exc:
            raise TokenizeError(f"Could not initialise MeCab tagger: {exc}") from exc

    def tokenize(self, sentence: str) -> list[str]:
        try:
            nodes = self._tagger(sentence)
        except (RuntimeError, ValueError) as exc:
            raise TokenizeError(f"MeCab failed on {sentence!r}: {exc}") from exc

        words = []
        for node in nodes:
            surface = node.surface
            if not surface.strip():
                continue
            # UniDic lemma; unknown words carry no lemma
            lemma = getattr(node.feature, "lemma", None)
            words.append(lemma or surface)
        return words


def create_analyzer(settings: Settings) -> Analyzer:
    """Build the analyzer selected in settings."""
    if settings.analyzer == "fugashi":
        return FugashiAnalyzer()
    return JumanppAnalyzer(shlex.split(settings.jumanpp_command), timeout=settings.analyzer_timeout)
