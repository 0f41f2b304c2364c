"""Transformer interface for producing artifact content.

A transformer reads one component file and writes its transformed text
into a sink provided by the artifact store. Real minifiers live outside
this package; PassthroughTransformer is the built-in default.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, TextIO


class Transformer(Protocol):
    """Writes the transformed content of a source file into a sink."""

    def transform(self, source: Path, sink: TextIO, compress: bool) -> None: ...


class PassthroughTransformer:
    """Copy component files into the artifact unchanged.

    With compress enabled, trailing whitespace and blank lines are dropped.
    """

    encoding = "utf-8"

    def transform(self, source: Path, sink: TextIO, compress: bool) -> None:
        text = Path(source).read_text(encoding=self.encoding)
        if compress:
            lines = (line.rstrip() for line in text.splitlines())
            text = "\n".join(line for line in lines if line)
        if text and not text.endswith("\n"):
            text += "\n"
        sink.write(text)


__all__ = ["PassthroughTransformer", "Transformer"]
