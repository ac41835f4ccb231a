"""Global position space shared by every file of a FileSet.

Each file added to a :class:`PositionTable` reserves the half-open range
``[base, base + size]`` of integer positions. A ``Pos`` therefore identifies
one byte in one file without carrying the file name around. ``NO_POS`` (0)
is never inside a file.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field

Pos = int
NO_POS: Pos = 0


@dataclass(frozen=True, slots=True)
class Position:
    """A resolved source location (1-based line and column)."""

    filename: str
    offset: int
    line: int
    column: int

    @property
    def is_valid(self) -> bool:
        return self.line > 0

    def __str__(self) -> str:
        s = self.filename or "-"
        if self.is_valid:
            s = f"{s}:{self.line}:{self.column}"
        return s


@dataclass(eq=False)
class SourceFile:
    """One file's slice of the position space."""

    name: str
    base: int
    size: int
    _lines: list[int] = field(default_factory=lambda: [0], repr=False)

    @classmethod
    def from_source(cls, name: str, base: int, src: bytes) -> SourceFile:
        f = cls(name=name, base=base, size=len(src))
        f._lines.extend(i + 1 for i, b in enumerate(src) if b == 0x0A)
        return f

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def pos(self, offset: int) -> Pos:
        if not 0 <= offset <= self.size:
            raise ValueError(f"offset {offset} out of range [0, {self.size}] for {self.name}")
        return self.base + offset

    def offset(self, pos: Pos) -> int:
        if not self.base <= pos <= self.base + self.size:
            raise ValueError(f"position {pos} not in file {self.name}")
        return pos - self.base

    def position(self, pos: Pos) -> Position:
        offset = self.offset(pos)
        line = bisect.bisect_right(self._lines, offset)
        column = offset - self._lines[line - 1] + 1
        return Position(filename=self.name, offset=offset, line=line, column=column)


class PositionTable:
    """Position table for a set of files.

    Bases increase monotonically in the order files are added, so positions
    of later files always compare greater than those of earlier files.
    """

    def __init__(self) -> None:
        self._base = 1
        self._files: list[SourceFile] = []
        self._bases: list[int] = []

    @property
    def base(self) -> int:
        """The base the next added file will receive."""
        return self._base

    def add_file(self, name: str, src: bytes) -> SourceFile:
        f = SourceFile.from_source(name, self._base, src)
        self._files.append(f)
        self._bases.append(f.base)
        # +1 so the end position of one file is not the start of the next
        self._base += f.size + 1
        return f

    def files(self) -> list[SourceFile]:
        return list(self._files)

    def file(self, pos: Pos) -> SourceFile | None:
        """Return the file containing pos, or None."""
        if pos == NO_POS:
            return None
        i = bisect.bisect_right(self._bases, pos) - 1
        if i < 0:
            return None
        f = self._files[i]
        if pos > f.base + f.size:
            return None
        return f

    def position(self, pos: Pos) -> Position:
        f = self.file(pos)
        if f is None:
            return Position(filename="", offset=0, line=0, column=0)
        return f.position(pos)

    def __len__(self) -> int:
        return len(self._files)
