"""
~/.zshrc management.

The file is read whole, pushed through pure list-of-lines transforms, and
written back atomically. Every transform keeps unrelated user lines (and
their order) intact.
"""

from __future__ import annotations

import os
import re
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Sequence

PLUGINS_RE = re.compile(r"^\s*plugins=")
COMPINIT_MARKER = "autoload -Uz compinit"
COMPINIT_BLOCK = ("# Initialize completion system", "autoload -Uz compinit && compinit")


def plugins_line(enable: Sequence[str]) -> str:
    return f"plugins=({' '.join(enable)})"


def _declaration_end(lines: Sequence[str], start: int) -> int:
    """Index of the last line of a `plugins=(` declaration that may span lines."""
    first = lines[start]
    if "(" not in first or ")" in first:
        return start
    for j in range(start + 1, len(lines)):
        if ")" in lines[j]:
            return j
    # Unterminated: only the first line is ours.
    return start


def set_plugins_line(lines: Sequence[str], line: str) -> list[str]:
    """
    Replace the first `plugins=` declaration in place (including the continuation
    lines of a multi-line `plugins=(` ... `)` form), or prepend one plus a blank line.
    """
    out = list(lines)
    for i, existing in enumerate(out):
        if PLUGINS_RE.match(existing):
            end = _declaration_end(out, i)
            out[i : end + 1] = [line]
            return out
    return [line, "", *out]


def ensure_compinit(lines: Sequence[str]) -> list[str]:
    out = list(lines)
    if any(COMPINIT_MARKER in line for line in out):
        return out
    return [*out, "", *COMPINIT_BLOCK]


def _source_header(name: str, *, last: bool) -> str:
    if last:
        return f"# Enable {name} (must be sourced last)"
    return f"# Enable {name}"


def _script_path(name: str) -> str:
    return f"$ZSH_CUSTOM/plugins/{name}/{name}.zsh"


def source_block(name: str, *, last: bool = False) -> list[str]:
    script = _script_path(name)
    return [
        _source_header(name, last=last),
        f"[ -f {script} ] \\",
        f"  && source {script}",
    ]


def drop_sourced(lines: Sequence[str], sourced: Sequence[str]) -> list[str]:
    """
    Remove every line that sources one of `sourced` (matched on `<name>.zsh`),
    however it got there, plus the headers written by `append_sourced`.
    Trailing blank lines are dropped so a re-append lands in the same place.
    """
    scripts = [f"{name}.zsh" for name in sourced]
    headers = set()
    for name in sourced:
        headers.add(_source_header(name, last=False))
        headers.add(_source_header(name, last=True))

    out = [
        line
        for line in lines
        if not any(s in line for s in scripts) and line.strip() not in headers
    ]
    while out and not out[-1].strip():
        out.pop()
    return out


def append_sourced(lines: Sequence[str], sourced: Sequence[str]) -> list[str]:
    out = list(lines)
    for i, name in enumerate(sourced):
        out.append("")
        out.extend(source_block(name, last=(i == len(sourced) - 1)))
    return out


def rewrite(lines: Sequence[str], *, enable: Sequence[str], sourced: Sequence[str]) -> list[str]:
    out = set_plugins_line(lines, plugins_line(enable))
    out = ensure_compinit(out)
    out = drop_sourced(out, sourced)
    return append_sourced(out, sourced)


def read_lines(path: Path) -> list[str]:
    if not path.exists():
        return []
    # Lines end at "\n" only, and non-UTF-8 bytes must survive the rewrite.
    text = path.read_bytes().decode("utf-8", errors="surrogateescape")
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return lines


def render(lines: Sequence[str]) -> str:
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def write_atomic(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
            f.write(text)
        if path.exists():
            shutil.copymode(path, tmp)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def backup_path(path: Path, *, prefix: str, now: datetime) -> Path:
    """Timestamped name next to `path`; never reuses an existing file."""
    stamp = now.strftime("%Y%m%dT%H%M%S")
    candidate = path.parent / f"{prefix}{stamp}"
    n = 1
    while candidate.exists():
        candidate = path.parent / f"{prefix}{stamp}-{n}"
        n += 1
    return candidate


def backup(path: Path, *, prefix: str, now: datetime) -> Path | None:
    if not path.exists():
        return None
    dest = backup_path(path, prefix=prefix, now=now)
    shutil.copy2(path, dest)
    return dest
