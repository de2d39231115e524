"""Positional diff of two Markdown texts.

Both sides are first put in canonical form (decoded and re-encoded), so
formatting noise such as extra blank lines or list numbering does not
count as a change.  Lines are then compared by index, not aligned: one
inserted line marks every line after it as changed.
"""

from __future__ import annotations

from notionsync.converter.blocks import decode_blocks, encode_blocks

NO_CHANGES = "No changes detected."


def canonicalize(text: str) -> str:
    """Decode and re-encode *text*, trimming surrounding whitespace."""
    return encode_blocks(decode_blocks(text)).strip()


def diff_lines(local: str, remote: str) -> list[str]:
    """Compare two canonical texts line by line.

    For every index where they differ, the remote line is reported as
    ``-<line>`` and then the local line as ``+<line>``.  A side with no
    line at that index contributes nothing.

    >>> diff_lines("A\\nB\\nC", "A\\nX\\nC")
    ['-X', '+B']
    """
    local_lines = local.split("\n") if local else []
    remote_lines = remote.split("\n") if remote else []
    report: list[str] = []
    for index in range(max(len(local_lines), len(remote_lines))):
        ours = local_lines[index] if index < len(local_lines) else None
        theirs = remote_lines[index] if index < len(remote_lines) else None
        if ours == theirs:
            continue
        if theirs is not None:
            report.append(f"-{theirs}")
        if ours is not None:
            report.append(f"+{ours}")
    return report


def render_diff(file_path: str, page_id: str, lines: list[str]) -> str:
    """Human-readable report, or :data:`NO_CHANGES` when *lines* is empty."""
    if not lines:
        return NO_CHANGES
    return f"Comparing {file_path} against Notion page {page_id}\n\n" + "\n".join(lines) + "\n"
