"""Line-by-line comparison of a local document with its page."""

from __future__ import annotations

from .report import NO_CHANGES, canonicalize, diff_lines, render_diff

__all__ = ["NO_CHANGES", "canonicalize", "diff_lines", "render_diff"]
