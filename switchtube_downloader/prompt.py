"""Line-based prompts used outside the interactive selector."""

from __future__ import annotations


def ask(prompt: str) -> str:
    """Read one line from stdin; EOF counts as an empty answer."""
    try:
        return input(prompt).strip()
    except EOFError:
        return ""


def confirm(message: str) -> bool:
    ans = ask(f"{message} (y/N): ").lower()
    return ans in ("y", "yes")


__all__ = ["ask", "confirm"]
