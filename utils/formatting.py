"""
Text formatting utilities for board messages.

Provides display-width aware padding (team names carry emoji), kickoff text
and message clipping.
"""

import datetime
from typing import List
from wcwidth import wcswidth

from config import TIMEZONE_LABEL, MAX_MESSAGE_LENGTH


def display_width(text: str) -> int:
    """Terminal/monospace display width, falling back to len() for unprintables"""
    width = wcswidth(text)
    return width if width != -1 else len(text)


def pad_display(text: str, width: int) -> str:
    """Left-align text to `width` display columns, accounting for emoji"""
    return text + (' ' * max(0, width - display_width(text)))


def format_kickoff(moment: datetime.datetime) -> str:
    """Format a league-local kickoff as "h:mm AM/PM ET M/D"

    Examples:
        21:00 on 2025-09-28 -> "9:00 PM ET 9/28"
        09:05 on 2025-01-04 -> "9:05 AM ET 1/4"
    """
    hour12 = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{hour12}:{moment.minute:02d} {meridiem} {TIMEZONE_LABEL} {moment.month}/{moment.day}"


def align_columns(rows: List[List[str]], separator: str = "  ") -> List[str]:
    """Align rows of cells into fixed-width text lines

    Every column but the last is padded to its widest cell.
    """
    if not rows:
        return []
    columns = max(len(row) for row in rows)
    widths = [0] * columns
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], display_width(cell))

    lines = []
    for row in rows:
        cells = [
            pad_display(cell, widths[i]) if i < len(row) - 1 else cell
            for i, cell in enumerate(row)
        ]
        lines.append(separator.join(cells).rstrip())
    return lines


def clip_message(content: str, limit: int = MAX_MESSAGE_LENGTH) -> str:
    """Clip content to the chat message limit, keeping code fences balanced"""
    if len(content) <= limit:
        return content
    clipped = content[:limit - 8]
    # Close an open code block so the remainder still renders
    if clipped.count("```") % 2 == 1:
        clipped += "\n```"
    return clipped + "\n…"
