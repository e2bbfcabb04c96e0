#!/usr/bin/env python3
"""
Time formatting shared by the sentence writers and the CLI.
"""


def _hmsm(seconds: float):
    # round once on the millisecond total so 59.9996 s becomes 00:01:00.000
    total_ms = int(round(max(seconds, 0.0) * 1000))
    total_s, ms = divmod(total_ms, 1000)
    minutes, s = divmod(total_s, 60)
    h, m = divmod(minutes, 60)
    return h, m, s, ms


def format_timestamp(seconds: float, style: str = "hms") -> str:
    """
    Render a time offset.

    Args:
        seconds: Offset in seconds (negative values clamp to 0)
        style: "hms" (00:00:00.000), "srt" (00:00:00,000) or "seconds" (12.34s)
    """
    if style == "seconds":
        return f"{max(seconds, 0.0):.2f}s"

    h, m, s, ms = _hmsm(seconds)
    separator = "," if style == "srt" else "."
    return f"{h:02d}:{m:02d}:{s:02d}{separator}{ms:03d}"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" + ("" if count == 1 else "s")


def format_duration(seconds: float) -> str:
    """Whole-second duration in words, e.g. "1 minute 5 seconds"."""
    minutes, s = divmod(int(max(seconds, 0.0)), 60)
    h, m = divmod(minutes, 60)
    parts = [_plural(n, unit) for n, unit in ((h, "hour"), (m, "minute")) if n]
    if s or not parts:
        parts.append(_plural(s, "second"))
    return " ".join(parts)
