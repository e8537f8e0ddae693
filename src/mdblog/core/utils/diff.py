"""Line diffs between stored post bodies"""

import difflib


def unified_diff(old: str, new: str, from_label: str = "a", to_label: str = "b", context: int = 3) -> list[str]:
    """Unified diff of two bodies as a list of newline-terminated lines; [] when equal."""
    lines = difflib.unified_diff(
        old.splitlines(keepends=True),
        new.splitlines(keepends=True),
        fromfile=from_label,
        tofile=to_label,
        n=context,
    )
    return [line if line.endswith("\n") else line + "\n" for line in lines]
