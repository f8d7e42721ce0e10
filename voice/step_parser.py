"""
Recipe step parser.
Extracts the ordered instruction steps from a free-text model reply.
"""

from __future__ import annotations

import re

from constants import STEP_STYLE_NUMBERED, STEP_STYLE_VERBATIM

# "Step 3: Whisk the eggs." or "step 3. whisk": kept verbatim, one per line
_STEP_PATTERN = re.compile(r'Step[ \t]*\d+[:.][ \t]+\S.*', re.IGNORECASE)

# "3. Whisk the eggs." / "3) Whisk the eggs."
_NUMBERED_PATTERN = re.compile(r'^\d+[).]')
_NUMBERED_MARKER = re.compile(r'^\d+[).]\s*')

_LINE_SPLIT = re.compile(r'\n+')


def parse_steps(
    text: str | None,
    style: str = STEP_STYLE_VERBATIM,
    strip_markers: bool = False,
    max_steps: int | None = None,
) -> list[str]:
    """
    Parse a model reply into a list of instruction steps.

    style="step":      every "Step N: text" segment, verbatim.
    style="numbered":  every line starting with "N." or "N)", trimmed;
                       strip_markers drops the leading "N." from each.

    Returns an empty list when nothing matches. That is a valid result,
    not an error: callers decide what to tell the user.
    """
    if not text or not text.strip():
        return []

    if style == STEP_STYLE_VERBATIM:
        steps = [m.group(0).strip() for m in _STEP_PATTERN.finditer(text)]
    elif style == STEP_STYLE_NUMBERED:
        steps = []
        for line in _LINE_SPLIT.split(text):
            line = line.strip()
            if not _NUMBERED_PATTERN.match(line):
                continue
            if strip_markers:
                line = _NUMBERED_MARKER.sub("", line, count=1)
            if line:
                steps.append(line)
    else:
        raise ValueError(f"Unknown step style: {style!r}")

    if max_steps is not None:
        steps = steps[:max_steps]
    return steps
