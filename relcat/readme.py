"""Parser for component README files.

A README starts with ``# component_name`` and is split into sections by
``## Heading`` lines::

    # rlm_sql

    ## Summary
    SQL server module.

    ## Configuration
    ...
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, Optional

from .errors import MalformedDocumentationError
from .models import ParsedDocumentation

_HEADER = re.compile(r"^#\s+([a-z0-9_]+)$")
_SECTION = re.compile(r"^##\s+([A-Za-z]+)$")


def parse_readme(lines: Iterable[str]) -> Optional[ParsedDocumentation]:
    """Parse README lines, returning None when the file has no content."""
    state = "header"
    component_name = ""
    sections: Dict[str, str] = {}
    heading: Optional[str] = None
    text = ""

    for raw in lines:
        line = raw.rstrip("\r\n")

        if state == "header":
            if not line.strip():
                continue
            match = _HEADER.match(line)
            if not match:
                raise MalformedDocumentationError(line)
            component_name = match.group(1)
            state = "section"
            continue

        match = _SECTION.match(line)
        if match:
            if heading is not None:
                sections[heading.lower()] = text
            heading = match.group(1)
            text = ""
            continue

        text += f"{line}\n"

    if state == "header":
        # no header line at all: treated as no documentation, not an empty one
        return None
    if heading is not None:
        sections[heading.lower()] = text
    return ParsedDocumentation(component_name=component_name, sections=sections)


__all__ = ["parse_readme"]
