"""go.mod reading utilities.

Only ``require`` directives matter for finding a pinned version; ``replace``
and ``exclude`` directives also name module paths and must not be mistaken
for pins.
"""

from __future__ import annotations

import re
from pathlib import Path

_REQUIRE = re.compile(r"^require\b\s*(.*)$")


def parse_requirements(text: str) -> dict[str, str]:
    """Map module path → required version from go.mod source text.

    Handles both the single-line form (``require mod v1.0.0``) and the
    block form (``require ( ... )``). Comments, including ``// indirect``
    markers, are ignored. If a module is required twice, the first
    occurrence wins.
    """
    requirements: dict[str, str] = {}
    in_block = False

    for raw in text.splitlines():
        line = raw.split("//", 1)[0].strip()
        if not line:
            continue

        if in_block:
            if line == ")":
                in_block = False
            else:
                _add_requirement(requirements, line)
            continue

        match = _REQUIRE.match(line)
        if not match:
            continue
        rest = match.group(1).strip()
        if rest == "(":
            in_block = True
        elif rest:
            _add_requirement(requirements, rest)

    return requirements


def _add_requirement(requirements: dict[str, str], requirement: str) -> None:
    fields = requirement.split()
    if len(fields) >= 2:
        requirements.setdefault(fields[0].strip('"'), fields[1])


def required_version(path: Path, module: str) -> str | None:
    """Return the version of ``module`` required by the go.mod at ``path``.

    Returns None if the manifest does not require the module.

    Raises:
        OSError: If the manifest cannot be read.
        UnicodeDecodeError: If the manifest is not UTF-8.
    """
    return parse_requirements(path.read_text(encoding="utf-8")).get(module)
