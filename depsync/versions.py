"""Version comparison and display utilities.

Decides whether a pinned dependency lags its latest release. Versions are
treated as opaque strings with two shapes:

- tagged: a release tag such as ``v1.4.2``
- pseudo: a pin on an untagged commit such as
  ``v0.0.0-20251224004709-1f8c1de230b4``, recognised by its ``-`` separator

No ordering is ever computed; the registry's latest release is taken as
authoritative, so any difference between two tagged versions is skew.
"""

from __future__ import annotations

import semver


def strip_v(version: str) -> str:
    """Remove a single leading 'v' ("v1.2.3" → "1.2.3")."""
    return version[1:] if version.startswith("v") else version


def is_pseudo(version: str) -> bool:
    """Whether a version pins an untagged commit rather than a release."""
    return "-" in version


def needs_update(current: str, latest: str) -> bool:
    """Decide whether a consumer pinned at ``current`` should move to ``latest``.

    1. pseudo → tagged: always an update, even if the strings match.
    2. pseudo → pseudo: never an update; pseudo-versions are not compared.
    3. tagged → anything: an update iff the strings differ once a leading
       'v' is stripped. This is an equality check, so an older ``latest``
       still counts as an update.

    Examples:
        needs_update("v0.0.0-20240101000000-aaaa", "v1.0.0") → True
        needs_update("v1.2.3", "1.2.3") → False
        needs_update("v2.0.0", "v1.9.0") → True
    """
    if is_pseudo(current):
        return not is_pseudo(latest)
    return strip_v(current) != strip_v(latest)


def describe_version(version: str) -> str:
    """Render a version for the plan table.

    Pseudo-versions are shortened to their base, commit, and date:
    "v0.0.0-20251224004709-1f8c1de230b4" → "v0.0.0 @ 1f8c1de (2025-12-24)".
    Anything else (tags, prereleases, unparseable strings) is returned as-is.
    Display only: decisions never look at this.
    """
    if not is_pseudo(version):
        return version
    try:
        parsed = semver.Version.parse(strip_v(version))
    except ValueError:
        return version

    # Prerelease is "<timestamp>-<commit>", optionally behind "pre.0." or "0."
    fields = (parsed.prerelease or "").split("-")
    if len(fields) < 2:
        return version
    timestamp = fields[-2].rsplit(".", 1)[-1]
    commit = fields[-1]
    if len(timestamp) < 8 or not timestamp.isdigit():
        return version

    date = f"{timestamp[:4]}-{timestamp[4:6]}-{timestamp[6:8]}"
    prefix = "v" if version.startswith("v") else ""
    base = f"{prefix}{parsed.major}.{parsed.minor}.{parsed.patch}"
    return f"{base} @ {commit[:7]} ({date})"
