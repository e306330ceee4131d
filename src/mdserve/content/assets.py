"""Asset resolution — maps ``/assets/...`` references to files on disk.

References are resolved against the document's directory, and anything that
resolves outside it is rejected.  Containment is checked on path segments
(``Path.is_relative_to``), so a sibling such as ``/docs-evil`` never passes
for a base of ``/docs``.

References arrive already percent-decoded: Pounce decodes the request path
before routing and nothing here decodes again, so a file literally named
``a%41.png`` is served under that name.
"""

from __future__ import annotations

from pathlib import Path

from mdserve._errors import AssetPathError


def resolve_asset(base_dir: Path, reference: str) -> Path:
    """Resolve *reference* against *base_dir*, rejecting escapes.

    The (already decoded) reference is joined onto the base directory and
    fully resolved (``..`` collapsed, symlinks followed) before the
    containment check.

    Raises:
        AssetPathError: (403) if the resolved path leaves *base_dir*.

    """
    if "\x00" in reference:
        msg = f"Invalid asset reference: {reference!r}"
        raise AssetPathError(msg, status=403)

    base = base_dir.resolve()
    candidate = (base / reference).resolve()
    if not candidate.is_relative_to(base):
        msg = f"Asset reference escapes the document directory: {reference!r}"
        raise AssetPathError(msg, status=403)
    return candidate


def find_asset(base_dir: Path, reference: str) -> Path:
    """Resolve *reference* and require an existing, regular file.

    Raises:
        AssetPathError: 403 for traversal attempts, 404 for missing files.

    """
    path = resolve_asset(base_dir, reference)
    if not path.is_file():
        msg = f"Asset not found: {reference!r}"
        raise AssetPathError(msg, status=404)
    return path
