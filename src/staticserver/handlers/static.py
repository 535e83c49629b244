"""
=============================================================================
STATIC FILE RESOLVER
=============================================================================

Maps a request target to a file under the document root and loads it.

=============================================================================
RESOLUTION RULES
=============================================================================

    Request target                  Filesystem path
    ──────────────                  ───────────────
    /                               <root>/index.html   (default document)
    /index.html                     <root>/index.html
    /img/logo.gif                   <root>/img/logo.gif
    /my%20page.html                 <root>/my%20page.html (taken literally)
    /a.html?v=3                     <root>/a.html?v=3     (taken literally)
    /docs/                          directory → not found
    /../../etc/passwd               outside root → not found

A target only resolves when it lands on an existing REGULAR file. A
missing file, a directory, a socket or a path outside the root all come
back as None. The caller turns that into a 404. No exception is raised
for this, since asking for a file that isn't there is an ordinary
request, not a failure.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  GET /../../../etc/passwd HTTP/1.0                                  │
    │                                                                      │
    │  Naive join:  /srv/www/../../../etc/passwd  →  /etc/passwd  (!!)    │
    │                                                                      │
    │  Our protection:                                                    │
    │  1. Resolve the full path (follow .. and symlinks)                 │
    │  2. Check it is still inside the document root                     │
    │  3. If not, report it exactly like a missing file                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

We answer 404 rather than 403 so the response doesn't confirm whether
something exists outside the root. Symlinks inside the root that point
outside it are rejected by the same check.

    PYTHON PROTECTION:

        full_path = (root_dir / user_input).resolve()
        full_path.relative_to(root_dir)  # Raises ValueError if outside root

=============================================================================
LIMITATIONS
=============================================================================

Files are read into memory in one piece: there is no streaming and no
caching between requests. Fine for web pages and images, not for
multi-gigabyte downloads.

=============================================================================
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..http.mime_types import get_content_type


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedFile:
    """
    A file found under the document root, loaded and classified.

    Attributes:
        path:         Canonical filesystem path of the file
        content_type: Value for the Content-Type header
        content:      The complete file contents
    """

    path: Path
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


class StaticFileResolver:
    """
    Resolves request targets to files under a fixed document root.

    =========================================================================
    FLOW
    =========================================================================

        resolve("/")

        1. "/" → "/index.html"
        2. Join the target, byte for byte, beneath root
        3. resolve() to a canonical path
        4. Security check: still inside root?
        5. Regular file? → read bytes, pick Content-Type

    =========================================================================
    USAGE
    =========================================================================

        resolver = StaticFileResolver("/var/www")

        found = resolver.resolve("/index.html")
        if found is None:
            ...  # 404
        else:
            writer.write_file(stream, found.content_type, found.content)

    =========================================================================
    """

    def __init__(self, document_root: Union[str, Path], index_file: str = "index.html"):
        """
        Args:
            document_root: Directory to serve files from. All served
                           files MUST be inside this directory.
            index_file: Default document served for "/".

        Raises:
            ValueError: If document_root is not an existing directory.
        """
        # Resolve to absolute path (the traversal check relies on it)
        self.root_dir = Path(document_root).resolve()
        self.index_file = index_file

        if not self.root_dir.is_dir():
            raise ValueError(f"Document root is not a directory: {document_root}")

    def resolve(self, target: str) -> Optional[ResolvedFile]:
        """
        Find and load the file a request target refers to.

        Args:
            target: The request target as sent by the client.

        Returns:
            The loaded file, or None if the target doesn't name a regular
            file inside the document root.

        Raises:
            OSError: The file exists but couldn't be read (permissions,
                     disk error). This is an I/O failure, not a 404.
        """
        full_path = self.locate(target)
        if full_path is None:
            return None

        # Note: For large files, consider streaming instead
        content = full_path.read_bytes()

        return ResolvedFile(
            path=full_path,
            content_type=get_content_type(full_path),
            content=content,
        )

    def locate(self, target: str) -> Optional[Path]:
        """
        Map a request target to a regular file inside the root, without
        reading it.
        """
        target = self.lookup_path(target)

        # ─────────────────────────────────────────────────────────────────
        # EXTRACT FILE PATH FROM TARGET
        # ─────────────────────────────────────────────────────────────────
        # No decoding: "/a%20b.html" names a file called "a%20b.html"
        file_path = target.lstrip("/")

        if "\x00" in file_path:
            logger.warning(f"Rejected target with NUL byte: {target!r}")
            return None

        # ─────────────────────────────────────────────────────────────────
        # RESOLVE FULL FILESYSTEM PATH
        # ─────────────────────────────────────────────────────────────────
        # resolve() follows symlinks and normalizes .. components
        try:
            full_path = (self.root_dir / file_path).resolve()
        except (OSError, RuntimeError) as e:
            # Symlink loops end up here
            logger.warning(f"Cannot resolve {target!r}: {e}")
            return None

        # ─────────────────────────────────────────────────────────────────
        # SECURITY: PATH TRAVERSAL CHECK
        # ─────────────────────────────────────────────────────────────────
        try:
            full_path.relative_to(self.root_dir)
        except ValueError:
            logger.warning(f"Path traversal attempt: {target!r}")
            return None

        # ─────────────────────────────────────────────────────────────────
        # CHECK FILE EXISTS (and isn't a directory)
        # ─────────────────────────────────────────────────────────────────
        # is_file() still raises for ENAMETOOLONG, EACCES on a parent, ...
        try:
            if not full_path.is_file():
                return None
        except OSError as e:
            logger.debug(f"Cannot stat {target!r}: {e}")
            return None

        return full_path

    def lookup_path(self, target: str) -> str:
        """
        The target after default-document substitution.

            >>> StaticFileResolver(".").lookup_path("/")
            '/index.html'
        """
        if target == "/":
            return "/" + self.index_file
        return target
