"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps a file's name suffix to the Content-Type we announce for it.

The table is deliberately tiny. Anything we don't recognise goes out as
application/octet-stream, which tells the browser "this is opaque binary,
download it rather than guess".

    ┌──────────────────┬──────────────────────────┐
    │ Extension        │ Content-Type             │
    ├──────────────────┼──────────────────────────┤
    │ .htm  .html      │ text/html                │
    │ .gif             │ image/gif                │
    │ .jpg  .jpeg      │ image/jpeg               │
    │ (anything else)  │ application/octet-stream │
    └──────────────────┴──────────────────────────┘

=============================================================================
"""

from pathlib import Path
from typing import Union


MIME_TYPES = {
    ".htm": "text/html",
    ".html": "text/html",
    ".gif": "image/gif",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}

# "I don't know what this is, treat as binary"
DEFAULT_MIME_TYPE = "application/octet-stream"


def get_content_type(path: Union[str, Path]) -> str:
    """
    Get the Content-Type header value for a file.

    A plain, case-sensitive "ends with" test on the name: ".JPG" is not
    ".jpg", and a file called just ".html" is still HTML.

    Examples:
        >>> get_content_type("index.html")
        'text/html'

        >>> get_content_type("/images/LOGO.JPG")
        'application/octet-stream'

        >>> get_content_type("archive.tar.gz")
        'application/octet-stream'
    """
    name = str(path)
    for extension, content_type in MIME_TYPES.items():
        if name.endswith(extension):
            return content_type
    return DEFAULT_MIME_TYPE
