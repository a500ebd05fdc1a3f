"""
Remote key construction.

Keys are plain ``/``-joined paths. Nothing is escaped: callers keep
project names and tags free of separators that would make keys ambiguous.
"""

SEPARATOR = "/"


def join_key(prefix: str, name: str) -> str:
    """
    Join a key prefix and an object name.

    Empty segments are dropped, so ``"a/b/"``, ``"/a//b"`` and ``"a/b"``
    all give the same key.
    """
    segments = [s for s in prefix.split(SEPARATOR) if s]
    segments.append(name)
    return SEPARATOR.join(segments)


def build_key(project_name: str, version_tag: str, artifact_name: str) -> str:
    """
    Build the remote key for an artifact of a release.

    >>> build_key("testupload", "v1.0.0", "bin.tar.gz")
    'testupload/v1.0.0/bin.tar.gz'
    """
    return join_key(SEPARATOR.join((project_name, version_tag)), artifact_name)
