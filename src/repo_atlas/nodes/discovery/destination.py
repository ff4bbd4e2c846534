"""Clone destination paths derived from repository URIs.

The destination mirrors the remote location below a collection root, e.g.
``git@example.com:path/to/repo.git`` is cloned into
``<collection>/example.com/path/to/repo``.
"""

from __future__ import annotations

import logging
from pathlib import PurePosixPath

from repo_atlas.entities import Vcs
from repo_atlas.errors import DestinationUnresolvableError

logger = logging.getLogger(__name__)

# `git` is the usual remote user and carries no useful information.
_GIT_USER_PREFIX = "git@"
_GIT_SUFFIX = ".git"


def resolve_clone_destination(uri: str, bare: bool, vcs: Vcs = Vcs.GIT) -> PurePosixPath:
    """Return the relative destination directory for cloning ``uri``.

    The result is always relative and free of ``..`` segments, so it can be
    joined below a collection root without escaping it.

    Raises:
        DestinationUnresolvableError: ``uri`` is a local path or has no host.
    """
    if vcs is not Vcs.GIT:
        raise ValueError(f"Unsupported VCS {vcs}")
    dest = _git_dest_relpath(uri, bare)

    if dest.is_absolute() or not dest.parts:
        raise DestinationUnresolvableError(uri, "no host part")
    if ".." in dest.parts:
        raise DestinationUnresolvableError(uri, "parent directory reference in the path")
    return dest


def _git_dest_relpath(uri_orig: str, bare: bool) -> PurePosixPath:
    # Non-bare clones drop exactly one `.git` suffix: repo.git.git -> repo.git
    uri = uri_orig
    if not bare and uri.endswith(_GIT_SUFFIX):
        uri = uri[: -len(_GIT_SUFFIX)]

    first_colon = uri.find(":")
    if first_colon < 0:
        raise DestinationUnresolvableError(uri_orig, "looks like a local repository path")
    # git-clone only recognizes scp-like syntax when no slash precedes the first colon.
    if "/" in uri[:first_colon]:
        raise DestinationUnresolvableError(uri_orig, "looks like a local repository path")

    rest = uri[first_colon + 1 :]
    if not rest.startswith("//"):
        # scp-like syntax: [user@]host:path/to/repo
        logger.debug("%r is considered as an scp-like syntax", uri_orig)
        userhost = uri[:first_colon].removeprefix(_GIT_USER_PREFIX)
        if not userhost:
            raise DestinationUnresolvableError(uri_orig, "no host part")
        # host:/path is still placed below the host directory
        return PurePosixPath(userhost, rest.lstrip("/"))

    # scheme://[user@]host[:port]/path/to/repo
    logger.debug("%r is considered as a normal URI", uri_orig)
    host_and_path = rest[2:].removeprefix(_GIT_USER_PREFIX)
    return PurePosixPath(host_and_path)


def detect_vcs(uri: str) -> Vcs | None:
    """Guess the VCS of ``uri`` without any I/O.

    Returns None when nothing in the URI points at a specific VCS.
    """
    if uri.endswith(_GIT_SUFFIX) or uri.startswith("git://"):
        return Vcs.GIT

    scheme_end = uri.find("://")
    if scheme_end < 0:
        return None

    authority_start = scheme_end + 3
    first_slash = uri.find("/", authority_start)
    if first_slash < 0:
        first_slash = len(uri)
    # authority: [user[:pass]@]hostname[:port]
    authority = uri[authority_start:first_slash]
    host_start = authority.rfind("@") + 1
    host_end = authority.rfind(":")
    if host_end <= host_start:
        host_end = len(authority)
    hostname = authority[host_start:host_end]
    logger.debug("Hostname of %r is %r", uri, hostname)

    if hostname.startswith("git"):
        return Vcs.GIT
    return None
