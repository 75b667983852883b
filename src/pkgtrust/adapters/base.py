"""URL parsing shared by the resolvers."""

import re
from urllib.parse import unquote

from pkgtrust.models.schemas import PackageIdentity

# https://github.com/owner/repo
# https://github.com/owner/repo.git
# https://github.com/owner/repo/tree/main/subpath
# git://github.com/owner/repo.git
# git@github.com:owner/repo.git
# git+ssh://git@github.com/owner/repo.git
GITHUB_PATTERNS = [
    r"(?:git\+)?(?:https?|ssh)?(?::)?(?://)?(?:git@)?(?:www\.)?github\.com[/:]([^/\s]+)/([^/\s#?]+)",
    r"git://github\.com/([^/\s]+)/([^/\s#?]+)",
]

# https://www.npmjs.com/package/name
# https://www.npmjs.com/package/@scope/name
NPM_PATTERN = r"(?:https?://)?(?:www\.)?npmjs\.(?:com|org)/package/((?:@[^/\s]+/)?[^/\s#?]+)"


class ResolutionError(Exception):
    """Raised when a URL cannot be mapped to a GitHub repository."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Cannot resolve {url!r}: {reason}")


def parse_github_url(url: str) -> tuple[str, str] | None:
    """Extract ``(owner, repo)`` from a GitHub URL.

    Args:
        url: Repository URL in any of the common git/https forms.

    Returns:
        Tuple of owner and repository name, or None if not a GitHub URL.
    """
    if not url:
        return None

    url = url.strip()
    for pattern in GITHUB_PATTERNS:
        match = re.match(pattern, url)
        if match:
            owner = match.group(1)
            repo = match.group(2).rstrip("/")
            if repo.endswith(".git"):
                repo = repo[: -len(".git")]
            if owner and repo:
                return owner, repo
    return None


def parse_npm_url(url: str) -> str | None:
    """Extract the package name from an npmjs.com package URL."""
    if not url:
        return None
    match = re.match(NPM_PATTERN, url.strip())
    if not match:
        return None
    return unquote(match.group(1))


def github_identity(url: str, source_url: str | None = None) -> PackageIdentity | None:
    """Build a PackageIdentity from a GitHub URL, or None if it does not parse."""
    parsed = parse_github_url(url)
    if parsed is None:
        return None
    owner, repo = parsed
    return PackageIdentity(owner=owner, repo=repo, source_url=source_url or url)
