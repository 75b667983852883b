"""URL resolution adapters."""

from pkgtrust.adapters.base import ResolutionError, parse_github_url, parse_npm_url
from pkgtrust.adapters.npm import NpmAdapter
from pkgtrust.adapters.resolver import UrlResolver

__all__ = ["NpmAdapter", "ResolutionError", "UrlResolver", "parse_github_url", "parse_npm_url"]
