"""License compatibility with LGPL-2.1.

This provider reads license text straight from raw.githubusercontent.com and
therefore needs no GitHub token.
"""

import logging
import re

import httpx

from pkgtrust.analyzers.github import GitHubFetcher
from pkgtrust.models.schemas import Metric, PackageIdentity
from pkgtrust.providers.base import ProviderError, ScoreProvider

logger = logging.getLogger(__name__)

RAW_URL = "https://raw.githubusercontent.com"

# Files checked in order; README last since it usually only names the license
CANDIDATE_FILES = ("LICENSE", "LICENSE.md", "LICENSE.txt", "COPYING", "README.md")

INCOMPATIBLE_PATTERNS = (
    r"\bagpl\b",
    r"\baffero\b",
    r"\bgnu general public license\b",
    r"\bgpl(?:v|-)?[23](?:\.0)?\b",
    r"\blgpl(?:v|-)?3(?:\.0)?\b",
    r"\bgnu lesser general public license,?\s+version 3\b",
    r"\bnon[-\s]?commercial\b",
    r"\bproprietary\b",
    r"\bsspl\b",
    r"\bbusiness source license\b",
)

COMPATIBLE_PATTERNS = (
    r"\bmit\b",
    r"\bmit license\b",
    r"\bbsd(?:-[23]-clause)?\b",
    r"\bisc license\b",
    r"\bapache(?:[-\s]+license)?(?:,?[-\s]+version)?[-\s]*2(?:\.0)?\b",
    r"permission is hereby granted, free of charge",
    r"redistribution and use in source and binary forms",
    r"permission to use, copy, modify,? and/or distribute this software",
    r"\blgpl(?:v|-)?2\.1\b",
    r"\bgnu lesser general public license,?\s+version 2\.1\b",
    r"\bmpl(?:-|\s)?2(?:\.0)?\b",
    r"\bmozilla public license,? (?:version )?2\.0\b",
    r"\bunlicense\b",
    r"\bcc0\b",
    r"\bzlib\b",
    r"\bartistic license 2\.0\b",
)


def license_score(text: str) -> float:
    """1.0 if the text names an LGPL-2.1 compatible license, else 0.0."""
    lower = text.lower()

    # LGPL-2.1 text mentions the GPL, so check it before the incompatible set
    if re.search(r"\blgpl(?:v|-)?2\.1\b|lesser general public license,?\s+version 2\.1", lower):
        return 1.0
    if any(re.search(pattern, lower) for pattern in INCOMPATIBLE_PATTERNS):
        return 0.0
    if any(re.search(pattern, lower) for pattern in COMPATIBLE_PATTERNS):
        return 1.0
    return 0.0


def extract_license_section(readme: str) -> str:
    """Return the README's License section, or the whole README."""
    match = re.search(
        r"(?ims)^[ \t]*#{1,6}[ \t]*licen[cs](?:e|ing)\b[^\n]*\n(.*?)(?=^[ \t]*#{1,6}[ \t]+\S|\Z)",
        readme,
    )
    return match.group(1) if match else readme


class LicenseProvider(ScoreProvider):
    metric = Metric.LICENSE
    requires_token = False

    def __init__(
        self,
        github: GitHubFetcher,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        super().__init__(github)
        self._client = client
        self._timeout = timeout

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create an HTTP client."""
        if self._client is not None:
            return self._client
        return httpx.AsyncClient(timeout=self._timeout)

    async def _fetch_raw(self, identity: PackageIdentity, filename: str) -> str | None:
        """Fetch a file from the default branch, or None if absent."""
        client = await self._get_client()
        url = f"{RAW_URL}/{identity.owner}/{identity.repo}/HEAD/{filename}"
        try:
            response = await client.get(url, follow_redirects=True)
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return response.text
        finally:
            if self._client is None:
                await client.aclose()

    async def _score(self, identity: PackageIdentity) -> float:
        for filename in CANDIDATE_FILES:
            text = await self._fetch_raw(identity, filename)
            if not text:
                continue
            if filename == "README.md":
                text = extract_license_section(text)
            logger.debug(f"License for {identity.slug} read from {filename}")
            return license_score(text)

        raise ProviderError(f"no license or README found for {identity.slug}")
