"""Dependency pinning: fraction of dependencies pinned to a major.minor version."""

import re

from pkgtrust.models.schemas import Metric, PackageIdentity
from pkgtrust.providers.base import ProviderError, ScoreProvider

# Accepted: 1.2.3, =1.2.3, v1.2.3, ~1.2.3, ~1.2, 1.2, 1.2.x, 1.2.*
# Rejected: ^1.2.3, >=1.2.0, 1.x, *, latest, ranges and URLs
PINNED_SPEC = re.compile(r"^(?:=|v|~)?\s*(0|[1-9]\d*)\.(0|[1-9]\d*)(?:\.(?:\d+|x|X|\*)(?:[-+][\w.-]+)?)?$")


def is_pinned(spec: str) -> bool:
    """True if a version specifier fixes at least the major and minor version."""
    if not isinstance(spec, str):
        return False
    spec = spec.strip()
    # ^0.x.y only allows patch updates, so it is pinned to major.minor
    if spec.startswith("^0.") and PINNED_SPEC.match(spec[1:]):
        return spec[1:].split(".")[1] not in ("x", "X", "*")
    return bool(PINNED_SPEC.match(spec))


def pinned_fraction(manifest: dict) -> float:
    """Fraction of declared dependencies that are pinned.

    A manifest with no dependencies is fully pinned.
    """
    specs: list[str] = []
    for section in ("dependencies", "devDependencies"):
        deps = manifest.get(section) or {}
        if not isinstance(deps, dict):
            raise ProviderError(f"package.json {section} is not an object")
        specs.extend(deps.values())

    if not specs:
        return 1.0
    return sum(1 for spec in specs if is_pinned(spec)) / len(specs)


class DependencyPinningProvider(ScoreProvider):
    metric = Metric.DEPENDENCY_PINNING

    async def _score(self, identity: PackageIdentity) -> float:
        await self._require_repository(identity)
        manifest = await self.github.fetch_json_file(identity.owner, identity.repo, "package.json")
        if manifest is None:
            # Nothing declared, nothing unpinned
            return 1.0
        if not isinstance(manifest, dict):
            raise ProviderError("package.json is not an object")
        return pinned_fraction(manifest)
