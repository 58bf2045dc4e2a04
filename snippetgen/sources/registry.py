"""Registry context provider backed by the npm registry."""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

from .. import http
from ..errors import SourceNotFoundError
from ..logging import get_logger
from ..models import DownloadStats, RegistryContext

_REGISTRY_URL_PATTERN = re.compile(r"npmjs\.com/package/((?:@[^/?#]+/)?[^/?#]+)")
_VALID_NAME_PATTERN = re.compile(r"^(?:@[a-z0-9-*~][a-z0-9-*._~]*/)?[a-z0-9-~][a-z0-9-._~]*$")
_GITHUB_REPO_PATTERN = re.compile(r"github\.com[/:]([^/]+/[^/#?]+)")
_MAX_NAME_LENGTH = 214

FetchJSON = Callable[[str], Any]


def parse_package_identifier(identifier: str) -> str:
    """Return the package name from a bare name or a registry URL."""
    cleaned = (identifier or "").strip()
    if "npmjs.com" in cleaned:
        match = _REGISTRY_URL_PATTERN.search(cleaned)
        return match.group(1) if match else cleaned
    return cleaned


def is_valid_package_name(name: str) -> bool:
    return bool(_VALID_NAME_PATTERN.match(name)) and len(name) <= _MAX_NAME_LENGTH


def extract_repository_url(repository: Any) -> Optional[str]:
    """Return a canonical GitHub URL from a registry ``repository`` field."""
    if isinstance(repository, dict):
        repository = repository.get("url")
    if not isinstance(repository, str):
        return None
    match = _GITHUB_REPO_PATTERN.search(repository)
    if not match:
        return None
    slug = match.group(1)
    if slug.endswith(".git"):
        slug = slug[: -len(".git")]
    return f"https://github.com/{slug}"


class NpmRegistryClient:
    """Collects a :class:`RegistryContext` for one package name."""

    def __init__(
        self,
        *,
        registry_url: str = "https://registry.npmjs.org",
        downloads_url: str = "https://api.npmjs.org/downloads",
        request_timeout: float = 20.0,
        fetch_json: FetchJSON | None = None,
    ) -> None:
        self.registry_url = registry_url.rstrip("/")
        self.downloads_url = downloads_url.rstrip("/")
        self.request_timeout = request_timeout
        self._fetch_json = fetch_json or self._http_fetch_json
        self.logger = get_logger("sources.registry")

    def fetch_package(self, name: str) -> RegistryContext:
        """Fetch the latest version metadata, download counts and typing hints."""
        encoded = quote(name, safe="@")
        try:
            data = self._fetch_json(f"{self.registry_url}/{encoded}")
        except http.HTTPRequestError as exc:
            if exc.status_code == 404:
                raise SourceNotFoundError(f"Package not found: {name}", identifier=name) from exc
            raise
        if not isinstance(data, dict) or not data.get("name"):
            raise SourceNotFoundError(f"Package not found: {name}", identifier=name)

        versions = data.get("versions") if isinstance(data.get("versions"), dict) else {}
        dist_tags = data.get("dist-tags") if isinstance(data.get("dist-tags"), dict) else {}
        latest = dist_tags.get("latest") or next(iter(versions), "") or "0.0.0"
        version_info = versions.get(latest) if isinstance(versions.get(latest), dict) else {}

        def pick(key: str) -> Any:
            value = version_info.get(key)
            return value if value is not None else data.get(key)

        dependencies = _as_str_dict(version_info.get("dependencies"))
        dev_dependencies = _as_str_dict(version_info.get("devDependencies"))
        repository = pick("repository")

        return RegistryContext(
            name=str(data["name"]),
            version=str(latest),
            description=_as_optional_str(pick("description")),
            keywords=_as_str_list(pick("keywords")),
            dependencies=dependencies,
            dev_dependencies=dev_dependencies,
            has_type_definitions=self._has_type_definitions(
                str(data["name"]), version_info, dependencies, dev_dependencies, repository
            ),
            downloads=self._download_stats(name),
            homepage=_as_optional_str(pick("homepage")),
            repository=repository,
            license=_as_optional_str(pick("license")),
        )

    def _download_stats(self, name: str) -> DownloadStats:
        return DownloadStats(
            last_30_days=self._download_point("last-month", name),
            last_week=self._download_point("last-week", name),
        )

    def _download_point(self, period: str, name: str) -> int:
        try:
            payload = self._fetch_json(f"{self.downloads_url}/point/{period}/{name}")
        except http.HTTPRequestError as exc:
            self.logger.debug("Download stats unavailable for %s (%s): %s", name, period, exc)
            return 0
        if isinstance(payload, dict) and isinstance(payload.get("downloads"), int):
            return payload["downloads"]
        return 0

    def _has_type_definitions(
        self,
        name: str,
        version_info: Dict[str, Any],
        dependencies: Dict[str, str],
        dev_dependencies: Dict[str, str],
        repository: Any,
    ) -> bool:
        if version_info.get("types") or version_info.get("typings"):
            return True
        types_package = f"@types/{name}"
        if types_package in dependencies or types_package in dev_dependencies:
            try:
                self._fetch_json(f"{self.registry_url}/{quote(types_package, safe='@')}")
            except http.HTTPRequestError as exc:
                self.logger.debug("%s not published: %s", types_package, exc)
                return False
            return True
        repository_url = repository.get("url") if isinstance(repository, dict) else repository
        if isinstance(repository_url, str) and "typescript" in repository_url.lower():
            return True
        return "types" in name

    def _http_fetch_json(self, url: str) -> Any:
        return http.request_json(url, timeout=self.request_timeout)


def _as_optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _as_str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _as_str_dict(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(key): str(spec) for key, spec in value.items()}


__all__ = [
    "NpmRegistryClient",
    "extract_repository_url",
    "is_valid_package_name",
    "parse_package_identifier",
]
