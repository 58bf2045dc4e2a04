"""Repository context provider backed by the GitHub REST API."""

from __future__ import annotations

import base64
import binascii
import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import quote

from .. import http
from ..errors import SourceNotFoundError
from ..logging import get_logger
from ..models import FileExcerpt, RepositoryContext, RepositoryStructure

_REPO_URL_PATTERN = re.compile(r"github\.com[/:]([^/\s?#]+)/([^/\s?#]+)")
_README_CANDIDATES = ("README.md", "readme.md", "README.txt", "readme.txt")

_EXAMPLE_FILE_LIMIT = 5
_EXAMPLE_CHAR_LIMIT = 2000
_TEST_FILE_LIMIT = 3
_TEST_CHAR_LIMIT = 1500
_DOC_FILE_LIMIT = 3
_DOC_CHAR_LIMIT = 1500

# First matching rule wins; paths are compared lower-cased.
_CATEGORY_RULES: Tuple[Tuple[Callable[[str], bool], str], ...] = (
    (lambda path: "src/" in path or "lib/" in path, "source_files"),
    (lambda path: "test" in path or "spec" in path, "test_files"),
    (lambda path: "example" in path or "demo" in path, "example_files"),
    (lambda path: "doc" in path or path.endswith(".md"), "documentation_files"),
    (
        lambda path: "config" in path or path.endswith(".json") or path.endswith(".js"),
        "config_files",
    ),
)

FetchJSON = Callable[[str], Any]


@dataclass(frozen=True)
class RepoRef:
    """Owner/repository pair parsed from a repository URL."""

    owner: str
    repo: str


def parse_repo_url(url: str) -> Optional[RepoRef]:
    """Return the owner and repository segments of a GitHub URL, if present."""
    match = _REPO_URL_PATTERN.search(url or "")
    if not match:
        return None
    owner, repo = match.group(1), match.group(2)
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not owner or not repo:
        return None
    return RepoRef(owner=owner, repo=repo)


def categorize_files(paths: Iterable[str]) -> RepositoryStructure:
    """Sort blob paths into source/test/example/doc/config buckets."""
    buckets: Dict[str, List[str]] = {
        "source_files": [],
        "config_files": [],
        "test_files": [],
        "example_files": [],
        "documentation_files": [],
    }
    for path in paths:
        lowered = path.lower()
        for predicate, bucket in _CATEGORY_RULES:
            if predicate(lowered):
                buckets[bucket].append(path)
                break
    return RepositoryStructure(**buckets)


class GitHubClient:
    """Collects a bounded :class:`RepositoryContext` for one repository."""

    def __init__(
        self,
        *,
        api_url: str = "https://api.github.com",
        token: str | None = None,
        request_timeout: float = 20.0,
        fetch_json: FetchJSON | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.request_timeout = request_timeout
        self._fetch_json = fetch_json or self._http_fetch_json
        self.logger = get_logger("sources.github")
        if not token:
            self.logger.debug("GitHub token not provided; API rate limits will be lower")

    def fetch_repository(self, url: str) -> RepositoryContext:
        """Fetch metadata, tree, manifest, README and excerpts for ``url``."""
        ref = parse_repo_url(url)
        if ref is None:
            raise SourceNotFoundError(f"Not a GitHub repository URL: {url}", identifier=url)

        base = f"{self.api_url}/repos/{quote(ref.owner)}/{quote(ref.repo)}"
        info = self._get_required(base, identifier=url)
        if not isinstance(info, dict):
            raise SourceNotFoundError(f"Repository not found: {url}", identifier=url)
        branch = str(info.get("default_branch") or "main")

        tree = self._get_required(f"{base}/git/trees/{quote(branch)}?recursive=1", identifier=url)
        entries = tree.get("tree", []) if isinstance(tree, dict) else []
        blobs = [
            str(entry["path"])
            for entry in entries
            if isinstance(entry, dict) and entry.get("type") == "blob" and entry.get("path")
        ]
        self.logger.debug("Fetched %d blobs from %s/%s@%s", len(blobs), ref.owner, ref.repo, branch)

        license_info = info.get("license")
        return RepositoryContext(
            owner=ref.owner,
            repo=ref.repo,
            branch=branch,
            structure=categorize_files(blobs),
            manifest=self._read_manifest(base, branch),
            readme=self._read_readme(base, branch),
            examples=self._read_excerpts(
                base,
                branch,
                [path for path in blobs if _is_example_path(path)],
                _EXAMPLE_FILE_LIMIT,
                _EXAMPLE_CHAR_LIMIT,
            ),
            tests=self._read_excerpts(
                base,
                branch,
                [path for path in blobs if _is_test_path(path)],
                _TEST_FILE_LIMIT,
                _TEST_CHAR_LIMIT,
            ),
            docs=self._read_excerpts(
                base,
                branch,
                [path for path in blobs if _is_doc_path(path)],
                _DOC_FILE_LIMIT,
                _DOC_CHAR_LIMIT,
            ),
            description=_as_optional_str(info.get("description")),
            language=_as_optional_str(info.get("language")),
            stars=info.get("stargazers_count") if isinstance(info.get("stargazers_count"), int) else None,
            license=_as_optional_str(license_info.get("name")) if isinstance(license_info, dict) else None,
        )

    # ------------------------------------------------------------------
    # Internal helpers

    def _get_required(self, url: str, *, identifier: str) -> Any:
        try:
            return self._fetch_json(url)
        except http.HTTPRequestError as exc:
            if exc.status_code == 404:
                raise SourceNotFoundError(
                    f"Repository not found: {identifier}", identifier=identifier
                ) from exc
            raise

    def _read_manifest(self, base: str, branch: str) -> Optional[Dict[str, Any]]:
        text = self._read_file(base, branch, "package.json")
        if text is None:
            return None
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            self.logger.debug("package.json is not valid JSON; ignoring manifest")
            return None
        return data if isinstance(data, dict) else None

    def _read_readme(self, base: str, branch: str) -> Optional[str]:
        for candidate in _README_CANDIDATES:
            text = self._read_file(base, branch, candidate)
            if text is not None:
                return text
        return None

    def _read_excerpts(
        self,
        base: str,
        branch: str,
        paths: Sequence[str],
        file_limit: int,
        char_limit: int,
    ) -> List[FileExcerpt]:
        excerpts: List[FileExcerpt] = []
        for path in paths[:file_limit]:
            text = self._read_file(base, branch, path)
            if text is None:
                continue
            excerpts.append(FileExcerpt(path=path, content=text[:char_limit]))
        return excerpts

    def _read_file(self, base: str, branch: str, path: str) -> Optional[str]:
        url = f"{base}/contents/{quote(path)}?ref={quote(branch)}"
        try:
            payload = self._fetch_json(url)
        except http.HTTPRequestError as exc:
            self.logger.debug("Skipping %s: %s", path, exc)
            return None
        if not isinstance(payload, dict) or not isinstance(payload.get("content"), str):
            return None
        try:
            return base64.b64decode(payload["content"]).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError):
            self.logger.debug("Skipping %s: content is not valid base64", path)
            return None

    def _http_fetch_json(self, url: str) -> Any:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return http.request_json(url, headers=headers, timeout=self.request_timeout)


def _is_example_path(path: str) -> bool:
    lowered = path.lower()
    return "example" in lowered or "demo" in lowered


def _is_test_path(path: str) -> bool:
    lowered = path.lower()
    return "test" in lowered or "spec" in lowered


def _is_doc_path(path: str) -> bool:
    return "doc" in path.lower() and path.endswith(".md")


def _as_optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


__all__ = ["GitHubClient", "RepoRef", "categorize_files", "parse_repo_url"]
