"""Core data models shared across snippetgen components."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

SOURCE_REPOSITORY = "repository"
SOURCE_REGISTRY = "registry"
SOURCE_API_DOCS = "api-docs"

DATA_SOURCE_REPOSITORY = "repository"
DATA_SOURCE_REGISTRY = "registry"
DATA_SOURCE_DOCS = "docs"
DATA_SOURCE_FALLBACK = "fallback"
DATA_SOURCE_UNKNOWN = "unknown"


@dataclass
class FileExcerpt:
    """Bounded slice of a repository file."""

    path: str
    content: str


@dataclass
class RepositoryStructure:
    """Repository file paths grouped by role."""

    source_files: List[str] = field(default_factory=list)
    config_files: List[str] = field(default_factory=list)
    test_files: List[str] = field(default_factory=list)
    example_files: List[str] = field(default_factory=list)
    documentation_files: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not any(
            (
                self.source_files,
                self.config_files,
                self.test_files,
                self.example_files,
                self.documentation_files,
            )
        )


@dataclass
class RepositoryContext:
    """Everything gathered about a hosted source repository."""

    owner: str
    repo: str
    branch: str = "main"
    structure: Optional[RepositoryStructure] = None
    manifest: Optional[Dict[str, Any]] = None
    readme: Optional[str] = None
    examples: List[FileExcerpt] = field(default_factory=list)
    tests: List[FileExcerpt] = field(default_factory=list)
    docs: List[FileExcerpt] = field(default_factory=list)
    description: Optional[str] = None
    language: Optional[str] = None
    stars: Optional[int] = None
    license: Optional[str] = None

    @property
    def html_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}"

    @property
    def manifest_name(self) -> Optional[str]:
        if not isinstance(self.manifest, dict):
            return None
        name = self.manifest.get("name")
        return name if isinstance(name, str) and name.strip() else None


@dataclass
class DownloadStats:
    """Registry download counters."""

    last_30_days: int = 0
    last_week: int = 0


@dataclass
class RegistryContext:
    """Package metadata pulled from the package registry."""

    name: str
    version: str
    description: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    dependencies: Dict[str, str] = field(default_factory=dict)
    dev_dependencies: Dict[str, str] = field(default_factory=dict)
    has_type_definitions: bool = False
    downloads: DownloadStats = field(default_factory=DownloadStats)
    homepage: Optional[str] = None
    repository: Any = None
    license: Optional[str] = None

    def package_info(self) -> Dict[str, Any]:
        """Return the registry fields that are useful inside prompts."""
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "keywords": list(self.keywords),
            "homepage": self.homepage,
            "license": self.license,
            "dependencies": dict(self.dependencies),
            "devDependencies": dict(self.dev_dependencies),
        }


@dataclass(frozen=True)
class AnalysisStep:
    """One finished stage of the synthesis pipeline."""

    name: str
    goal: str
    findings: str
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SynthesisResult:
    """Output of the four-step pipeline."""

    steps: List[AnalysisStep]
    final_markdown: str
    overall_confidence: float
    model_id: str
    generated_at: str
    data_sources: List[str]
    fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "steps": [step.to_dict() for step in self.steps],
            "final_markdown": self.final_markdown,
            "overall_confidence": self.overall_confidence,
            "model_id": self.model_id,
            "generated_at": self.generated_at,
            "data_sources": list(self.data_sources),
            "fallback": self.fallback,
        }


@dataclass
class Popularity:
    registry_downloads: Optional[int] = None
    repository_stars: Optional[int] = None


@dataclass
class GenerationMetadata:
    model: str
    generated_at: str
    data_sources: List[str]
    confidence: float


@dataclass
class PackageSnippet:
    """Outward-facing documentation artifact for one identifier."""

    id: str
    vendor_name: str
    package_identifier: str
    languages: List[str]
    topics: List[str]
    last_updated: str
    version: str
    description: str
    popularity: Popularity
    generation: GenerationMetadata
    markdown: str
    steps: List[AnalysisStep] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "PackageSnippet":
        popularity = payload.get("popularity") or {}
        generation = payload.get("generation") or {}
        steps = [
            AnalysisStep(
                name=str(item.get("name", "")),
                goal=str(item.get("goal", "")),
                findings=str(item.get("findings", "")),
                confidence=float(item.get("confidence", 0.0)),
            )
            for item in payload.get("steps") or []
            if isinstance(item, dict)
        ]
        return cls(
            id=str(payload["id"]),
            vendor_name=str(payload.get("vendor_name", "")),
            package_identifier=str(payload.get("package_identifier", "")),
            languages=[str(item) for item in payload.get("languages") or []],
            topics=[str(item) for item in payload.get("topics") or []],
            last_updated=str(payload.get("last_updated", "")),
            version=str(payload.get("version", "1.0.0")),
            description=str(payload.get("description", "")),
            popularity=Popularity(
                registry_downloads=popularity.get("registry_downloads"),
                repository_stars=popularity.get("repository_stars"),
            ),
            generation=GenerationMetadata(
                model=str(generation.get("model", "")),
                generated_at=str(generation.get("generated_at", "")),
                data_sources=[str(item) for item in generation.get("data_sources") or []],
                confidence=float(generation.get("confidence", 0.0)),
            ),
            markdown=str(payload.get("markdown", "")),
            steps=steps,
        )
