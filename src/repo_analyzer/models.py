# src/repo_analyzer/models.py
import re
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Dict, List, Optional


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


@dataclass(frozen=True)
class TreeEntry:
    path: str
    name: str
    kind: str  # "file" or "dir"
    size: int = 0

    @property
    def is_dir(self):
        return self.kind == "dir"

    @property
    def is_file(self):
        return self.kind == "file"


@dataclass(frozen=True)
class CollectedFile:
    path: str
    content: str
    size: int
    language: Optional[str]
    is_test: bool
    is_config: bool
    is_documentation: bool
    priority: Priority


@dataclass
class CollectionState:
    """Accumulator owned by a single collection run."""
    files: List[CollectedFile] = field(default_factory=list)
    total_size: int = 0
    discovered: int = 0
    exhausted: bool = False


@dataclass
class CollectionResult:
    files: List[CollectedFile]
    total_code_size: int
    files_analyzed: int
    files_skipped: int


@dataclass
class CommitInfo:
    sha: str
    message: str
    author: str
    date: str
    url: str


@dataclass
class BranchInfo:
    name: str
    protected: bool = False


@dataclass
class PullRequestInfo:
    number: int
    title: str
    state: str
    merged: bool
    created_at: str


@dataclass
class TestFileInfo:
    path: str
    type: str  # unit | integration | e2e | unknown


@dataclass
class RepoMetadata:
    owner: str
    name: str
    description: str = "No description provided."
    stars: int = 0
    forks: int = 0
    language: str = "Unknown"
    open_issues: int = 0
    topics: List[str] = field(default_factory=list)
    readme_content: Optional[str] = None
    file_structure: List[str] = field(default_factory=list)
    last_update: str = ""
    commits: List[CommitInfo] = field(default_factory=list)
    branches: List[BranchInfo] = field(default_factory=list)
    pull_requests: List[PullRequestInfo] = field(default_factory=list)
    test_files: List[TestFileInfo] = field(default_factory=list)
    has_cicd: bool = False
    cicd_configs: List[str] = field(default_factory=list)
    languages: Dict[str, int] = field(default_factory=dict)
    total_files: int = 0
    has_license: bool = False
    has_contributing: bool = False
    has_code_of_conduct: bool = False
    default_branch: str = "main"
    code_files: List[CollectedFile] = field(default_factory=list)
    files_analyzed: int = 0
    files_skipped: int = 0
    total_code_size: int = 0

    @property
    def full_name(self):
        return f"{self.owner}/{self.name}"


ROADMAP_PRIORITIES = ["High", "Medium", "Low"]
ROADMAP_CATEGORIES = [
    "Architecture", "Code Quality", "Documentation", "Testing",
    "DevOps", "Features", "Functionality", "Optimization",
]
LEVELS = ["Beginner", "Intermediate", "Advanced", "Expert"]
WORKING_STATUSES = ["Fully Functional", "Partially Working", "Not Working", "Unknown"]

# (attribute prefix, display label) for every scored dimension
DIMENSIONS = [
    ("code_quality", "Code Quality"),
    ("structure", "Structure"),
    ("documentation", "Documentation"),
    ("testing", "Testing"),
    ("git_practices", "Git Practices"),
    ("real_world_relevance", "Real-World Relevance"),
    ("architecture", "Architecture"),
    ("optimization", "Optimization"),
    ("functionality", "Functionality"),
    ("connectivity", "Connectivity"),
    ("completeness", "Completeness"),
]


def camel_to_snake(name):
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


def snake_to_camel(name):
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


@dataclass
class RoadmapStep:
    title: str
    description: str
    priority: str
    category: str

    @classmethod
    def from_dict(cls, data):
        return cls(
            title=data.get("title", ""),
            description=data.get("description", ""),
            priority=data.get("priority", "Medium"),
            category=data.get("category", "Features"),
        )


@dataclass
class AnalysisResult:
    score: int = 0
    level: str = "Beginner"
    summary: str = ""
    tech_stack_analysis: str = ""
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)
    code_quality_score: int = 0
    code_quality_explanation: str = ""
    code_quality_points: List[str] = field(default_factory=list)
    structure_score: int = 0
    structure_explanation: str = ""
    structure_points: List[str] = field(default_factory=list)
    documentation_score: int = 0
    documentation_explanation: str = ""
    documentation_points: List[str] = field(default_factory=list)
    testing_score: int = 0
    testing_explanation: str = ""
    testing_points: List[str] = field(default_factory=list)
    git_practices_score: int = 0
    git_practices_explanation: str = ""
    git_practices_points: List[str] = field(default_factory=list)
    real_world_relevance_score: int = 0
    real_world_relevance_explanation: str = ""
    real_world_relevance_points: List[str] = field(default_factory=list)
    architecture_score: int = 0
    architecture_explanation: str = ""
    architecture_points: List[str] = field(default_factory=list)
    optimization_score: int = 0
    optimization_explanation: str = ""
    optimization_points: List[str] = field(default_factory=list)
    functionality_score: int = 0
    functionality_explanation: str = ""
    functionality_points: List[str] = field(default_factory=list)
    connectivity_score: int = 0
    connectivity_explanation: str = ""
    connectivity_points: List[str] = field(default_factory=list)
    completeness_score: int = 0
    completeness_explanation: str = ""
    completeness_points: List[str] = field(default_factory=list)
    issues_found: List[str] = field(default_factory=list)
    main_issues: List[str] = field(default_factory=list)
    next_steps: List[str] = field(default_factory=list)
    ai_usage_detected: bool = False
    ai_usage_details: str = "No AI usage detected"
    architecture_analysis: str = "Architecture analysis not available"
    optimization_analysis: str = "Optimization analysis not available"
    functionality_analysis: str = "Functionality analysis not available"
    connectivity_analysis: str = "Connectivity analysis not available"
    completeness_analysis: str = "Completeness analysis not available"
    working_status: str = "Unknown"
    working_status_details: str = "Working status could not be determined"
    roadmap: List[RoadmapStep] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data):
        """Build a result from the LLM's camelCase JSON.

        Keys that are missing or null keep the dataclass default, unknown keys
        are ignored.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = camel_to_snake(key)
            if name not in known or value is None:
                continue
            if name == "roadmap":
                value = [RoadmapStep.from_dict(step) for step in value if isinstance(step, dict)]
            kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self):
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "roadmap":
                value = [vars(step).copy() for step in value]
            data[snake_to_camel(f.name)] = value
        return data

    def dimension(self, prefix):
        """Return (score, explanation, points) for a dimension prefix."""
        return (
            getattr(self, f"{prefix}_score"),
            getattr(self, f"{prefix}_explanation"),
            getattr(self, f"{prefix}_points"),
        )
