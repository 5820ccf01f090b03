from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    # camelCase on the wire, snake_case in Python; frozen once built
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class SubjectType(str, Enum):
    USER = "user"
    ORGANIZATION = "organization"


class RepoKind(str, Enum):
    MODEL = "model"
    DATASET = "dataset"
    SPACE = "space"


class Archetype(str, Enum):
    MODEL_MAESTRO = "Model Maestro"
    DATASET_ARCHITECT = "Dataset Architect"
    SPACE_STORYTELLER = "Space Storyteller"
    RESEARCH_CURATOR = "Research Curator"
    HF_EXPLORER = "HF Explorer"


class WrappedProfile(_WireModel):
    handle: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    subject_type: SubjectType


class RepoStats(_WireModel):
    id: str
    kind: RepoKind
    name: str
    author: str
    task: Optional[str] = None
    tags: list[str] = []
    likes: int = 0
    downloads: int = 0
    created_at: Optional[str] = None   # raw ISO-8601 as returned by the Hub
    updated_at: Optional[str] = None   # "lastModified" upstream
    private: Optional[bool] = None


class PaperStats(_WireModel):
    id: str
    title: str
    summary: Optional[str] = None
    submitter: Optional[str] = None
    published_at: Optional[str] = None
    link: str


class ActivitySnapshot(_WireModel):
    models: list[RepoStats] = []
    datasets: list[RepoStats] = []
    spaces: list[RepoStats] = []
    papers: list[PaperStats] = []
    total_downloads: int = 0
    total_likes: int = 0
    total_repos: int = 0
    top_tags: list[str] = []
    busiest_month: Optional[str] = None


class StoryMetric(_WireModel):
    label: str
    value: str
    accent: Optional[Literal["primary", "secondary"]] = None


SlideKind = Literal[
    "intro", "summary", "models", "datasets", "spaces",
    "papers", "badges", "archetype", "cta", "share",
]


class StorySlide(_WireModel):
    id: str
    kind: SlideKind
    title: str
    subtitle: str
    metrics: list[StoryMetric] = []
    highlights: list[str] = []


class WrappedResult(_WireModel):
    profile: WrappedProfile
    year: int
    activity: ActivitySnapshot
    archetype: Archetype
    badges: list[str]
    slides: list[StorySlide]
    cached: bool = False
    generated_at: datetime
    source: Literal["cache", "live"] = "live"

    def to_document(self) -> str:
        """Serialize to the JSON document stored in the snapshot dataset."""
        return self.model_dump_json(by_alias=True)
