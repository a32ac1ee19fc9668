"""Webhook payload schemas.

One model per GitLab event kind. Only the fields needed for rendering are
declared; anything else in the payload is ignored. A declared field with the
wrong type, or a required field that is missing, fails validation.
"""

from __future__ import annotations

from typing import NamedTuple, Optional

from pydantic import BaseModel, Field

from gitlab_irc.utils import namespace_from_git_url


class ProjectIdentity(NamedTuple):
    """(namespace, name) of the project an event belongs to."""

    namespace: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.namespace}/{self.name}"


class _Record(BaseModel):
    class Config:
        extra = "ignore"
        frozen = True


class Project(_Record):
    name: str
    namespace: str = ""
    web_url: str = ""


class User(_Record):
    name: str = ""


class Author(_Record):
    name: str = ""


class Commit(_Record):
    id: str
    message: str = ""
    added: list[str] = Field(default_factory=list)
    modified: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    author: Author = Field(default_factory=Author)


class PushEvent(_Record):
    """Push Hook / Push Event"""

    user_name: str = ""
    before: str
    after: str
    ref: str
    total_commits_count: int = 0
    project: Project
    commits: list[Commit] = Field(default_factory=list)

    @property
    def identity(self) -> ProjectIdentity:
        return ProjectIdentity(self.project.namespace, self.project.name)


class IssueAttributes(_Record):
    iid: int
    action: Optional[str] = None
    title: str = ""
    url: str = ""


class IssueEvent(_Record):
    """Issue Hook / Issue Event"""

    user: User = Field(default_factory=User)
    project: Project
    object_attributes: IssueAttributes

    @property
    def identity(self) -> ProjectIdentity:
        return ProjectIdentity(self.project.namespace, self.project.name)


class MergeAttributes(_Record):
    iid: int
    action: Optional[str] = None
    title: str = ""
    url: str = ""


class MergeEvent(_Record):
    """Merge Request Hook / Merge Request Event"""

    user: User = Field(default_factory=User)
    project: Project
    object_attributes: MergeAttributes

    @property
    def identity(self) -> ProjectIdentity:
        return ProjectIdentity(self.project.namespace, self.project.name)


class PipelineAttributes(_Record):
    id: int
    sha: str
    status: str
    duration: Optional[float] = None


class PipelineEvent(_Record):
    """Pipeline Hook"""

    project: Project
    object_attributes: PipelineAttributes

    @property
    def identity(self) -> ProjectIdentity:
        return ProjectIdentity(self.project.namespace, self.project.name)


class Repository(_Record):
    name: str
    homepage: str = ""
    url: str = ""


class JobEvent(_Record):
    """
    Job Hook

    Job payloads carry no namespace field; it is parsed from the git URL of
    the repository instead.
    """

    build_id: int
    build_name: str = ""
    build_status: str
    build_duration: Optional[float] = None
    sha: str
    repository: Repository

    @property
    def identity(self) -> ProjectIdentity:
        return ProjectIdentity(
            namespace_from_git_url(self.repository.url), self.repository.name
        )
