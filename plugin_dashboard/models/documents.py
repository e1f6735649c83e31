"""
On-disk document models.

These mirror the JSON files Claude Code maintains under ~/.claude (camelCase
keys on disk). Unknown keys are ignored on read; the dashboard never writes
these documents back except settings.json, which is handled as a raw dict so
unrelated keys survive untouched.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# --- installed_plugins.json ---


class InstalledPluginEntry(_Document):
    """One installation of a plugin."""

    scope: str = "user"  # "user" | "project"
    install_path: Optional[str] = Field(default=None, alias="installPath")
    version: Optional[str] = None
    installed_at: Optional[str] = Field(default=None, alias="installedAt")
    last_updated: Optional[str] = Field(default=None, alias="lastUpdated")
    git_commit_sha: Optional[str] = Field(default=None, alias="gitCommitSha")
    is_local: Optional[bool] = Field(default=None, alias="isLocal")


class InstalledPluginsFile(_Document):
    """installed_plugins.json: plugin id -> installation entries."""

    version: int = 1
    plugins: dict[str, list[InstalledPluginEntry]] = Field(default_factory=dict)


# --- install-counts-cache.json ---


class InstallCount(_Document):
    plugin: str
    unique_installs: int = 0


class InstallCountsFile(_Document):
    """install-counts-cache.json."""

    version: int = 1
    fetched_at: Optional[str] = Field(default=None, alias="fetchedAt")
    counts: list[InstallCount] = Field(default_factory=list)


# --- marketplace.json (per-marketplace catalog) ---


class CatalogAuthor(_Document):
    name: str
    email: Optional[str] = None


def _coerce_author(value: Any) -> Any:
    # Some catalogs give the author as a bare string
    if isinstance(value, str):
        return {"name": value}
    return value


class CatalogPluginEntry(_Document):
    """A plugin listed in a marketplace catalog."""

    name: str
    description: Optional[str] = ""
    version: Optional[str] = None
    author: Optional[CatalogAuthor] = None
    category: Optional[str] = None
    homepage: Optional[str] = None
    tags: Optional[list[str]] = None
    keywords: Optional[list[str]] = None

    @field_validator("author", mode="before")
    @classmethod
    def _author(cls, value: Any) -> Any:
        return _coerce_author(value)


class MarketplaceCatalog(_Document):
    """marketplace.json."""

    name: Optional[str] = None
    description: Optional[str] = None
    owner: Optional[CatalogAuthor] = None
    plugins: list[CatalogPluginEntry] = Field(default_factory=list)

    @field_validator("owner", mode="before")
    @classmethod
    def _owner(cls, value: Any) -> Any:
        return _coerce_author(value)


# --- known_marketplaces.json ---


class GitSource(_Document):
    """A marketplace cloned from an arbitrary git URL."""

    kind: Literal["git"] = "git"
    url: str


class GithubSource(_Document):
    """A marketplace hosted on GitHub, addressed as owner/repo."""

    kind: Literal["github"] = "github"
    repo: str


class OtherSource(_Document):
    """Any other source type Claude Code records, such as a local directory.

    Listed as-is; the dashboard never resolves it.
    """

    kind: Literal["other"] = "other"
    tag: str
    url: Optional[str] = None
    path: Optional[str] = None
    repo: Optional[str] = None


MarketplaceSource = Annotated[
    Union[GitSource, GithubSource, OtherSource],
    Field(discriminator="kind"),
]

_KNOWN_SOURCE_TAGS = ("git", "github")


class KnownMarketplaceEntry(_Document):
    """One entry of known_marketplaces.json."""

    source: MarketplaceSource
    install_location: str = Field(default="", alias="installLocation")
    last_updated: Optional[str] = Field(default=None, alias="lastUpdated")

    @field_validator("source", mode="before")
    @classmethod
    def _tag_source(cls, value: Any) -> Any:
        # On disk the tag is stored as {"source": "git" | "github" | ..., ...}
        if isinstance(value, dict) and "kind" not in value and "source" in value:
            tag = value["source"]
            if tag in _KNOWN_SOURCE_TAGS:
                value = {**value, "kind": tag}
            else:
                value = {**value, "kind": "other", "tag": tag}
        return value
