import os
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


def _split_workspaces(raw: str) -> List[str]:
    return [w.strip() for w in raw.split(",") if w.strip()]


def _load_api_keys(workspaces: List[str]) -> Dict[str, str]:
    """Collect ``NOTION_API_KEY_<WORKSPACE>`` values for every configured workspace."""
    keys: Dict[str, str] = {}
    for workspace in workspaces:
        key = os.getenv(f"NOTION_API_KEY_{workspace.upper()}")
        if key:
            keys[workspace.upper()] = key
    return keys


def _env(name: str, default: Optional[str] = None):
    """Read *name* at construction time; the raw string is validated by the field."""
    return lambda: os.getenv(name) or default


class Settings(BaseModel):
    # Env-derived defaults go through the same validation as explicit values.
    model_config = ConfigDict(validate_default=True)

    # API
    API_TITLE: str = Field(default="Notion Text API")
    API_VERSION: str = Field(default="1.0.0")

    # Workspaces and credentials
    NOTION_WORKSPACES: List[str] = Field(
        default_factory=lambda: _split_workspaces(os.getenv("NOTION_WORKSPACES", ""))
    )
    NOTION_DEFAULT_WORKSPACE: Optional[str] = Field(default_factory=_env("NOTION_DEFAULT_WORKSPACE"))
    NOTION_API_KEYS: Dict[str, str] = Field(default_factory=dict)
    NOTION_API_PASSWORD: Optional[str] = Field(default_factory=_env("NOTION_API_PASSWORD"))

    # Remote API
    NOTION_API_BASE: str = Field(default_factory=_env("NOTION_API_BASE", "https://api.notion.com/v1"))
    NOTION_VERSION: str = Field(default_factory=_env("NOTION_VERSION", "2022-06-28"))
    REQUEST_TIMEOUT: float = Field(default_factory=_env("REQUEST_TIMEOUT", "30"), gt=0)
    MAX_RETRIES: int = Field(default_factory=_env("MAX_RETRIES", "3"), ge=1)
    RETRY_BASE_DELAY: float = Field(default_factory=_env("RETRY_BASE_DELAY", "1.0"), ge=0)

    # Traversal
    # Notion allows roughly 3 requests per second per integration.
    MAX_CONCURRENT_REQUESTS: int = Field(default_factory=_env("MAX_CONCURRENT_REQUESTS", "3"), ge=1)
    PAGE_SIZE: int = Field(default_factory=_env("PAGE_SIZE", "100"), ge=1, le=100)
    OPERATION_TIMEOUT: Optional[float] = Field(default_factory=_env("OPERATION_TIMEOUT"), gt=0)

    def model_post_init(self, __context) -> None:
        if not self.NOTION_API_KEYS:
            self.NOTION_API_KEYS = _load_api_keys(self.NOTION_WORKSPACES)

    @property
    def default_workspace(self) -> Optional[str]:
        if self.NOTION_DEFAULT_WORKSPACE:
            return self.NOTION_DEFAULT_WORKSPACE
        return self.NOTION_WORKSPACES[0] if self.NOTION_WORKSPACES else None

    def api_key_for(self, workspace: Optional[str] = None) -> Optional[str]:
        """Return the API key for *workspace*, or for the default workspace when omitted."""
        name = workspace or self.default_workspace
        if not name:
            return None
        return self.NOTION_API_KEYS.get(name.upper())


settings = Settings()
