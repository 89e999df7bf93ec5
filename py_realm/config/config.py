from pathlib import Path
from typing import List, Optional

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings

import os

# Load .env for local/dev environments only for values missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    # World Data Configuration
    data_dir: str = Field(default="./SaveData", description="Runtime world-data root")
    editor_data_dir: Optional[str] = Field(
        default=None, description="Editor world-data root, searched alongside data_dir"
    )
    prefer_editor_data: bool = Field(
        default=True, description="Search the editor root before the runtime root"
    )
    record_subdirs: List[str] = Field(
        default=["MapData", "Regions", "Unpopulated"],
        description="Subdirectories holding region, settlement and unpopulated records",
    )
    characters_subdir: str = Field(default="Characters", description="Character sheet subdirectory")
    culture_catalog_subdir: str = Field(default="cultures", description="Culture catalog subdirectory")

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (e.g., plain, json)")

    @property
    def search_roots(self) -> List[str]:
        """World-data roots in search order."""
        roots = [self.data_dir]
        if self.editor_data_dir:
            if self.prefer_editor_data:
                roots.insert(0, self.editor_data_dir)
            else:
                roots.append(self.editor_data_dir)
        return roots

    @property
    def culture_catalog_dirs(self) -> List[str]:
        """Culture catalog directories in search order."""
        return [str(Path(root) / self.culture_catalog_subdir) for root in self.search_roots]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Instantiate singleton settings object
settings = Settings()
