"""Server configuration and helpers for locating uploaded assets."""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass
from typing import Mapping, Optional

_ENV_VARS = (
    ("db_path", "DB_PATH"),
    ("jwt_secret", "JWT_SECRET"),
    ("platform", "PLATFORM"),
    ("filepath_root", "FILEPATH_ROOT"),
    ("assets_root", "ASSETS_ROOT"),
    ("s3_bucket", "S3_BUCKET"),
    ("s3_region", "S3_REGION"),
    ("s3_cf_distribution", "S3_CF_DISTRO"),
    ("port", "PORT"),
)


class ConfigError(Exception):
    """Raised when a required setting is missing."""


@dataclass(frozen=True)
class Config:
    """Settings the server runs with."""

    db_path: str
    jwt_secret: str
    platform: str
    filepath_root: str
    assets_root: str
    s3_bucket: str
    s3_region: str
    s3_cf_distribution: str
    port: str

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """Read every setting from the environment; an empty value counts as missing."""
        if environ is None:
            environ = os.environ
        values = {}
        for attr, var in _ENV_VARS:
            value = environ.get(var, "")
            if not value:
                if var == "DB_PATH":
                    raise ConfigError("DB_PATH must be set")
                raise ConfigError(f"{var} environment variable is not set")
            values[attr] = value
        return cls(**values)

    def ensure_assets_dir(self) -> None:
        """Create the assets directory if it does not exist yet."""
        if not os.path.exists(self.assets_root):
            os.mkdir(self.assets_root, 0o755)

    def asset_disk_path(self, asset_path: str) -> str:
        return os.path.join(self.assets_root, asset_path)

    def asset_url(self, asset_path: str) -> str:
        return f"http://localhost:{self.port}/assets/{asset_path}"


def get_asset_path(video_id: uuid.UUID, media_type: str) -> str:
    """File name under which a video's asset of the given media type is stored."""
    return f"{video_id}{media_type_to_ext(media_type)}"


def media_type_to_ext(media_type: str) -> str:
    """File extension for a ``type/subtype`` media type, ``.bin`` otherwise."""
    parts = media_type.split("/")
    if len(parts) != 2:
        return ".bin"
    return "." + parts[1]