from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class TemplarConfig(BaseModel):
    """
    Settings from templar.yaml.

    root is resolved against the directory of the config file by the loader;
    the model itself keeps whatever path it was given.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    root: Path = Field(default=Path("."), description="Directory for include/extends paths")
    encoding: str = Field(default="utf-8", description="Encoding of template files")
    detect_cycles: bool = Field(default=True, description="Fail on circular include/extends chains")


DEFAULT_CONFIG = TemplarConfig()

__all__ = ["TemplarConfig", "DEFAULT_CONFIG"]
