"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Batch loader settings and explicit config loading.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_BATCH_SIZE = 1000


class LoaderSettings(BaseModel):
    """
    Explicit settings used by batch loaders.

    Attributes:
        batch_size: Maximum number of keys passed to one batch function call.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1)

    @staticmethod
    def from_env() -> "LoaderSettings":
        """Load settings from `BATCHLOADER_*` environment variables."""
        raw = os.getenv("BATCHLOADER_BATCH_SIZE", "").strip()
        if not raw:
            return LoaderSettings()
        return LoaderSettings(batch_size=int(raw))

    def with_overrides(self, *, batch_size: int | None = None) -> "LoaderSettings":
        """Return a validated copy with any non-``None`` override applied."""
        if batch_size is None:
            return self
        return LoaderSettings.model_validate(
            {**self.model_dump(), "batch_size": batch_size}
        )
