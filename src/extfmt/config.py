"""Render configuration"""

from __future__ import annotations

import os
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

DEFAULT_MAX_DEPTH = 64
# Each level costs a few Python frames in the parser and renderer; stay well
# inside the default recursion limit.
MAX_DEPTH_LIMIT = 200

ENV_LENGTH_POLICY = "EXTFMT_LENGTH_POLICY"
ENV_MAX_DEPTH = "EXTFMT_MAX_DEPTH"


class LengthPolicy(str, Enum):
    """What to do when zipped variables in one group differ in length."""

    TRUNCATE = "truncate"  # stop at the shortest
    STRICT = "strict"  # raise LaneLengthMismatchError


class RenderOptions(BaseModel):
    """Options shared by the parser and renderer."""

    model_config = {"frozen": True}

    length_policy: LengthPolicy = LengthPolicy.TRUNCATE
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1, le=MAX_DEPTH_LIMIT)

    @classmethod
    def from_env(cls, **overrides: Any) -> "RenderOptions":
        """Build options from EXTFMT_* environment variables.

        Keyword overrides that are not None take precedence.
        """
        data: dict[str, Any] = {}
        if os.environ.get(ENV_LENGTH_POLICY):
            data["length_policy"] = os.environ[ENV_LENGTH_POLICY].strip().lower()
        if os.environ.get(ENV_MAX_DEPTH):
            data["max_depth"] = os.environ[ENV_MAX_DEPTH].strip()

        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(data)

    @property
    def strict(self) -> bool:
        return self.length_policy is LengthPolicy.STRICT
