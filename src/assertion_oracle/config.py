from __future__ import annotations

from enum import Enum
from pathlib import Path

import yaml
from expandvars import expandvars
from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class MissingDeclaration(str, Enum):
    FAIL = "fail"
    REPORT = "report"


class OracleConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    missing_declaration: MissingDeclaration = MissingDeclaration.FAIL
    fail_on_failed: bool = True
    suite_name: str = "assertions"
    junit: str | None = None
    report: str | None = None

    @field_validator("suite_name")
    @classmethod
    def suite_name_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("suite_name must not be blank")
        return v

    @model_validator(mode="after")
    def expand_output_paths(self) -> "OracleConfig":
        """Expand ${VAR} references in output paths.

        Raises ValueError listing every missing variable so the user can fix them
        all at once.
        """
        missing: list[str] = []
        for key in ("junit", "report"):
            value = getattr(self, key)
            if value is None:
                continue
            try:
                setattr(self, key, expandvars(value, nounset=True))
            except Exception:
                # Variable is missing and has no default
                missing.append(f"  {key}={value}")

        if missing:
            details = "\n".join(missing)
            raise ValueError(f"Output paths reference unset environment variables:\n{details}")

        return self


def load_config(path: Path) -> OracleConfig:
    """Load and validate an oracle config from a YAML file."""
    config_dir = path.parent.resolve()

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Expected a mapping at the top level of {path}")

    config = OracleConfig(**raw)

    # Resolve relative output paths relative to config file location
    for key in ("junit", "report"):
        value = getattr(config, key)
        if value is not None and not Path(value).is_absolute():
            setattr(config, key, str((config_dir / value).resolve()))

    return config
