"""
Pydantic-based schema validation for vueprune.yaml / [tool.vueprune].

Goals
- Catch unknown or misspelled keys early
- Enforce proper types for list/mapping fields before they are merged
"""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class PruneConfigModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    aliases: Optional[Dict[str, str]] = None
    ignore_dirs: Optional[List[str]] = None
    extra_ignore_dirs: Optional[List[str]] = None
    component_extension: Optional[str] = None
    asset_extensions: Optional[List[str]] = None
    code_extensions: Optional[List[str]] = None
    style_extensions: Optional[List[str]] = None
    code_ignore_patterns: Optional[List[str]] = None
    entry_candidates: Optional[List[str]] = None
    output_file: Optional[str] = None

    @field_validator("aliases")
    @classmethod
    def _alias_keys_not_empty(cls, v: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
        if v is not None:
            for key in v:
                if not key.strip():
                    raise ValueError("alias prefix must not be empty")
        return v

    @field_validator("output_file")
    @classmethod
    def _plain_file_name(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and ("/" in v or "\\" in v):
            raise ValueError("output_file must be a plain file name")
        return v


def validate_config_data(data: dict) -> PruneConfigModel:
    """Validate loaded configuration data.

    Raises:
        pydantic.ValidationError if validation fails.
    """
    return PruneConfigModel.model_validate(data)
