from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tubemap_server.core.catalog import is_safe_dataset_name
from tubemap_server.core.extraction import ChunkParams

_ABSENT = {"", "none"}


def _check_dataset_name(value: str | None) -> str | None:
    if value is not None and not is_safe_dataset_name(value):
        raise ValueError(f"Invalid dataset name: {value!r}")
    return value


class ChunkRequest(BaseModel):
    """POST /chr22_v4: field names match what the tube map client sends."""

    model_config = ConfigDict(populate_by_name=True)

    xg_file: str = Field(alias="xgFile")
    gam_index: str | None = Field(default=None, alias="gamIndex")
    gbwt_file: str | None = Field(default=None, alias="gbwtFile")
    anchor_track_name: str = Field(default="", alias="anchorTrackName")
    node_id: int = Field(alias="nodeID")
    distance: int = Field(ge=0)
    by_node: bool = Field(default=False, alias="byNode")
    use_mounted_path: bool = Field(default=False, alias="useMountedPath")

    @field_validator("gam_index", "gbwt_file", mode="before")
    @classmethod
    def _none_means_absent(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().lower() in _ABSENT:
            return None
        return value

    @field_validator("xg_file", "gam_index", "gbwt_file")
    @classmethod
    def _stays_in_data_dir(cls, value: str | None) -> str | None:
        return _check_dataset_name(value)

    def to_params(self) -> ChunkParams:
        return ChunkParams(
            xg_file=self.xg_file,
            position=self.node_id,
            distance=self.distance,
            anchor_path=self.anchor_track_name,
            by_node=self.by_node,
            gam_index=self.gam_index,
            gbwt_file=self.gbwt_file,
            use_mounted_path=self.use_mounted_path,
        )


class PathNamesRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    xg_file: str = Field(alias="xgFile")
    use_mounted_path: bool = Field(default=True, alias="useMountedPath")

    @field_validator("xg_file")
    @classmethod
    def _stays_in_data_dir(cls, value: str) -> str | None:
        return _check_dataset_name(value)


class PathNamesResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    path_names: list[str] = Field(default_factory=list, serialization_alias="pathNames")


class DatasetsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    xg_files: list[str] = Field(default_factory=list, serialization_alias="xgFiles")
    gbwt_files: list[str] = Field(default_factory=list, serialization_alias="gbwtFiles")
    gam_indices: list[str] = Field(default_factory=list, serialization_alias="gamIndices")


class ErrorDetail(BaseModel):
    kind: str
    message: str
    stage: str | None = None


class HealthResponse(BaseModel):
    status: str = "ok"


class ReadinessResponse(BaseModel):
    status: str = "ok"
    toolchain: str = "up"
