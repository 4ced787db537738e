from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GraphPath(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str
    mapping: list[dict[str, Any]] = Field(default_factory=list)
    freq: int | float | None = None
    index_of_first_base: int | None = Field(default=None, alias="indexOfFirstBase")


class Graph(BaseModel):
    """Subgraph as emitted by ``vg view -j``.

    Unknown vg fields are kept so they round-trip to the client untouched.
    """

    model_config = ConfigDict(extra="allow")

    node: list[dict[str, Any]] = Field(default_factory=list)
    edge: list[dict[str, Any]] = Field(default_factory=list)
    path: list[GraphPath] = Field(default_factory=list)

    def paths_named(self, name: str) -> list[GraphPath]:
        return [p for p in self.path if p.name == name]


class AnnotationRecord(BaseModel):
    name: str
    freq: int | float


class RegionRecord(BaseModel):
    name: str
    first_base: int


class AlignmentRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str | None = None
    sequence: str | None = None


class ExtractionResult(BaseModel):
    graph: Graph | None = None
    gam: list[AlignmentRecord] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.graph is None

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the wire shape; an empty result becomes ``{}``."""
        if self.graph is None:
            return {}
        return {
            "graph": self.graph.model_dump(by_alias=True, exclude_none=True),
            "gam": [record.model_dump(exclude_none=True) for record in self.gam],
        }
