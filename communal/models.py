"""Data models for the communal network roster."""

from typing import Dict, List, Any, Optional
from datetime import datetime, timezone
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Confidence(str, Enum):
    """How certain the detector is that a group is one person."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class NodeType(str, Enum):
    """Kinds of nodes in the network graph."""

    ROOT = "root"
    CATEGORY = "category"
    USER = "user"
    PERSON = "person"


class RecordModel(BaseModel):
    """Base for models exchanged with the store and the renderer.

    Python code uses snake_case; serialized payloads use camelCase.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


class User(RecordModel):
    """A community member who may author connections."""

    id: str
    name: str
    created_at: datetime = Field(default_factory=_utcnow)


class Connection(RecordModel):
    """A person known to the community."""

    id: str
    name: str
    category: str = ""
    categories: List[str] = Field(default_factory=list)
    mutual_connections: List[str] = Field(default_factory=list)
    user_id: str = ""
    user_name: str = ""
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("categories", "mutual_connections", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        """Stored rows may carry null lists."""
        return [] if v is None else v


class DuplicateSuggestion(RecordModel):
    """A group of connections that probably refer to the same person."""

    name: str
    matches: List[Connection]
    matching_users: List[User] = Field(default_factory=list)
    confidence: Confidence
    reason: str = ""

    @property
    def match_ids(self) -> List[str]:
        return [match.id for match in self.matches]


class NetworkNode(RecordModel):
    """A node handed to the graph renderer."""

    id: str
    name: str
    category: str
    categories: Optional[List[str]] = None
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    group: int
    node_type: NodeType
    is_current_user: bool = False
    member_count: Optional[int] = None


class NetworkLink(RecordModel):
    """A weighted, semantically undirected edge between two nodes."""

    source: str
    target: str
    value: float


class NetworkGraph(RecordModel):
    """Nodes and links produced by one graph build."""

    nodes: List[NetworkNode] = Field(default_factory=list)
    links: List[NetworkLink] = Field(default_factory=list)

    def nodes_of_type(self, node_type: NodeType) -> List[NetworkNode]:
        """Get all nodes of a specific kind."""
        return [n for n in self.nodes if n.node_type == NodeType(node_type).value]

    def get_node(self, node_id: str) -> Optional[NetworkNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_payload(self) -> Dict[str, Any]:
        """Renderer-ready dictionary with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DetectionConfig(BaseModel):
    """Duplicate detection thresholds."""

    fuzzy_cutoff: float = Field(default=0.3, gt=0.0, le=1.0)
    min_match_length: int = Field(default=3, ge=1)
    similar_ratio: float = Field(default=0.7, ge=0.0, le=1.0)
    length_tolerance: float = Field(default=0.3, ge=0.0, le=1.0)


class NetworkConfig(BaseModel):
    """Graph synthesis configuration."""

    root_id: str = "root:community"
    root_label: str = "Community"


class StorageConfig(BaseModel):
    """Record store configuration."""

    path: str = "communal_data.json"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    format: str = "text"
    level: str = "INFO"
    file: Optional[str] = None

    @field_validator("format")
    @classmethod
    def check_format(cls, v):
        if v not in ("json", "text"):
            raise ValueError(f"Unsupported log format: {v}")
        return v


class Config(BaseModel):
    """Complete configuration."""

    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
