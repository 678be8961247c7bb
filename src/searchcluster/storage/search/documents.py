"""
Indexable document and saved query models.

Field kinds and relationship kinds are closed enumerations: the index
mapping, the query builder and document reconstruction all iterate these
enums directly.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class FieldType(str, Enum):
    """Kinds of text corpus a document can carry."""

    TITLE = "titl"
    BODY = "body"
    COMMENT = "cmnt"
    ALL = "full"
    CORE = "core"


class RelationshipType(str, Enum):
    """Kinds of edges from a document to another object."""

    AUTHOR = "auth"
    BOOK = "book"
    REVIEWER = "revw"
    SUBSCRIBER = "subs"
    COMMENTER = "comm"
    OWNER = "ownr"
    PROJECT = "proj"
    REPOSITORY = "repo"

    OPEN = "open"
    CLOSED = "clos"
    UNOWNED = "unow"


FIELD_TYPES: List[str] = [f.value for f in FieldType]
RELATIONSHIP_TYPES: List[str] = [r.value for r in RelationshipType]


def phid_get_type(phid: str) -> str:
    """
    Extract the four-letter type code from an identifier.

    "PHID-TASK-abcdef" -> "TASK". Unrecognized identifiers map to "????".
    """
    parts = phid.split("-")
    if len(parts) >= 3 and parts[0] == "PHID" and parts[1]:
        return parts[1]
    return "????"


@dataclass
class DocumentField:
    name: str
    corpus: str
    aux_phid: Optional[str] = None


@dataclass
class DocumentRelationship:
    type: str
    to_phid: str
    to_type: str
    timestamp: int


@dataclass
class Document:
    """An abstract document ready to be written to a full-text engine."""

    phid: str
    type: str
    title: str = ""
    created_at: int = 0
    modified_at: int = 0
    url: Optional[str] = None
    fields: List[DocumentField] = field(default_factory=list)
    relationships: List[DocumentRelationship] = field(default_factory=list)

    def add_field(self, name: str, corpus: str, aux_phid: Optional[str] = None) -> "Document":
        self.fields.append(DocumentField(name, corpus, aux_phid))
        return self

    def add_relationship(
        self, type: str, to_phid: str, to_type: str, timestamp: int
    ) -> "Document":
        self.relationships.append(DocumentRelationship(type, to_phid, to_type, timestamp))
        return self


@dataclass
class SavedQuery:
    """
    Key/value bag of search parameters.

    Recognized keys: query, types, exclude, authorPHIDs, subscriberPHIDs,
    projectPHIDs, repositoryPHIDs, statuses, withUnowned, withAnyOwner,
    ownerPHIDs, offset, limit.
    """

    parameters: Dict[str, Any] = field(default_factory=dict)

    def get_parameter(self, key: str, default: Any = None) -> Any:
        return self.parameters.get(key, default)

    def set_parameter(self, key: str, value: Any) -> "SavedQuery":
        self.parameters[key] = value
        return self

    def copy(self) -> "SavedQuery":
        return SavedQuery(parameters=dict(self.parameters))
