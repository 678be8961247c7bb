from .base import FulltextStorageEngine
from .documents import (
    Document,
    DocumentField,
    DocumentRelationship,
    FieldType,
    RelationshipType,
    SavedQuery,
    phid_get_type,
)
from .elastic import ElasticFulltextStorageEngine
from .query_builder import QueryBuilder
from .tags import Tag, TagKeywordCache, TagSource
from .transport import ElasticTransport

__all__ = [
    "FulltextStorageEngine",
    "ElasticFulltextStorageEngine",
    "ElasticTransport",
    "QueryBuilder",
    "Document",
    "DocumentField",
    "DocumentRelationship",
    "FieldType",
    "RelationshipType",
    "SavedQuery",
    "phid_get_type",
    "Tag",
    "TagKeywordCache",
    "TagSource",
]
