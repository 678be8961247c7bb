import re
from typing import Any, Dict, List, Optional

import httpx
import structlog

from searchcluster.errors import (
    BackendStatusError,
    ConfigMismatchError,
    ProtocolError,
    QuerySyntaxError,
    SearchClusterError,
)
from searchcluster.platform.config import settings
from searchcluster.storage.search.base import FulltextStorageEngine
from searchcluster.storage.search.documents import (
    FIELD_TYPES,
    Document,
    FieldType,
    RelationshipType,
    SavedQuery,
    phid_get_type,
)
from searchcluster.storage.search.mapping import (
    build_index_configuration,
    config_differences,
)
from searchcluster.storage.search.query_builder import QueryBuilder
from searchcluster.storage.search.tags import TagKeywordCache, TagSource
from searchcluster.storage.search.transport import ElasticTransport

logger = structlog.get_logger()

# Lucene query syntax operators, escaped for the literal-search retry
_QUERY_SYNTAX_CHARS = re.compile(r'([+\-&|!(){}\[\]^"~*?:\\])')

DEFAULT_LIMIT = 25


def escape_query_syntax(text: str) -> str:
    return _QUERY_SYNTAX_CHARS.sub(r"\\\1", text)


def timestamp_field_for_version(version: int) -> str:
    """Elasticsearch 2 dropped the _timestamp meta field."""
    return "_timestamp" if version < 2 else "lastModified"


class ElasticFulltextStorageEngine(FulltextStorageEngine):
    """Elasticsearch implementation of FulltextStorageEngine over HTTP+JSON."""

    def __init__(
        self,
        uri: Optional[str] = None,
        index: Optional[str] = None,
        version: Optional[int] = None,
        timeout: Optional[float] = None,
        enabled: Optional[bool] = None,
        timestamp_field: Optional[str] = None,
        indexable_types: Optional[List[str]] = None,
        tag_source: Optional[TagSource] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._uri = uri or settings.SEARCH_ELASTIC_HOST
        self._index = index or settings.SEARCH_ELASTIC_NAMESPACE
        self._version = int(version if version is not None else settings.SEARCH_ELASTIC_VERSION)
        self._timeout = timeout if timeout is not None else settings.SEARCH_ELASTIC_TIMEOUT
        self._enabled = enabled if enabled is not None else settings.SEARCH_ELASTIC_ENABLED
        self.timestamp_field = (
            timestamp_field
            or settings.SEARCH_ELASTIC_TIMESTAMP_FIELD
            or timestamp_field_for_version(self._version)
        )
        self.indexable_types = list(indexable_types or settings.SEARCH_INDEXABLE_TYPES)
        self._tag_cache: Optional[TagKeywordCache] = (
            TagKeywordCache(tag_source) if tag_source else None
        )
        self.transport = ElasticTransport(
            self._uri, self._index, timeout=self._timeout, transport=transport
        )

    @property
    def engine_identifier(self) -> str:
        return "elasticsearch"

    @property
    def engine_priority(self) -> int:
        return 10

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def index(self) -> str:
        return self._index

    @property
    def version(self) -> int:
        return self._version

    @property
    def timeout(self) -> Optional[float]:
        return self._timeout

    def is_enabled(self) -> bool:
        return self._enabled

    async def connect(self) -> None:
        await self.transport.connect()

    async def close(self) -> None:
        await self.transport.close()

    async def health_check(self) -> bool:
        try:
            return await self.index_exists()
        except SearchClusterError as e:
            logger.error("elastic_health_check_failed", host=self._uri, error=str(e))
            return False

    # ------------------------------------------------------------------
    # Indexing
    # ------------------------------------------------------------------

    async def resolve_tags(self, phids: List[str]) -> str:
        if self._tag_cache is None:
            logger.debug("tag_resolution_skipped", reason="no tag source", count=len(phids))
            return ""
        return await self._tag_cache.resolve(phids)

    async def build_document_body(self, document: Document) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "title": document.title,
            "dateCreated": document.created_at,
            self.timestamp_field: document.modified_at,
        }
        # Not used for searching, but useful to external consumers
        if document.url is not None:
            body["url"] = document.url

        field_meta: List[Dict[str, Any]] = []
        for field in document.fields:
            if field.name not in body:
                body[field.name] = field.corpus
            elif not isinstance(body[field.name], list):
                body[field.name] = [body[field.name], field.corpus]
            else:
                body[field.name].append(field.corpus)
            if field.aux_phid is not None:
                body[f"{field.name}_aux_phid"] = field.aux_phid
            field_meta.append({"type": field.name, "aux": field.aux_phid})

        tags: List[str] = []
        relationship_meta: Dict[str, List[Dict[str, Any]]] = {}
        for rel in document.relationships:
            body.setdefault(rel.type, []).append(rel.to_phid)
            relationship_meta.setdefault(rel.type, []).append(
                {"phid": rel.to_phid, "phidType": rel.to_type, "when": rel.timestamp}
            )
            if rel.type == RelationshipType.PROJECT.value:
                tags.append(rel.to_phid)

        if tags:
            body["tags"] = await self.resolve_tags(tags)

        body["field"] = field_meta
        body["relationship"] = relationship_meta
        return body

    async def reindex(self, document: Document) -> None:
        body = await self.build_document_body(document)
        await self.transport.request(f"/{document.type}/{document.phid}/", body, "PUT")
        logger.debug(
            "reindexed_document", host=self._uri, phid=document.phid, type=document.type
        )

    async def reconstruct(self, phid: str) -> Optional[Document]:
        doc_type = phid_get_type(phid)
        try:
            response = await self.transport.request(f"/{doc_type}/{phid}")
        except BackendStatusError as e:
            if e.status_code == 404:
                return None
            raise

        # Elasticsearch 1.x reports "exists", later versions "found"
        if not response or not (response.get("exists") or response.get("found")):
            return None

        hit = response.get("_source") or {}
        document = Document(
            phid=phid,
            type=response.get("_type", doc_type),
            title=hit.get("title", ""),
            created_at=hit.get("dateCreated", 0),
            modified_at=hit.get(self.timestamp_field, 0),
            url=hit.get("url"),
        )

        # Repeated fields are stored as a list; consume them in order
        consumed: Dict[str, int] = {}
        for fdef in hit.get("field", []):
            name = fdef["type"]
            value = hit.get(name)
            if isinstance(value, list):
                position = consumed.get(name, 0)
                consumed[name] = position + 1
                value = value[position]
            document.add_field(name, value, fdef.get("aux"))

        for rel_type, relationships in hit.get("relationship", {}).items():
            for rel in relationships:
                document.add_relationship(
                    rel_type, rel["phid"], rel["phidType"], rel["when"]
                )

        return document

    # ------------------------------------------------------------------
    # Searching
    # ------------------------------------------------------------------

    def _catch_all_field(self) -> str:
        # _all was removed in Elasticsearch 6
        return "_all" if self._version < 6 else FieldType.ALL.value

    def build_spec(self, query: SavedQuery) -> Dict[str, Any]:
        q = QueryBuilder("bool")
        query_string = query.get_parameter("query") or ""

        if query_string:
            q.must({
                "simple_query_string": {
                    "query": query_string,
                    "fields": [
                        "title^4",
                        f"{FieldType.BODY.value}^3",
                        f"{FieldType.COMMENT.value}^2",
                        "tags",
                        self._catch_all_field(),
                    ],
                    "default_operator": "and",
                },
            })
            q.should({
                "simple_query_string": {
                    "query": query_string,
                    "fields": list(FIELD_TYPES),
                    "analyzer": "english_exact",
                    "default_operator": "and",
                },
            })

        exclude = query.get_parameter("exclude")
        if exclude:
            q.filter({"bool": {"must_not": {"ids": {"values": [exclude]}}}})

        relationship_map = {
            RelationshipType.AUTHOR: query.get_parameter("authorPHIDs", []),
            RelationshipType.SUBSCRIBER: query.get_parameter("subscriberPHIDs", []),
            RelationshipType.PROJECT: query.get_parameter("projectPHIDs", []),
            RelationshipType.REPOSITORY: query.get_parameter("repositoryPHIDs", []),
        }
        for rel_type, phids in relationship_map.items():
            if isinstance(phids, (list, tuple, set)) and phids:
                q.terms(rel_type.value, phids)

        statuses = set(query.get_parameter("statuses") or [])
        include_open = RelationshipType.OPEN.value in statuses
        include_closed = RelationshipType.CLOSED.value in statuses
        if include_open and not include_closed:
            q.exists(RelationshipType.OPEN.value)
        elif include_closed and not include_open:
            q.exists(RelationshipType.CLOSED.value)

        if query.get_parameter("withUnowned"):
            q.exists(RelationshipType.UNOWNED.value)

        if query.get_parameter("withAnyOwner"):
            q.exists(RelationshipType.OWNER.value)
        else:
            owner_phids = query.get_parameter("ownerPHIDs") or []
            if owner_phids:
                q.terms(RelationshipType.OWNER.value, owner_phids)

        if not q.get_terms("must"):
            q.must({"match_all": {}})

        spec: Dict[str, Any] = {
            "_source": False,
            "query": q.to_dict(),
        }

        # Text queries are ordered by relevance score
        if not query_string:
            spec["sort"] = [{"dateCreated": "desc"}]

        offset = query.get_parameter("offset")
        limit = query.get_parameter("limit")
        spec["from"] = 0 if offset is None else int(offset)
        spec["size"] = DEFAULT_LIMIT if limit is None else int(limit)
        return spec

    async def search(self, query: SavedQuery) -> List[str]:
        types = query.get_parameter("types") or self.indexable_types

        # Search "/{types}/_search" rather than "/_search" in case the
        # namespace is an alias onto a bigger index
        path = "/" + ",".join(types) + "/_search"

        try:
            response = await self.transport.request(path, self.build_spec(query))
        except QuerySyntaxError:
            if not query.get_parameter("query"):
                raise
            logger.info("retrying_search_as_literal", host=self._uri)
            literal = query.copy()
            literal.set_parameter("query", escape_query_syntax(query.get_parameter("query")))
            response = await self.transport.request(path, self.build_spec(literal))

        try:
            return [hit["_id"] for hit in response["hits"]["hits"]]
        except (KeyError, TypeError) as e:
            raise ProtocolError(
                "Elasticsearch search response has no hit list",
                host=self._uri,
                operation=f"GET {path}",
            ) from e

    # ------------------------------------------------------------------
    # Index lifecycle
    # ------------------------------------------------------------------

    async def index_exists(self) -> bool:
        path = "/" if self._version >= 2 else "/_status/"
        try:
            return bool(await self.transport.request(path))
        except BackendStatusError as e:
            if e.status_code == 404:
                return False
            raise

    def get_index_configuration(self) -> Dict[str, Any]:
        return build_index_configuration(
            self._version, self.indexable_types, self.timestamp_field
        )

    def _index_entry(self, response: Dict[str, Any]) -> Dict[str, Any]:
        if self._index in response:
            return response[self._index]
        # An alias is reported under the concrete index name
        if len(response) == 1:
            return next(iter(response.values()))
        return {}

    async def index_differences(self) -> List[str]:
        if not await self.index_exists():
            return ["index (missing)"]

        cur_mapping = await self.transport.request("/_mapping/")
        cur_settings = await self.transport.request("/_settings/")
        actual = {**self._index_entry(cur_settings or {}), **self._index_entry(cur_mapping or {})}

        return config_differences(actual, self.get_index_configuration())

    async def index_is_sane(self) -> bool:
        return not await self.index_differences()

    async def ensure_index_sane(self) -> None:
        differences = await self.index_differences()
        if differences:
            raise ConfigMismatchError(differences, host=self._uri)

    async def init_index(self) -> None:
        if await self.index_exists():
            logger.warning("deleting_search_index", host=self._uri, index=self._index)
            await self.transport.request("/", None, "DELETE")
        await self.transport.request("/", self.get_index_configuration(), "PUT")
        logger.info("created_search_index", host=self._uri, index=self._index)
