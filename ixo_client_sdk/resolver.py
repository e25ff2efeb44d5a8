"""
Entity lookups and CellNode endpoint resolution.

An entity (project) is addressed by its DID. The directory (block-sync)
service returns the entity record, and the record names the CellNode that
serves it. Nothing is cached: entities may move between CellNodes.
"""
import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Union
from urllib.parse import quote

from .exceptions import CellNodeNotFoundError
from .models import ProjectHead
from .transport import Fetcher

logger = logging.getLogger(__name__)

CELLNODE_TYPE = "CellNode"

Target = Union[str, Mapping]


def _node_items(record: Mapping) -> List[Any]:
    data = record.get("data")
    nodes = data.get("nodes") if isinstance(data, Mapping) else None
    if nodes is None:
        nodes = record.get("nodes")
    if not isinstance(nodes, Mapping):
        return []
    return nodes.get("items") or []


def endpoint_from_record(record: Mapping) -> ProjectHead:
    """
    Extract the CellNode endpoint from an entity record.

    Args:
        record: Entity record as returned by the directory service

    Returns:
        ProjectHead with the record's project DID and the endpoint, minus
        any trailing slash

    Raises:
        CellNodeNotFoundError: If the record lists no CellNode
    """
    for item in _node_items(record):
        if isinstance(item, Mapping) and item.get("@type") == CELLNODE_TYPE:
            endpoint = item.get("serviceEndpoint")
            if not endpoint:
                break
            if endpoint.endswith("/"):
                endpoint = endpoint[:-1]
            return ProjectHead(project_did=record.get("projectDid"), service_endpoint=endpoint)

    raise CellNodeNotFoundError(
        f"Entity record {record.get('projectDid')!r} has no {CELLNODE_TYPE} with a serviceEndpoint"
    )


def is_url(target: Any) -> bool:
    return isinstance(target, str) and target.startswith("http")


class EndpointResolver:
    """
    Resolves entity references against the directory service.

    Args:
        directory: Fetcher bound to the directory (block-sync) base URL
    """

    def __init__(self, directory: Fetcher):
        self.directory = directory

    def get_project(self, did: str) -> Dict[str, Any]:
        """Fetch the entity record of a project DID."""
        return self.directory.fetch("/api/project/getByProjectDid/" + quote(did, safe=":")).body

    def list_projects(self) -> List[Dict[str, Any]]:
        """Fetch every entity record known to the directory."""
        return self.directory.fetch("/api/project/listProjects").body

    def get_did_doc(self, did: str) -> Dict[str, Any]:
        """Fetch the DID document of any DID."""
        return self.directory.fetch("/api/did/getByDid/" + quote(did, safe=":")).body

    def resolve_endpoint(self, did_or_record: Target) -> ProjectHead:
        """
        Resolve a project DID or record to its CellNode.

        Records are used as-is; DIDs are looked up first.

        Raises:
            CellNodeNotFoundError: If the record lists no CellNode
            TransportError: If the directory lookup fails
        """
        if isinstance(did_or_record, Mapping):
            return endpoint_from_record(did_or_record)

        logger.debug("Resolving CellNode for %s", did_or_record)
        record = self.get_project(did_or_record)
        if not isinstance(record, Mapping):
            raise CellNodeNotFoundError(f"Directory returned no entity record for {did_or_record!r}")
        head = endpoint_from_record(record)
        logger.debug("Resolved %s to %s", did_or_record, head.service_endpoint)
        return head

    def resolve(self, target: Target) -> ProjectHead:
        """
        Resolve any RPC target: a URL, a project DID or an entity record.

        URLs short-circuit with no project DID.
        """
        if is_url(target):
            return ProjectHead(project_did=None, service_endpoint=target)
        return self.resolve_endpoint(target)
