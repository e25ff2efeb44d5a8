"""
JSON-RPC messaging with CellNodes.

Public calls (such as uploading a public file) are sent unsigned to
/api/public. Every other call is signed by the wallet's agent key and sent to
/api/request, where the CellNode recomputes the signature over the canonical
bytes of params.payload.data.
"""
import random
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from .config import DID_PREFIX
from .exceptions import RemoteRpcError
from .models import RpcSignature
from .resolver import EndpointResolver, Target
from .signer import Signer, require_wallet
from .transport import Fetcher
from .wallet import AgentWallet

logger = logging.getLogger(__name__)

SIGNATURE_TYPE = "ed25519-sha-256"
PUBLIC_PATH = "/api/public"
REQUEST_PATH = "/api/request"


@dataclass
class RpcRequest:
    """
    What to send to a CellNode.

    Attributes:
        method: RPC method name
        data: Request data, signed as-is for private calls
        template: Optional template name for signed calls
        public: Send unsigned to the public endpoint
    """
    method: str
    data: Any = None
    template: Optional[str] = None
    public: bool = False


def generate_tx_id() -> int:
    """Random request id in [1, 1000000]; only needs to tell in-flight requests apart."""
    return random.randint(1, 1000000)


def make_public_rpc_msg(method: str, params: Any = None) -> Dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "method": method,
        "id": generate_tx_id(),
        "params": params if params is not None else {},
    }


def make_rpc_msg(
    method: str,
    template_name: Optional[str],
    data: Any,
    signature: RpcSignature
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"data": data if data is not None else {}}
    if template_name:
        payload["template"] = {"name": template_name}

    return {
        "jsonrpc": "2.0",
        "method": method,
        "id": generate_tx_id(),
        "params": {
            "payload": payload,
            "signature": signature.model_dump(by_alias=True),
        },
    }


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with milliseconds and a Z suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def make_signature(agent: AgentWallet, data: Any, now: Optional[datetime] = None) -> RpcSignature:
    """
    Sign request data with the agent key.

    Args:
        agent: Agent wallet holding the signing key
        data: Data placed in params.payload.data
        now: Optional signing instant, defaults to the current time

    Returns:
        Signature block for the request
    """
    return RpcSignature(
        type=SIGNATURE_TYPE,
        created=utc_timestamp(now),
        creator=DID_PREFIX + agent.did,
        signature_value=agent.sign(data),
    )


class RpcClient:
    """
    Sends RPC requests to the CellNode serving a target.

    Args:
        resolver: Resolves targets to CellNode endpoints
        cellnode: Fetcher used for CellNode calls (no URL prefix)
        signer: Signer state of the owning client
    """

    def __init__(self, resolver: EndpointResolver, cellnode: Fetcher, signer: Signer):
        self.resolver = resolver
        self.cellnode = cellnode
        self.signer = signer

    def build_message(self, request: RpcRequest) -> Dict[str, Any]:
        """
        Build the envelope for a request, signing it unless it's public.

        Raises:
            UninitializedSignerError: If a signed request is built without a wallet
        """
        if request.public:
            return make_public_rpc_msg(request.method, request.data)

        wallet = require_wallet(self.signer)
        data = request.data if request.data is not None else {}
        return make_rpc_msg(request.method, request.template, data, make_signature(wallet.agent, data))

    def invoke(self, target: Target, describe: Callable[[Optional[str]], RpcRequest]) -> Any:
        """
        Resolve a target, build the request and send it.

        Args:
            target: CellNode URL, project DID or entity record
            describe: Called with the resolved project DID (None for URL
                targets), returns the RpcRequest to send

        Returns:
            The ``result`` member of the response

        Raises:
            RemoteRpcError: If the CellNode answered with an ``error`` member
            TransportError: If the HTTP call failed
            UninitializedSignerError: If a signed call is made without a wallet
        """
        head = self.resolver.resolve(target)
        request = describe(head.project_did)
        message = self.build_message(request)
        path = PUBLIC_PATH if request.public else REQUEST_PATH

        logger.debug("Calling %s on %s (id=%s)", request.method, head.service_endpoint, message["id"])

        resp = self.cellnode.fetch(head.service_endpoint + path, method="POST", body=message)
        body = resp.body

        if not isinstance(body, dict):
            logger.warning(f"Unexpected non-JSON response to {request.method}: {body!r}")
            return None

        if body.get("error"):
            logger.debug("CellNode returned error for %s: %s", request.method, body["error"])
            raise RemoteRpcError(body["error"])

        return body.get("result")
