"""
IxoClient - Main client for the ixo network.
"""
import re
import logging
from typing import Any, Dict, List, Optional

import requests

from .chain import ChainClient
from .config import ClientConfig, DID_PREFIX
from .exceptions import MalformedSourceError
from .models import BroadcastTxResult
from .resolver import EndpointResolver, Target
from .rpc import RpcClient, RpcRequest
from .signer import InitializedSigner, Signer, make_signer, require_wallet
from .transport import Fetcher
from .wallet import Wallet

logger = logging.getLogger(__name__)

DATA_URL_PATTERN = re.compile(r"^data:([^;]+);base64,(.+)$", re.DOTALL)

# Fee of the DID registration message; the chain charges nothing for it
REGISTER_FEE = {"amount": [], "gas": "0"}


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop unset optional fields so they are absent from the signed data."""
    return {k: v for k, v in data.items() if v is not None}


class IxoClient:
    """
    Client for interacting with the ixo network.

    This client handles:
    1. Directory lookups of entities and DID documents
    2. Signed and public RPC calls to the CellNodes serving entities
    3. Chain transactions signed by the wallet's keys

    Read-only directory lookups and public file calls work without a wallet;
    everything that signs raises UninitializedSignerError when none is set.
    """

    def __init__(
        self,
        wallet: Optional[Wallet] = None,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the IxoClient

        Args:
            wallet: Wallet used for signing (optional for read-only use)
            config: Endpoint configuration, defaults to ClientConfig()
            session: Optional requests session shared by all HTTP calls; by
                default every call uses its own, so concurrent calls share nothing
        """
        self.config = config or ClientConfig()
        self.session = session
        self.signer: Signer = make_signer(wallet)

        timeout = self.config.timeout
        self.blocksync = Fetcher(self.config.blocksync_url, self.session, timeout)
        self.chain_api = Fetcher(self.config.blockchain_url, self.session, timeout)
        self.resolver = EndpointResolver(self.blocksync)
        self.rpc = RpcClient(self.resolver, Fetcher("", self.session, timeout), self.signer)

        if isinstance(self.signer, InitializedSigner):
            logger.debug(f"Initialized client for {wallet!r}")
        else:
            logger.debug("Initialized client without a wallet")

    def _chain(self, key_type: str) -> ChainClient:
        """
        Chain client signing with the "secp" or "agent" key.

        Raises:
            UninitializedSignerError: If no wallet is set
            ValueError: If key_type is unknown
        """
        wallet = require_wallet(self.signer)
        if key_type == "secp":
            key = wallet.secp
        elif key_type == "agent":
            key = wallet.agent
        else:
            raise ValueError(f"Unknown key type {key_type!r}, expected 'secp' or 'agent'")
        return ChainClient(self.chain_api, key, self.config.gas_price)

    # Chain accounts and transactions

    def get_secp_account(self) -> Optional[Dict[str, Any]]:
        return self._chain("secp").get_account()

    def get_agent_account(self) -> Optional[Dict[str, Any]]:
        return self._chain("agent").get_account()

    def register(self, verify_key: Optional[str] = None) -> BroadcastTxResult:
        """
        Register the agent DID on chain.

        The message's ``pubKey`` field carries the agent's verify key; that is
        what the chain calls the public key of a DID.

        Args:
            verify_key: Used only when the wallet's agent has no verify key
        """
        agent = require_wallet(self.signer).agent
        msg = {
            "type": "did/AddDid",
            "value": {
                "did": DID_PREFIX + agent.did,
                "pubKey": agent.verifykey or verify_key,
            },
        }
        return self._chain("agent").sign_and_broadcast([msg], REGISTER_FEE)

    def send_tokens(self, to: str, amount: int, denom: str = "uixo") -> BroadcastTxResult:
        return self._chain("secp").send_tokens(to, amount, denom)

    def custom(self, key_type: str, msg: Dict[str, Any]) -> BroadcastTxResult:
        """
        Sign and broadcast an arbitrary amino message.

        Args:
            key_type: "secp" or "agent", the key that signs
            msg: Amino JSON message
        """
        return self._chain(key_type).sign_and_broadcast([msg])

    # Directory lookups

    def get_did_doc(self, did: str) -> Dict[str, Any]:
        return self.resolver.get_did_doc(did)

    def list_entities(self) -> List[Dict[str, Any]]:
        return self.resolver.list_projects()

    def get_entity(self, did: str) -> Dict[str, Any]:
        return self.resolver.get_project(did)

    # CellNode operations

    def _signed(self, target: Target, describe) -> Any:
        require_wallet(self.signer)
        return self.rpc.invoke(target, describe)

    def create_entity(self, entity_data: Dict[str, Any], cellnode_url: Optional[str] = None) -> Any:
        """
        Create an entity on a CellNode.

        Args:
            entity_data: Entity (project) data
            cellnode_url: CellNode to create it on, defaults to the configured one
        """
        return self._signed(cellnode_url or self.config.cellnode_url, lambda _: RpcRequest(
            method="createProject",
            template="create_project",
            data=entity_data,
        ))

    def create_entity_file(self, target: Target, data_url: str) -> Any:
        """
        Upload a public file to the CellNode of an entity.

        Args:
            target: CellNode URL, project DID or entity record
            data_url: File as a "data:<content type>;base64,<data>" URL

        Raises:
            MalformedSourceError: If data_url is not a base64 data URL
        """
        match = DATA_URL_PATTERN.match(data_url)
        if not match:
            raise MalformedSourceError("Entity file must be a base64 data URL")
        content_type, data = match.group(1), match.group(2)

        return self.rpc.invoke(target, lambda _: RpcRequest(
            method="createPublic",
            data={"data": data, "contentType": content_type},
            public=True,
        ))

    def get_entity_file(self, target: Target, key: str) -> Any:
        return self.rpc.invoke(target, lambda _: RpcRequest(
            method="fetchPublic",
            data={"key": key},
            public=True,
        ))

    def update_entity_status(self, target: Target, status: str) -> Any:
        return self._signed(target, lambda project_did: RpcRequest(
            method="updateProjectStatus",
            template="project_status",
            data={"projectDid": project_did, "status": status},
        ))

    def list_agents(self, target: Target) -> Any:
        return self._signed(target, lambda project_did: RpcRequest(
            method="listAgents",
            template="list_agent",
            data={"projectDid": project_did},
        ))

    def create_agent(
        self,
        target: Target,
        did: str,
        role: str,
        email: Optional[str] = None,
        name: Optional[str] = None
    ) -> Any:
        """
        Add an agent to an entity.

        Args:
            target: Project DID or entity record
            did: DID of the agent
            role: Agent role, e.g. "SA" (service agent) or "EA" (evaluator)
            email: Optional contact email
            name: Optional display name
        """
        return self._signed(target, lambda project_did: RpcRequest(
            method="createAgent",
            template="create_agent",
            data=_compact({
                "projectDid": project_did,
                "agentDid": did,
                "role": role,
                "email": email,
                "name": name,
            }),
        ))

    def update_agent(
        self,
        target: Target,
        agent_did: str,
        status: Optional[str] = None,
        role: Optional[str] = None,
        version: Optional[str] = None
    ) -> Any:
        return self._signed(target, lambda project_did: RpcRequest(
            method="updateAgentStatus",
            template="agent_status",
            data=_compact({
                "projectDid": project_did,
                "agentDid": agent_did,
                "status": status,
                "role": role,
                "version": version,
            }),
        ))

    def list_claims(self, target: Target, template_id: Optional[str] = None) -> Any:
        """
        List the claims of an entity, optionally only those of one claim template.
        """
        return self._signed(target, lambda project_did: RpcRequest(
            method="listClaimsByTemplateId" if template_id else "listClaims",
            template="list_claim",
            data=_compact({"projectDid": project_did, "claimTemplateId": template_id}),
        ))

    def create_claim(self, target: Target, claim_data: Dict[str, Any]) -> Any:
        return self._signed(target, lambda project_did: RpcRequest(
            method="submitClaim",
            template="submit_claim",
            data={**claim_data, "projectDid": project_did},
        ))

    def evaluate_claim(self, target: Target, claim_id: str, status: str) -> Any:
        return self._signed(target, lambda project_did: RpcRequest(
            method="evaluateClaim",
            template="evaluate_claim",
            data={"projectDid": project_did, "claimId": claim_id, "status": status},
        ))


def make_client(
    wallet: Optional[Wallet] = None,
    config: Optional[ClientConfig] = None,
    session: Optional[requests.Session] = None,
) -> IxoClient:
    """
    Create a client.

    Args:
        wallet: Wallet used for signing; None for a read-only client
        config: Endpoint configuration, defaults to ClientConfig()
        session: Optional requests session shared by all HTTP calls

    Returns:
        IxoClient instance
    """
    return IxoClient(wallet=wallet, config=config, session=session)
