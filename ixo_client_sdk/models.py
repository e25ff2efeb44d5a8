"""
Data models for the ixo client SDK.
"""
from typing import Dict, Any, Optional, List
from pydantic import BaseModel, Field


class SecpPlainState(BaseModel):
    """Plain-state form of the chain-account (secp256k1) keypair"""
    secret: str
    hd_path: str = Field(..., alias="hdPath")
    prefix: str
    privkey: str
    pubkey: str
    address: str

    class Config:
        populate_by_name = True


class AgentPlainState(BaseModel):
    """Plain-state form of the Agent Identity (ed25519) keypair"""
    secret: str
    hd_path: str = Field(..., alias="hdPath")
    prefix: str
    privkey: str
    pubkey: str
    signkey: str
    verifykey: str
    did: str
    address: str

    class Config:
        populate_by_name = True


class WalletPlainState(BaseModel):
    """JSON-safe export of both wallet keypairs"""
    secp: SecpPlainState
    agent: AgentPlainState


class ProjectHead(BaseModel):
    """Resolved project DID and the CellNode endpoint that serves it"""
    project_did: Optional[str] = None
    service_endpoint: str


class RpcSignature(BaseModel):
    """Signature block of a signed CellNode request"""
    type: str = "ed25519-sha-256"
    created: str
    creator: str
    signature_value: str = Field(..., alias="signatureValue")

    class Config:
        populate_by_name = True


class StdSignature(BaseModel):
    """Amino signature attached to a chain transaction"""
    pub_key: Dict[str, str]
    signature: str


class BroadcastTxResult(BaseModel):
    """Result of a transaction broadcast in block mode"""
    height: Optional[str] = None
    transaction_hash: str = Field(..., alias="txhash")
    raw_log: str = ""
    code: Optional[int] = None
    logs: Optional[List[Dict[str, Any]]] = None
    data: Optional[str] = None

    class Config:
        populate_by_name = True
