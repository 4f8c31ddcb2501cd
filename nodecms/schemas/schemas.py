"""Pydantic schemas for documents, identities and operation results."""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any

from nodecms.core.exceptions import ValidationError
from nodecms.core.status import Status


# ---- Identity ----
class Identity(BaseModel):
    """A caller identified by user id or by username (exactly one)."""

    uid: Optional[str] = None
    username: Optional[str] = None

    class Config:
        frozen = True

    def to_filter(self) -> Dict[str, Any]:
        """Return the user-collection filter for this identity.

        Raises:
            ValidationError: If neither or both of uid/username are set.
        """
        if self.uid and self.username:
            raise ValidationError("Identity must carry a uid or a username, not both", component="user")
        if self.uid:
            return {"id": self.uid}
        if self.username:
            return {"username": self.username}
        raise ValidationError("Identity must carry a uid or a username", component="user")


# ---- Roles ----
class Role(BaseModel):
    id: Optional[str] = None
    name: str
    perm_groups: Dict[str, Dict[str, bool]] = Field(default_factory=dict)
    system: bool = False

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"id"})


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1)
    system: bool = False


class PermissionsUpdate(BaseModel):
    perms: Dict[str, bool]


# ---- Users ----
class UserRecord(BaseModel):
    id: Optional[str] = None
    username: str
    email: Optional[str] = None
    roles: List[str] = Field(default_factory=list)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"id"})


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1)
    email: Optional[str] = None


class UserRoleAssign(BaseModel):
    role: str = Field(..., min_length=1)


# ---- Nodes ----
class ResolvedPerms(BaseModel):
    """Capabilities a caller holds on one node. Never persisted."""

    create: bool = False
    read: bool = False
    edit: bool = False
    delete: bool = False

    class Config:
        extra = "allow"


class Node(BaseModel):
    """A content node. Content types may add their own fields."""

    id: Optional[str] = None
    type: str = "basic"
    title: Optional[str] = None
    body: Optional[str] = None
    creation_date: Optional[str] = None
    uid: Optional[str] = None
    username: Optional[str] = None
    parent: Optional[str] = None
    children: List[str] = Field(default_factory=list)
    perms: Optional[ResolvedPerms] = None

    class Config:
        extra = "allow"

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Node":
        data = dict(doc)
        data.pop("perms", None)
        # untyped documents are basic nodes
        if data.get("type") is None:
            data["type"] = "basic"
        return cls.model_validate(data)

    def to_document(self) -> Dict[str, Any]:
        """Persisted shape: everything except the id and derived permissions."""
        return self.model_dump(exclude={"id", "perms"})


class NodePatch(BaseModel):
    """Merge patch for a node: only fields that are set get applied."""

    title: Optional[str] = None
    body: Optional[str] = None
    parent: Optional[str] = None
    children: Optional[List[str]] = None

    class Config:
        extra = "forbid"

    @field_validator("children")
    @classmethod
    def children_not_null(cls, v):
        # runs only when children is sent; an explicit null is rejected
        if v is None:
            raise ValueError("children must be a list")
        return v

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "NodePatch":
        """Pick the patchable base fields out of a request payload."""
        return cls.model_validate({k: v for k, v in payload.items() if k in cls.model_fields})


class NodeResult(BaseModel):
    status: Status
    node: Optional[Node] = None
    warnings: List[Status] = Field(default_factory=list)


class NodeListResult(BaseModel):
    status: Status
    nodes: List[Node] = Field(default_factory=list)
