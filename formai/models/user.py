"""
Accounts and tenants.

An Organization owns forums, personas, SEO data and leads. A User signs in
to the dashboard and acts inside ``current_org_id``.
"""
import uuid
from datetime import datetime
from typing import Optional, List

from sqlmodel import SQLModel, Field, Relationship


class MemberRole:
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"


class Organization(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True)
    # Marketing site of the tenant, used for persona generation and interlinks
    domain: Optional[str] = Field(default=None, index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    members: List["OrganizationMember"] = Relationship(back_populates="organization")


class OrganizationMember(SQLModel, table=True):
    __tablename__ = "organization_member"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    org_id: uuid.UUID = Field(foreign_key="organization.id", index=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", index=True)
    role: str = Field(default=MemberRole.MEMBER)
    joined_at: datetime = Field(default_factory=datetime.utcnow)

    organization: Organization = Relationship(back_populates="members")
    user: "User" = Relationship(back_populates="memberships")


class User(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    email: str = Field(unique=True, index=True)
    password_hash: str

    full_name: Optional[str] = None
    # Shown next to questions and answers instead of the email
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None

    is_active: bool = Field(default=True)
    current_org_id: Optional[uuid.UUID] = Field(default=None, foreign_key="organization.id", index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    last_login_at: Optional[datetime] = None

    memberships: List[OrganizationMember] = Relationship(back_populates="user")

    @property
    def public_name(self) -> str:
        return self.display_name or self.full_name or self.email.split("@")[0]
