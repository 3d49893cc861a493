"""Request and response bodies for the grant routes (camelCase on the wire)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictBool

from sharegate.capabilities import Capabilities
from sharegate.models import GrantBase


class CapabilitiesRequest(BaseModel):
    """Complete desired capability tuple.  Omitted flags take the creation defaults."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    can_read: StrictBool = Field(default=True, alias="canRead")
    can_write: StrictBool = Field(default=False, alias="canWrite")
    can_share: StrictBool = Field(default=False, alias="canShare")

    def to_capabilities(self) -> Capabilities:
        return Capabilities(
            can_read=self.can_read,
            can_write=self.can_write,
            can_share=self.can_share,
        )


class GrantRequest(CapabilitiesRequest):
    """Body of ``POST /files/{file_id}/permissions``."""

    user_id: int = Field(alias="userId")


class CapabilitiesResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    can_read: bool = Field(alias="canRead")
    can_write: bool = Field(alias="canWrite")
    can_share: bool = Field(alias="canShare")

    @classmethod
    def from_capabilities(cls, caps: Capabilities) -> CapabilitiesResponse:
        return cls(can_read=caps.can_read, can_write=caps.can_write, can_share=caps.can_share)


class GrantResponse(CapabilitiesResponse):
    id: int | None = None
    file_id: int = Field(alias="fileId")
    user_id: int = Field(alias="userId")

    @classmethod
    def from_grant(cls, grant: GrantBase) -> GrantResponse:
        return cls(
            id=grant.id,
            file_id=grant.file_id,
            user_id=grant.user_id,
            can_read=grant.can_read,
            can_write=grant.can_write,
            can_share=grant.can_share,
        )
