"""Edward Backend — User Schemas."""

from pydantic import BaseModel, ConfigDict, Field


class AccountTypeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    display_name: str = Field(alias="displayName")
    description: str


class UserResponse(BaseModel):
    """
    The current user as seen by the client.

    `storage` tells the client which storage backend to construct:
    "server" (this API) or "local" (browser storage).
    """
    model_config = ConfigDict(populate_by_name=True)

    account_type: AccountTypeResponse = Field(alias="accountType")
    email: str
    is_premium: bool = Field(alias="isPremium")
    verified: bool
    storage: str


class UpgradeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    old_account_type: str = Field(alias="oldAccountType")
    new_account_type: str = Field(alias="newAccountType")
