from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ShippingAddress(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("full_name", "fullName")
    )
    phone: Optional[str] = None
    street_address: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("street_address", "streetAddress")
    )
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("postal_code", "postalCode")
    )

    def snapshot(self) -> dict:
        return self.model_dump(exclude_none=True)
