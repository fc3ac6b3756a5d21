"""Company Schema - the flat attestation record an investor files for its company.

Invariants:
    - All fields stripped; legal_name and tax_id_number non-empty
    - Inert data: nothing in the engine branches on these values
"""

from pydantic import BaseModel, Field, field_validator


class CompanyDetails(BaseModel):
    """Company profile attached to an investor acting on behalf of a company."""
    company_type: str = Field("", max_length=100)
    name: str = Field("", max_length=200)
    legal_name: str = Field(min_length=1, max_length=200)
    admin_email: str = Field("", max_length=254, pattern=r"^$|^[^@\s]+@[^@\s]+$")
    phone_number: str = Field("", max_length=40)
    address: str = Field("", max_length=500)
    country: str = Field("", max_length=100)
    city: str = Field("", max_length=100)
    zip_code: str = Field("", max_length=20)
    tax_id_number: str = Field(min_length=1, max_length=50)
    role: str = Field("", max_length=100)

    @field_validator("*", mode="before")
    @classmethod
    def strip_strings(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v
