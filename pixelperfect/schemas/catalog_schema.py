"""Service catalog data models."""

from pydantic import BaseModel, ConfigDict, Field


class Service(BaseModel):
    """A bookable photography offering."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    price: int = Field(gt=0)
    duration: int = Field(gt=0, description="Session length in minutes")
    category: str
    is_active: bool = True
