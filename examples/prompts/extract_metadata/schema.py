# Context variables (e.g. focus_areas) are available as global names.
from typing import Literal


class Entity(BaseModel):
    name: str
    type: Literal["person", "organization", "location", "other"]


class ExtractMetadataSchema(BaseModel):
    document_type: str = Field(description="The type of document (e.g., report, article, email)")
    key_topics: list[str] = Field(description="Main topics discussed in the document")
    important_dates: list[str] = Field(
        default_factory=list, description="Significant dates mentioned"
    )
    entities: list[Entity] = Field(
        default_factory=list, description="Named entities found in the document"
    )
