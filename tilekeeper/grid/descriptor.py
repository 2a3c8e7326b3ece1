"""
Descriptions of individual tiles, as produced by the resolver and as read
back from the store.
"""

from pydantic import BaseModel, ConfigDict, Field


class TileDescriptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    key: str = Field(description="Canonical cache key; the URL built with the first subdomain.")
    url: str = Field(description="URL to fetch the tile from.")
    url_template: str = Field(
        alias="urlTemplate", description="Template the tile was resolved from."
    )
    x: int
    y: int = Field(description="Row index as served by the tile source.")
    z: int
    inverted_y: int = Field(
        alias="-y", description="Row index under the opposite numbering scheme."
    )


class StoredTileMeta(TileDescriptor):
    """
    A tile descriptor read back from the store, without its payload.
    """

    pass
