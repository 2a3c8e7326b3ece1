"""
Table definitions for the tile database.

Tiles are indexed in three ways:
    - key (primary)
    - urlTemplate
    - z
"""

from sqlalchemy import Column, Index, Integer, String
from sqlmodel import Field, SQLModel


class StoredTile(SQLModel, table=True):
    __tablename__ = "tile_store"
    __table_args__ = (
        Index("ix_tile_store_urlTemplate", "urlTemplate"),
        Index("ix_tile_store_z", "z"),
    )

    key: str = Field(
        primary_key=True,
        description="The canonical key of this tile; the URL built with the first subdomain.",
    )
    url: str = Field(description="The URL this tile was fetched from.")
    url_template: str = Field(
        sa_column=Column("urlTemplate", String, nullable=False),
        description="The template of the layer this tile belongs to.",
    )
    x: int = Field(description="The x coordinate of this tile.")
    y: int = Field(description="The y coordinate of this tile, as served.")
    z: int = Field(description="The zoom level of this tile.")
    inverted_y: int = Field(
        sa_column=Column("-y", Integer, nullable=False),
        description="The y coordinate under the opposite row numbering scheme.",
    )
    blob: bytes = Field(description="The actual tile data.")


class SchemaVersion(SQLModel, table=True):
    __tablename__ = "tilekeeper_schema"

    id: int = Field(default=1, primary_key=True)
    version: int = Field(description="The schema version the database was upgraded to.")
