"""
Settings for the project.
"""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///tilekeeper.db"
    "SQLAlchemy URL of the tile database."

    retina: bool = False
    "Whether to request high-resolution tiles, filling the {r} placeholder with '@2x'."

    crs: Literal["EPSG3857", "EPSG4326"] = "EPSG3857"
    "The coordinate reference system tile layers are laid out in."

    # Download settings
    download_concurrency: int = 4
    "Number of tiles downloaded at the same time when seeding the store."
    request_timeout_seconds: float = 30.0
    "Timeout for each tile request in seconds."
    user_agent: str = "tilekeeper"
    "User-Agent header sent with tile requests. Many tile servers require one."

    origins: list[str] | None = ["*"]
    add_cors: bool = True
    "Settings for managing CORS middleware on the tile server."

    class Config:
        env_prefix = "TILEKEEPER_"

    def create_store(self):
        """
        Create a store instance based on the settings.
        """
        from tilekeeper.store.sql import SQLTileStore

        return SQLTileStore(database_url=self.database_url)

    def get_crs(self):
        from tilekeeper.grid.crs import get_crs

        return get_crs(self.crs)


settings = Settings()
