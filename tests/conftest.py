import pytest

from tilekeeper.grid.descriptor import TileDescriptor
from tilekeeper.settings import settings
from tilekeeper.store import store_handle

OSM_TEMPLATE = "https://{s}.tile.example.org/{z}/{x}/{y}.png"


@pytest.fixture
def database_url(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'tiles.db'}"
    monkeypatch.setattr(settings, "database_url", url)
    store_handle.reset()

    yield url

    store_handle.reset()


@pytest.fixture
def make_tile():
    def make(x: int, y: int, z: int, template: str = OSM_TEMPLATE) -> TileDescriptor:
        key = template.replace("{s}", "a").format(x=x, y=y, z=z)
        return TileDescriptor(
            key=key,
            url=key,
            url_template=template,
            x=x,
            y=y,
            z=z,
            inverted_y=2**z - 1 - y,
        )

    return make
