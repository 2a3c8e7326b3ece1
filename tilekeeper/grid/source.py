"""
Tile sources: the URL template of a tile layer and the helpers used to turn
it into concrete tile URLs.

Example:

```python
source = TileSource(
    url_template="https://{s}.tile.openstreetmap.org/{z}/{x}/{y}{r}.png",
    subdomains="abc",
)
```
"""

import re
from typing import Any, Callable, Mapping, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import TemplateError

TEMPLATE_PATTERN = re.compile(r"\{ *([\w_ -]+?) *\}")

RETINA_SUFFIX = "@2x"

SubdomainSelector = Callable[[tuple[int, int], Sequence[str]], str]


class TileSource(BaseModel):
    """
    Everything needed to address the tiles of one layer.
    """

    model_config = ConfigDict(frozen=True)

    url_template: str
    "URL template with {x}, {y}, {z}, {s} and optionally {r} placeholders."
    tile_size: int = Field(default=256, gt=0)
    "Width and height of a (square) tile in pixels."
    subdomains: tuple[str, ...] = ("a", "b", "c")
    "Subdomain labels substituted for {s}. A string is split into characters."
    tms: bool = False
    "Whether the server numbers rows from the bottom of the world (TMS)."
    options: dict[str, str | int | float] = Field(default_factory=dict)
    "Additional named values substituted into the template."

    @field_validator("subdomains", mode="before")
    @classmethod
    def split_subdomains(cls, value: Any) -> Any:
        if isinstance(value, str):
            return tuple(value)
        return value

    @property
    def first_subdomain(self) -> str | None:
        if self.subdomains:
            return self.subdomains[0]
        return None


def template(url_template: str, data: Mapping[str, Any]) -> str:
    """
    Substitute ``{name}`` placeholders in ``url_template`` with values from
    ``data``. Callable values are called with ``data``.
    """

    def replace(match: re.Match) -> str:
        name = match.group(1)

        if name not in data:
            raise TemplateError(f"No value provided for variable {match.group(0)}")

        value = data[name]

        if callable(value):
            value = value(data)

        return str(value)

    return TEMPLATE_PATTERN.sub(replace, url_template)


def tile_url(url_template: str, data: Mapping[str, Any], retina: bool = False) -> str:
    """
    Build a tile URL, filling the retina placeholder {r} from ``retina``.
    """
    return template(url_template, {**data, "r": RETINA_SUFFIX if retina else ""})


def default_subdomain(point: tuple[int, int], subdomains: Sequence[str]) -> str:
    """
    Round-robin subdomain choice; always the same label for the same tile.
    """
    x, y = point
    return subdomains[abs(x + y) % len(subdomains)]
