from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class Dimension:
    width: float
    height: float


@dataclass(frozen=True)
class ChartFrame:
    """Container box plus the resolved content box; drawing is deferred to ``render``.

    When the content is larger than the container the rendering collaborator is
    expected to make the frame scrollable.
    """

    width: float
    height: float
    content_width: float
    content_height: float
    render_content: Callable[[Dimension], Any]

    @property
    def is_overflow_x(self) -> bool:
        return self.content_width > self.width

    @property
    def is_overflow_y(self) -> bool:
        return self.content_height > self.height

    def render(self) -> Any:
        return self.render_content(Dimension(width=self.content_width, height=self.content_height))
