# factionmap/surface.py
"""
Drawing surfaces for the faction map.

The renderer only talks to the small capability below (fill, line, circle,
rect, text). PillowSurface rasterises with Pillow; RecordingSurface keeps a
list of the calls so layout can be checked without comparing pixels.
"""
from __future__ import annotations

import io
from typing import Any, List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont  # Pillow

Color = Tuple[int, int, int, int]
Point = Tuple[float, float]


def _load_font(size: int):
    try:
        return ImageFont.truetype("arial.ttf", size)
    except Exception:
        try:
            return ImageFont.truetype("DejaVuSans.ttf", size)
        except Exception:
            return ImageFont.load_default()


class DrawingSurface:
    width: int
    height: int

    def fill(self, color: Color) -> None:
        raise NotImplementedError

    def line(self, points: Sequence[Point], color: Color, width: int = 1) -> None:
        raise NotImplementedError

    def circle(self, center: Point, radius: float, fill: Optional[Color] = None,
               outline: Optional[Color] = None, width: int = 1) -> None:
        raise NotImplementedError

    def rect(self, box: Tuple[float, float, float, float], fill: Optional[Color] = None,
             outline: Optional[Color] = None, width: int = 1) -> None:
        raise NotImplementedError

    def text(self, xy: Point, text: str, color: Color, stroke: bool = False) -> None:
        raise NotImplementedError


class PillowSurface(DrawingSurface):
    def __init__(self, width: int, height: int, font_size: int = 16):
        self.width = width
        self.height = height
        self.image = Image.new("RGBA", (width, height), (0, 0, 0, 255))
        self.draw = ImageDraw.Draw(self.image)
        self.font = _load_font(font_size)

    def fill(self, color: Color) -> None:
        self.draw.rectangle([0, 0, self.width, self.height], fill=color)

    def line(self, points: Sequence[Point], color: Color, width: int = 1) -> None:
        self.draw.line([tuple(p) for p in points], fill=color, width=width)

    def circle(self, center: Point, radius: float, fill: Optional[Color] = None,
               outline: Optional[Color] = None, width: int = 1) -> None:
        x, y = center
        self.draw.ellipse([x - radius, y - radius, x + radius, y + radius],
                          fill=fill, outline=outline, width=width)

    def rect(self, box: Tuple[float, float, float, float], fill: Optional[Color] = None,
             outline: Optional[Color] = None, width: int = 1) -> None:
        self.draw.rectangle(list(box), fill=fill, outline=outline, width=width)

    def text(self, xy: Point, text: str, color: Color, stroke: bool = False) -> None:
        if stroke:
            self.draw.text(xy, text, fill=color, font=self.font,
                           stroke_width=2, stroke_fill=(0, 0, 0, 255))
        else:
            self.draw.text(xy, text, fill=color, font=self.font)

    def to_png(self) -> io.BytesIO:
        buf = io.BytesIO()
        self.image.save(buf, format="PNG")
        buf.seek(0)
        return buf


class RecordingSurface(DrawingSurface):
    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.calls: List[Tuple[Any, ...]] = []

    def fill(self, color):
        self.calls.append(("fill", color))

    def line(self, points, color, width=1):
        self.calls.append(("line", tuple(tuple(p) for p in points), color, width))

    def circle(self, center, radius, fill=None, outline=None, width=1):
        self.calls.append(("circle", tuple(center), radius, fill, outline, width))

    def rect(self, box, fill=None, outline=None, width=1):
        self.calls.append(("rect", tuple(box), fill, outline, width))

    def text(self, xy, text, color, stroke=False):
        self.calls.append(("text", tuple(xy), text, color))

    def of(self, kind: str) -> List[Tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == kind]

    def texts(self) -> List[str]:
        return [c[2] for c in self.of("text")]
