"""Typed values flowing through a single nutrition analysis."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass, field
from typing import Optional, Union

_DATA_URL_PATTERN = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[\w.+-]+=[^;,]*)*)"
    r"(?P<base64>;base64)?,(?P<payload>.*)$",
    re.DOTALL,
)
DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"


@dataclass(frozen=True, slots=True)
class ImageBlob:
    """Raw image bytes supplied by the user for one analysis."""

    data: bytes = field(repr=False)
    mime_type: str = DEFAULT_IMAGE_MIME_TYPE
    filename: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.data:
            raise ValueError("image data is empty")

    def to_data_url(self) -> str:
        """Return the inline ``data:`` URL encoding of the image."""

        payload = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{payload}"

    @classmethod
    def from_data_url(
        cls, data_url: str, *, filename: str | None = None
    ) -> "ImageBlob":
        """Decode a base64 ``data:`` URL such as a browser FileReader produces."""

        match = _DATA_URL_PATTERN.match((data_url or "").strip())
        if match is None:
            raise ValueError("image is not a data URL")
        if not match.group("base64"):
            raise ValueError("image data URL must be base64 encoded")

        try:
            data = base64.b64decode(match.group("payload"), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("image data URL has invalid base64 payload") from exc

        mime_type = match.group("mime") or DEFAULT_IMAGE_MIME_TYPE
        return cls(data=data, mime_type=mime_type, filename=filename)


@dataclass(frozen=True, slots=True)
class HostedImageRef:
    """Location the vision model reads the image from.

    ``remote`` is True for a URL served by the image host and False when the
    image is inlined as a ``data:`` URL.
    """

    url: str
    remote: bool


@dataclass(frozen=True, slots=True)
class NutritionItem:
    name: str
    calories: float = 0.0
    protein_grams: float = 0.0
    carbs_grams: float = 0.0
    fats_grams: float = 0.0


@dataclass(frozen=True, slots=True)
class NutritionTotals:
    """Field-wise sum of a list of nutrition items."""

    calories: float
    protein_grams: float
    carbs_grams: float
    fats_grams: float


@dataclass(frozen=True, slots=True)
class NoFood:
    """The image holds no recognizable food, or the answer was unusable."""

    has_food = False


@dataclass(frozen=True, slots=True)
class FoodItems:
    """One or more food items detected in the image, in model order."""

    items: tuple[NutritionItem, ...]

    has_food = True

    def __post_init__(self) -> None:
        if not self.items:
            raise ValueError("FoodItems requires at least one item; use NoFood")

    def totals(self) -> NutritionTotals:
        return NutritionTotals(
            calories=sum(item.calories for item in self.items),
            protein_grams=sum(item.protein_grams for item in self.items),
            carbs_grams=sum(item.carbs_grams for item in self.items),
            fats_grams=sum(item.fats_grams for item in self.items),
        )


AnalysisResult = Union[NoFood, FoodItems]

NO_FOOD = NoFood()
