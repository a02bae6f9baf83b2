"""Document-wide asset metadata: unit scale and up-axis convention."""

from __future__ import annotations

import logging
import math
from enum import Enum

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, Field

from ..core.errors import NumericFormatError
from ..xml.reader import ElementReader

logger = logging.getLogger(__name__)


class UpAxis(str, Enum):
    """Axis pointing up in the authored document."""

    X = "X"
    Y = "Y"
    Z = "Z"

    @classmethod
    def from_tag(cls, value: str) -> UpAxis | None:
        """Map ``X_UP``/``Y_UP``/``Z_UP`` to an axis, None if unrecognised."""
        value = value.strip().upper()
        if len(value) == 4 and value.endswith("_UP") and value[0] in "XYZ":
            return cls(value[0])
        return None


class AssetInfo(BaseModel):
    """Global coordinate conventions of the document.

    Attributes:
        unit_size: Size of one document unit in meters
        up_axis: Which axis is "up"
    """

    unit_size: float = Field(
        default=1.0, gt=0, allow_inf_nan=False, description="Meters per unit"
    )
    up_axis: UpAxis = Field(default=UpAxis.Y, description="Up-axis convention")

    model_config = {"frozen": True}

    def to_y_up_matrix(self) -> NDArray[np.float64]:
        """Rotation converting this document's axes to a Y-up frame."""
        m = np.eye(4, dtype=np.float64)
        if self.up_axis is UpAxis.Z:
            # Z up -> Y up: rotate -90 degrees about X
            m[1, 1], m[1, 2] = 0.0, 1.0
            m[2, 1], m[2, 2] = -1.0, 0.0
        elif self.up_axis is UpAxis.X:
            # X up -> Y up: rotate 90 degrees about Z
            m[0, 0], m[0, 1] = 0.0, -1.0
            m[1, 0], m[1, 1] = 1.0, 0.0
        return m


def read_asset_info(reader: ElementReader) -> AssetInfo:
    """Read an ``<asset>`` block.

    Every block starts from the defaults, so a later block replaces an
    earlier one instead of merging with it.

    Raises:
        NumericFormatError: If ``<unit meter>`` is not a positive finite number
    """
    unit_size = 1.0
    up_axis = UpAxis.Y

    for child in reader.children("asset"):
        if child == "unit":
            raw = reader.optional_attribute("meter")
            if raw is not None:
                try:
                    unit_size = float(raw)
                except ValueError:
                    raise reader.error(
                        NumericFormatError, f"Invalid unit size {raw!r}"
                    ) from None
                if not math.isfinite(unit_size) or unit_size <= 0:
                    raise reader.error(
                        NumericFormatError,
                        f"Unit size must be a positive finite number, got {raw!r}",
                    )
            reader.skip_element()

        elif child == "up_axis":
            content = reader.text_content()
            axis = UpAxis.from_tag(content)
            if axis is None:
                logger.warning("Unknown up_axis %r, assuming Y_UP", content.strip())
                axis = UpAxis.Y
            up_axis = axis
            reader.verify_closing("up_axis")

        else:
            reader.skip_element()

    info = AssetInfo(unit_size=unit_size, up_axis=up_axis)
    logger.debug("Asset info: %s", info)
    return info
