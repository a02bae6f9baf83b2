"""Tests for asset info reading."""

import logging

import numpy as np
import pytest
from pydantic import ValidationError

from daeparse.core.errors import NumericFormatError
from daeparse.scene.asset import AssetInfo, UpAxis, read_asset_info
from daeparse.scene.transform import apply_to_points


class TestAssetInfo:
    """Test the AssetInfo model."""

    def test_defaults(self):
        info = AssetInfo()
        assert info.unit_size == 1.0
        assert info.up_axis is UpAxis.Y

    def test_frozen(self):
        info = AssetInfo()
        with pytest.raises(ValidationError):
            info.unit_size = 2.0

    def test_unit_size_positive(self):
        with pytest.raises(ValidationError):
            AssetInfo(unit_size=0.0)

    @pytest.mark.parametrize(
        "tag, axis",
        [("X_UP", UpAxis.X), ("Y_UP", UpAxis.Y), ("Z_UP", UpAxis.Z), (" z_up ", UpAxis.Z)],
    )
    def test_up_axis_from_tag(self, tag, axis):
        assert UpAxis.from_tag(tag) is axis

    def test_up_axis_from_unknown_tag(self):
        assert UpAxis.from_tag("W_UP") is None
        assert UpAxis.from_tag("UP") is None

    def test_z_up_conversion(self):
        m = AssetInfo(up_axis=UpAxis.Z).to_y_up_matrix()
        result = apply_to_points(m, np.array([[0.0, 0.0, 1.0]]))
        np.testing.assert_array_almost_equal(result[0], [0, 1, 0])

    def test_x_up_conversion(self):
        m = AssetInfo(up_axis=UpAxis.X).to_y_up_matrix()
        result = apply_to_points(m, np.array([[1.0, 0.0, 0.0]]))
        np.testing.assert_array_almost_equal(result[0], [0, 1, 0])

    def test_y_up_conversion_is_identity(self):
        np.testing.assert_array_equal(AssetInfo().to_y_up_matrix(), np.eye(4))


class TestReadAssetInfo:
    """Test reading <asset> blocks."""

    def test_unit_and_up_axis(self, make_reader):
        reader = make_reader('<asset><up_axis>Z_UP</up_axis><unit meter="0.01"/></asset>')
        info = read_asset_info(reader)

        assert info.up_axis is UpAxis.Z
        assert info.unit_size == pytest.approx(0.01)
        assert reader.is_element_end("asset")

    def test_empty_asset_uses_defaults(self, make_reader):
        reader = make_reader("<asset/>")
        assert read_asset_info(reader) == AssetInfo()

    def test_unit_without_meter(self, make_reader):
        reader = make_reader('<asset><unit name="inch"/></asset>')
        assert read_asset_info(reader).unit_size == 1.0

    def test_other_children_skipped(self, make_reader):
        reader = make_reader(
            "<asset>"
            "<contributor><author>a</author><authoring_tool>t</authoring_tool></contributor>"
            "<created>2008-01-01T00:00:00Z</created>"
            "<up_axis>X_UP</up_axis>"
            "</asset>"
        )
        assert read_asset_info(reader).up_axis is UpAxis.X

    def test_unknown_up_axis_falls_back(self, make_reader, caplog):
        reader = make_reader("<asset><up_axis>SIDEWAYS</up_axis></asset>")
        with caplog.at_level(logging.WARNING, logger="daeparse.scene.asset"):
            info = read_asset_info(reader)
        assert info.up_axis is UpAxis.Y
        assert "SIDEWAYS" in caplog.text

    def test_invalid_unit(self, make_reader):
        reader = make_reader('<asset><unit meter="big"/></asset>')
        with pytest.raises(NumericFormatError):
            read_asset_info(reader)

    def test_negative_unit(self, make_reader):
        reader = make_reader('<asset><unit meter="-1"/></asset>')
        with pytest.raises(NumericFormatError):
            read_asset_info(reader)

    @pytest.mark.parametrize("meter", ["nan", "inf", "-inf"])
    def test_non_finite_unit(self, make_reader, meter):
        reader = make_reader(f'<asset><unit meter="{meter}"/></asset>')
        with pytest.raises(NumericFormatError, match="finite"):
            read_asset_info(reader)

    def test_model_rejects_non_finite_unit(self):
        with pytest.raises(ValidationError):
            AssetInfo(unit_size=float("inf"))
