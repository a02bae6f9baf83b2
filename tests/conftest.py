"""Shared fixtures for daeparse tests."""

from pathlib import Path

import pytest

from daeparse.xml.reader import ElementReader
from daeparse.xml.tokens import ExpatTokenSource


SAMPLE_DOCUMENT = """<?xml version="1.0" encoding="utf-8"?>
<COLLADA xmlns="http://www.collada.org/2005/11/COLLADASchema" version="1.4.1">
  <asset>
    <contributor><author>tester</author></contributor>
    <unit name="centimeter" meter="0.01"/>
    <up_axis>Z_UP</up_axis>
  </asset>
  <library_cameras>
    <camera id="cam"><optics><technique_common/></optics></camera>
  </library_cameras>
  <library_geometries>
    <geometry id="box-mesh" name="Box">
      <mesh>
        <source id="box-positions">
          <float_array id="box-positions-array" count="12">
            0 0 0  1 0 0  1 1 0  0 1 0
          </float_array>
          <technique_common>
            <accessor source="#box-positions-array" count="4" stride="3">
              <param name="X" type="float"/>
              <param name="Y" type="float"/>
              <param name="Z" type="float"/>
            </accessor>
          </technique_common>
        </source>
        <vertices id="box-vertices">
          <input semantic="POSITION" source="#box-positions"/>
        </vertices>
        <triangles count="2">
          <input semantic="VERTEX" source="#box-vertices" offset="0"/>
          <p>0 1 2 0 2 3</p>
        </triangles>
      </mesh>
    </geometry>
  </library_geometries>
  <library_visual_scenes>
    <visual_scene id="Scene" name="Scene">
      <node id="Box" name="Box">
        <translate sid="location">1 2 3</translate>
        <rotate sid="rotationY">0 1 0 90</rotate>
        <instance_geometry url="#box-mesh">
          <bind_material><technique_common/></bind_material>
        </instance_geometry>
        <node id="Child" name="Child">
          <scale>2 2 2</scale>
        </node>
      </node>
    </visual_scene>
  </library_visual_scenes>
  <scene>
    <instance_visual_scene url="#Scene"/>
  </scene>
</COLLADA>
"""


@pytest.fixture
def sample_document() -> str:
    return SAMPLE_DOCUMENT


@pytest.fixture
def sample_path(tmp_path: Path) -> Path:
    path = tmp_path / "sample.dae"
    path.write_text(SAMPLE_DOCUMENT, encoding="utf-8")
    return path


@pytest.fixture
def make_reader():
    """Build an ElementReader positioned on the first element named ``at``.

    Without ``at`` the reader is positioned on the document element.
    """

    def _make(xml: str, at: str | None = None, chunk_size: int = 64 * 1024) -> ElementReader:
        reader = ElementReader(ExpatTokenSource.from_string(xml, chunk_size=chunk_size))
        while reader.read():
            if reader.is_element(at):
                return reader
        raise AssertionError(f"element <{at}> not found")

    return _make
