"""Test layout rendering."""

import pytest

from bookshelf_place.placer.block_placer import BlockPlacer
from bookshelf_place.render.layout import RenderConfig, render_layout


def test_render_png(small_circuit, tmp_path):
    output = render_layout(small_circuit, tmp_path / "layout.png")
    assert output.exists()
    assert output.stat().st_size > 0


def test_render_postscript(small_circuit, tmp_path):
    BlockPlacer().place(small_circuit)
    output = render_layout(small_circuit, tmp_path / "blockplacement.ps")
    assert output.read_bytes().startswith(b"%!PS")


def test_render_all_layers(small_circuit, tmp_path):
    BlockPlacer().place(small_circuit)
    config = RenderConfig(draw_nets=True, draw_labels=True, color_by="wirelength",
                          output=str(tmp_path / "full.png"))
    output = render_layout(small_circuit, config=config)
    assert output == tmp_path / "full.png"
    assert output.exists()


def test_render_unplaced_circuit(row_circuit, tmp_path):
    output = render_layout(row_circuit([2, 3]), tmp_path / "empty.png")
    assert output.exists()


def test_invalid_color_mode():
    with pytest.raises(ValueError):
        RenderConfig(color_by="rainbow")
