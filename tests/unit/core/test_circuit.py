"""Test the circuit data model."""

import math

import numpy as np
import pytest

from bookshelf_place.core.circuit import Cell, CellKind, Circuit, PinDirection, Row


def make_circuit():
    circuit = Circuit(name="test")
    circuit.add_cell("a", 4.0, 2.0)
    circuit.add_cell("b", 2.0, 2.0)
    circuit.add_cell("p", 1.0, 1.0, CellKind.TERMINAL)
    circuit.add_net("n1", [
        (0, PinDirection.OUTPUT, 0.0, 0.0),
        (1, PinDirection.INPUT, 0.5, -0.5),
    ])
    circuit.add_net("n2", [
        (1, PinDirection.OUTPUT, 0.0, 0.0),
        (2, PinDirection.INPUT, 0.0, 0.0),
    ], weight=3.0)
    return circuit


class TestCell:
    """Tests for Cell."""

    def test_negative_dimensions(self):
        with pytest.raises(ValueError):
            Cell(index=0, name="x", width=-1.0, height=1.0)

    def test_nan_dimensions(self):
        with pytest.raises(ValueError):
            Cell(index=0, name="x", width=math.nan, height=1.0)

    def test_invalid_orientation(self):
        with pytest.raises(ValueError):
            Cell(index=0, name="x", width=1.0, height=1.0, orientation="Q")

    def test_bbox(self):
        cell = Cell(index=0, name="x", width=3.0, height=2.0)
        assert cell.bbox().is_empty()
        cell.x, cell.y = 1.0, 1.0
        box = cell.bbox()
        assert (box.llx, box.lly, box.urx, box.ury) == (1.0, 1.0, 4.0, 3.0)
        assert cell.area == 6.0


class TestRow:
    """Tests for Row."""

    def test_extent(self):
        row = Row(index=0, y=0.0, height=12.0, site_width=1.0, site_spacing=2.0,
                  x_min=5.0, num_sites=10)
        assert row.x_max == 25.0
        assert row.width == 20.0

    def test_snap(self):
        row = Row(index=0, y=0.0, height=12.0, site_width=1.0, site_spacing=2.0,
                  x_min=5.0, num_sites=10)
        assert row.snap(0.0) == 5.0
        assert row.snap(5.0) == 5.0
        assert row.snap(6.0) == 7.0
        assert row.snap(7.0) == 7.0
        assert row.snap(7.0 + 1e-9) == 7.0

    def test_aligned(self):
        row = Row(index=0, y=0.0, height=12.0, site_width=1.0, site_spacing=2.0,
                  x_min=5.0, num_sites=10)
        assert row.is_aligned(9.0)
        assert not row.is_aligned(8.0)

    @pytest.mark.parametrize("kwargs", [
        {"height": 0.0},
        {"site_spacing": 0.0},
        {"num_sites": -1},
    ])
    def test_invalid_geometry(self, kwargs):
        values = dict(index=0, y=0.0, height=12.0, site_width=1.0, site_spacing=1.0,
                      x_min=0.0, num_sites=10)
        values.update(kwargs)
        with pytest.raises(ValueError):
            Row(**values)


class TestCircuit:
    """Tests for Circuit."""

    def test_indices_follow_insertion_order(self):
        circuit = make_circuit()
        assert [c.index for c in circuit.cells] == [0, 1, 2]
        assert circuit.cell_index("b") == 1
        assert circuit.net_index("n2") == 1
        assert circuit.cell_index("missing") is None

    def test_duplicate_names(self):
        circuit = make_circuit()
        with pytest.raises(ValueError):
            circuit.add_cell("a", 1.0, 1.0)
        with pytest.raises(ValueError):
            circuit.add_net("n1", [])

    def test_net_with_missing_cell(self):
        circuit = make_circuit()
        with pytest.raises(ValueError):
            circuit.add_net("n3", [(7, PinDirection.INPUT, 0.0, 0.0)])

    def test_pin_offsets_relative_to_lower_left(self):
        circuit = make_circuit()
        pin = circuit.pins[circuit.get_net("n1").pins[1]]
        assert (pin.dx, pin.dy) == (1.5, 0.5)

    def test_pins_registered_on_cells_and_nets(self):
        circuit = make_circuit()
        assert circuit.num_pins == 4
        assert circuit.get_cell("b").pins == [1, 2]
        assert circuit.get_net("n2").pins == [2, 3]
        assert circuit.get_net("n2").weight == 3.0
        assert [c.name for c in circuit.net_cells(circuit.get_net("n2"))] == ["b", "p"]

    def test_pin_location(self):
        circuit = make_circuit()
        pin = circuit.pins[0]
        assert circuit.pin_location(pin) is None
        circuit.set_position(0, 10.0, 20.0)
        assert circuit.pin_location(pin) == (12.0, 21.0)

    def test_set_cell_center(self):
        circuit = make_circuit()
        circuit.set_cell_center(0, 10.0, 10.0)
        cell = circuit.cells[0]
        assert (cell.x, cell.y) == (8.0, 9.0)

    def test_set_position_orientation(self):
        circuit = make_circuit()
        circuit.set_position(0, 0.0, 0.0, "FS")
        assert circuit.cells[0].orientation == "FS"
        with pytest.raises(ValueError):
            circuit.set_position(0, 0.0, 0.0, "up")

    def test_positions_array(self):
        circuit = make_circuit()
        circuit.set_position(1, 3.0, 4.0)
        pos = circuit.positions_array()
        assert pos.shape == (3, 2)
        assert np.isnan(pos[0]).all()
        assert tuple(pos[1]) == (3.0, 4.0)

    def test_snapshot_positions(self):
        circuit = make_circuit()
        circuit.set_position(0, 1.0, 2.0)
        circuit.snapshot_positions()
        circuit.set_position(0, 5.0, 6.0)
        assert circuit.refpos[0] == (1.0, 2.0)
        assert circuit.refpos[1] == (None, None)

    def test_cell_partitions(self):
        circuit = make_circuit()
        assert [c.name for c in circuit.movable_cells()] == ["a", "b"]
        assert [c.name for c in circuit.fixed_cells()] == ["p"]
        assert [c.name for c in circuit.terminals()] == ["p"]

    def test_areas_and_utilization(self):
        circuit = make_circuit()
        assert circuit.cell_area() == 12.0
        assert circuit.movable_area() == 12.0
        assert circuit.utilization() == 0.0
        circuit.add_row(y=0.0, height=2.0, site_width=1.0, site_spacing=1.0, x_min=0.0, num_sites=12)
        assert circuit.row_area() == 24.0
        assert circuit.utilization() == pytest.approx(0.5)

    def test_classify_macros(self):
        circuit = make_circuit()
        circuit.add_cell("m", 10.0, 8.0)
        assert circuit.classify_macros() == 0
        circuit.add_row(y=0.0, height=2.0, site_width=1.0, site_spacing=1.0, x_min=0.0, num_sites=12)
        assert circuit.classify_macros() == 1
        assert circuit.get_cell("m").is_macro
        assert not circuit.get_cell("p").is_macro

    def test_core_from_rows(self):
        circuit = make_circuit()
        circuit.add_row(y=0.0, height=2.0, site_width=1.0, site_spacing=1.0, x_min=0.0, num_sites=12)
        circuit.add_row(y=2.0, height=2.0, site_width=1.0, site_spacing=1.0, x_min=1.0, num_sites=12)
        core = circuit.core()
        assert (core.llx, core.lly, core.urx, core.ury) == (0.0, 0.0, 13.0, 4.0)

    def test_core_without_rows(self):
        circuit = Circuit()
        circuit.add_cell("a", 10.0, 10.0)
        core = circuit.core()
        assert core.dx() == pytest.approx(11.0)
        assert core.dy() == pytest.approx(11.0)

    def test_summary(self):
        summary = make_circuit().summary()
        assert summary["cells"] == 3
        assert summary["nets"] == 2
        assert summary["pins"] == 4
        assert summary["terminals"] == 1
        assert summary["standard_cells"] == 2
        assert summary["row_height"] == 0.0

    def test_validate(self):
        circuit = make_circuit()
        circuit.validate()
        circuit.cells[0].pins.append(3)
        with pytest.raises(ValueError):
            circuit.validate()

    def test_validate_name_map(self):
        circuit = make_circuit()
        circuit.cell_map["a"] = 1
        with pytest.raises(ValueError):
            circuit.validate()

    def test_mincore_keeps_center_and_aspect(self):
        circuit = make_circuit()
        circuit.add_row(y=0.0, height=2.0, site_width=1.0, site_spacing=1.0, x_min=0.0, num_sites=12)
        circuit.add_row(y=2.0, height=2.0, site_width=1.0, site_spacing=1.0, x_min=0.0, num_sites=12)
        box = circuit.mincore()
        assert (box.llx, box.lly, box.urx, box.ury) == pytest.approx((3.0, 1.0, 9.0, 3.0))
        assert box.area() == pytest.approx(circuit.cell_area())

    def test_leftcore_is_left_aligned(self):
        circuit = make_circuit()
        circuit.add_row(y=0.0, height=2.0, site_width=1.0, site_spacing=1.0, x_min=0.0, num_sites=12)
        circuit.add_row(y=2.0, height=2.0, site_width=1.0, site_spacing=1.0, x_min=0.0, num_sites=12)
        box = circuit.leftcore()
        assert (box.llx, box.lly, box.urx, box.ury) == pytest.approx((0.0, 0.0, 3.0, 4.0))

    def test_mincore_without_rows_matches_cell_area(self):
        circuit = Circuit()
        circuit.add_cell("a", 10.0, 10.0)
        box = circuit.mincore()
        assert box.area() == pytest.approx(100.0)
        assert box.llx == pytest.approx(0.5)
