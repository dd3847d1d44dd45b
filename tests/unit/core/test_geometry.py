"""Test bounding boxes."""

from bookshelf_place.core.geometry import BBox


def test_new_box_is_empty():
    box = BBox()
    assert box.is_empty()
    assert box.dx() == 0.0
    assert box.area() == 0.0


def test_add_point_grows_box():
    box = BBox()
    box.add_point(1.0, 2.0)
    assert not box.is_empty()
    assert box.area() == 0.0
    box.add_point(-1.0, 5.0)
    assert (box.llx, box.lly, box.urx, box.ury) == (-1.0, 2.0, 1.0, 5.0)
    assert box.dx() == 2.0
    assert box.dy() == 3.0


def test_expand_ignores_empty_box():
    box = BBox.from_corners(0.0, 0.0, 1.0, 1.0)
    box.expand(BBox())
    assert (box.llx, box.lly, box.urx, box.ury) == (0.0, 0.0, 1.0, 1.0)
    box.expand(BBox.from_corners(2.0, 2.0, 3.0, 4.0))
    assert box.area() == 12.0


def test_overlaps():
    a = BBox.from_corners(0.0, 0.0, 2.0, 2.0)
    assert a.overlaps(BBox.from_corners(1.0, 1.0, 3.0, 3.0))
    # shared edge only
    assert not a.overlaps(BBox.from_corners(2.0, 0.0, 4.0, 2.0))
    assert not a.overlaps(BBox())
