"""Tests for the grid placement engine."""

import pytest
from pydantic import ValidationError

from floorplan.models.room import Room, Table, TableShape
from floorplan.services.placement import engine
from floorplan.services.placement.models import (
    CollisionPolicy,
    OccupiedCellError,
    OutOfBoundsError,
)


@pytest.fixture
def room():
    """A 10x8 room."""
    return Room(id="room-1", restaurant_id="resto-1", name="Main", grid_width=10, grid_height=8)


def make_table(table_id, x, y, capacity=2, shape=TableShape.SQUARE):
    width, height = engine.footprint_for(capacity, shape)
    return Table(
        id=table_id,
        room_id="room-1",
        table_number=table_id,
        capacity=capacity,
        shape=shape,
        position_x=x,
        position_y=y,
        width=width,
        height=height,
    )


def test_can_place_is_false_exactly_on_anchor_cells(room):
    """Every in-bounds cell is free unless a table is anchored there."""
    tables = [make_table("a", 1, 1, capacity=8), make_table("b", 4, 2)]
    anchors = {t.anchor for t in tables}

    for x in range(room.grid_width):
        for y in range(room.grid_height):
            assert engine.can_place(room, tables, x, y) == ((x, y) not in anchors)


def test_can_place_rejects_cells_outside_the_grid(room):
    """Cells outside [0, width) x [0, height) are never placeable."""
    for x, y in [(-1, 0), (0, -1), (10, 0), (0, 8), (10, 8)]:
        assert not engine.can_place(room, [], x, y)


def test_footprint_tiers():
    """Known capacities map to the configured footprints."""
    assert engine.footprint_for(1, TableShape.SQUARE) == (1, 1)
    assert engine.footprint_for(2, TableShape.ROUND) == (1, 1)
    assert engine.footprint_for(4, TableShape.SQUARE) == (2, 2)
    assert engine.footprint_for(4, TableShape.RECTANGLE) == (2, 1)
    assert engine.footprint_for(6, TableShape.RECTANGLE) == (3, 1)
    assert engine.footprint_for(8, TableShape.ROUND) == (3, 3)
    assert engine.footprint_for(8, "rectangle") == (3, 2)
    assert engine.footprint_for(20, TableShape.SQUARE) == (3, 3)
    assert engine.footprint_for(20, TableShape.RECTANGLE) == (4, 2)


@pytest.mark.parametrize("shape", list(TableShape))
def test_footprint_never_shrinks_as_capacity_grows(shape):
    """Width and height are non-decreasing in capacity for a fixed shape."""
    previous = (0, 0)
    for capacity in range(1, 21):
        width, height = engine.footprint_for(capacity, shape)
        assert width >= previous[0]
        assert height >= previous[1]
        previous = (width, height)


def test_rectangles_are_wider_than_tall_beyond_four_seats():
    for capacity in range(5, 21):
        width, height = engine.footprint_for(capacity, TableShape.RECTANGLE)
        assert width > height


def test_place_appends_table_with_computed_footprint(room):
    """Placing recomputes the footprint and returns the new id."""
    existing = [make_table("a", 0, 0)]
    new = make_table("b", 5, 5, capacity=4).model_copy(update={"width": 1, "height": 1})

    tables, table_id = engine.place(room, existing, new)

    assert table_id == "b"
    assert [t.id for t in tables] == ["a", "b"]
    assert (tables[1].width, tables[1].height) == (2, 2)
    assert existing == [make_table("a", 0, 0)]


def test_place_on_taken_anchor_fails(room):
    """A second table on the same anchor is rejected."""
    tables, _ = engine.place(room, [], make_table("a", 3, 3))

    with pytest.raises(OccupiedCellError) as excinfo:
        engine.place(room, tables, make_table("b", 3, 3))

    assert excinfo.value.occupant_id == "a"
    assert (excinfo.value.x, excinfo.value.y) == (3, 3)


def test_place_outside_grid_fails(room):
    with pytest.raises(OutOfBoundsError):
        engine.place(room, [], make_table("a", 10, 0))
    with pytest.raises(OutOfBoundsError):
        engine.place(room, [], make_table("a", 0, -1))


def test_place_then_remove_restores_previous_tables(room):
    """Removing a freshly placed table gives back the original collection."""
    before = [make_table("a", 0, 0), make_table("b", 2, 2, capacity=6)]

    tables, table_id = engine.place(room, before, make_table("c", 7, 7))

    assert engine.remove(tables, table_id) == before


def test_move_clamps_into_the_grid(room):
    tables = [make_table("a", 2, 3)]

    moved = engine.move(room, tables, "a", 11, 3)
    assert moved[0].anchor == (9, 3)

    moved = engine.move(room, tables, "a", -5, 20)
    assert moved[0].anchor == (0, 7)


def test_move_onto_another_table_is_ignored(room):
    """A move onto a taken cell leaves the table where it was."""
    tables = [make_table("a", 2, 3), make_table("b", 9, 3)]

    moved = engine.move(room, tables, "a", 12, 3)

    assert moved == tables
    assert engine.move(room, moved, "a", 12, 3) == tables


def test_move_unknown_table_is_a_no_op(room):
    tables = [make_table("a", 2, 3)]

    assert engine.move(room, tables, "missing", 0, 0) == tables


def test_remove_unknown_table_is_a_no_op():
    tables = [make_table("a", 2, 3)]

    assert engine.remove(tables, "missing") == tables


def test_update_recomputes_footprint():
    tables = [make_table("a", 2, 3)]

    updated = engine.update(tables, "a", {"capacity": 8, "shape": "rectangle"})

    assert updated[0].shape is TableShape.RECTANGLE
    assert (updated[0].width, updated[0].height) == (3, 2)
    assert updated[0].anchor == (2, 3)


def test_update_refuses_position_fields():
    """Positions only change through move."""
    with pytest.raises(ValueError, match="cannot be edited"):
        engine.update([make_table("a", 2, 3)], "a", {"position_x": 4})


def test_update_validates_values():
    with pytest.raises(ValidationError):
        engine.update([make_table("a", 2, 3)], "a", {"capacity": 0})


def test_update_unknown_table_is_a_no_op():
    tables = [make_table("a", 2, 3)]

    assert engine.update(tables, "missing", {"capacity": 4}) == tables


def test_footprint_policy_checks_full_rectangles(room):
    """Overlapping footprints collide only under the footprint policy."""
    tables = [make_table("big", 0, 0, capacity=8)]  # covers (0..2, 0..2)

    assert engine.can_place(room, tables, 1, 1)
    assert not engine.can_place(
        room, tables, 1, 1, policy=CollisionPolicy.FOOTPRINT
    )
    assert engine.can_place(room, tables, 3, 0, policy=CollisionPolicy.FOOTPRINT)
    assert engine.occupant_at(tables, 2, 2, CollisionPolicy.FOOTPRINT).id == "big"
    assert engine.occupant_at(tables, 2, 2) is None


def test_footprint_policy_rejects_overlapping_moves(room):
    tables = [make_table("big", 0, 0, capacity=8), make_table("small", 6, 6, capacity=4)]

    moved = engine.move(room, tables, "small", 2, 2, CollisionPolicy.FOOTPRINT)
    assert moved == tables

    moved = engine.move(room, tables, "small", 3, 3, CollisionPolicy.FOOTPRINT)
    assert engine.find(moved, "small").anchor == (3, 3)


def test_tables_outside_a_smaller_grid(room):
    tables = [make_table("a", 2, 3), make_table("b", 9, 7)]
    smaller = room.model_copy(update={"grid_width": 6, "grid_height": 6})

    assert [t.id for t in engine.tables_outside(smaller, tables)] == ["b"]
    assert engine.tables_outside(room, tables) == []


def test_round_table_scenario(room):
    """Place, collide and clamp on an empty 10x8 room."""
    tables, first_id = engine.place(
        room, [], make_table("first", 2, 3, capacity=2, shape=TableShape.ROUND)
    )
    assert (tables[0].width, tables[0].height) == (1, 1)

    with pytest.raises(OccupiedCellError):
        engine.place(room, tables, make_table("second", 2, 3, capacity=4))

    tables = engine.move(room, tables, first_id, 11, 3)
    assert engine.find(tables, first_id).anchor == (9, 3)


def test_update_refuses_footprint_growing_over_a_neighbour():
    """Under the footprint policy a bigger table may not cover another one."""
    tables = [make_table("a", 0, 0), make_table("b", 1, 1)]

    with pytest.raises(OccupiedCellError) as excinfo:
        engine.update(tables, "a", {"capacity": 8}, CollisionPolicy.FOOTPRINT)

    assert excinfo.value.occupant_id == "b"
    assert engine.update(tables, "a", {"capacity": 8})[0].width == 3


def test_update_may_grow_into_free_space_under_footprint_policy():
    tables = [make_table("a", 0, 0), make_table("b", 5, 5)]

    updated = engine.update(tables, "a", {"capacity": 8}, CollisionPolicy.FOOTPRINT)

    assert (updated[0].width, updated[0].height) == (3, 3)
    assert not any(
        engine.occupant_at([updated[0]], t.position_x, t.position_y, CollisionPolicy.FOOTPRINT)
        for t in updated[1:]
    )
