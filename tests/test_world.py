"""
Tests for the tile world model and its primitives.
"""
import numpy as np
import pytest

from streetbuilder.errors import (
    CannotPut,
    CannotWalk,
    NoContent,
    NotEnoughContentInBackPack,
    NotEnoughEnergy,
    NotEnoughSpace,
    NotOnTeleport,
    OutOfBounds,
    WrongContent,
)
from streetbuilder.world import (
    UNKNOWN,
    BackPack,
    Content,
    Direction,
    Energy,
    EventKind,
    Robot,
    TileType,
    World,
    destroy,
    discover_tiles,
    generate_world,
    go,
    put,
    robot_map,
    robot_view,
    teleport,
)


@pytest.fixture
def small_world() -> World:
    return World.from_rows([
        "....",
        ".r#.",
        ".t..",
        "..=.",
    ])


# =============================================================================
# CONSTRUCTION
# =============================================================================


class TestConstruction:
    def test_from_rows(self, small_world):
        assert small_world.size == 4
        rock = small_world.tile((1, 1))
        assert rock.tile_type == TileType.GRASS
        assert rock.content == Content.ROCK
        assert rock.amount == 1
        assert small_world.tile((1, 2)).tile_type == TileType.WALL
        assert small_world.tile((3, 2)).tile_type == TileType.STREET
        assert not small_world.discovered.any()

    def test_from_rows_rejects_unknown_characters(self):
        with pytest.raises(ValueError, match="Unknown map character"):
            World.from_rows(["..", ".?"])

    def test_from_rows_rejects_ragged_rows(self):
        with pytest.raises(ValueError):
            World.from_rows(["...", "..", "..."])

    def test_grid_must_be_square(self):
        with pytest.raises(ValueError, match="square"):
            World(np.zeros((2, 3)))

    def test_tile_out_of_bounds(self, small_world):
        with pytest.raises(OutOfBounds):
            small_world.tile((4, 0))

    def test_walkability(self, small_world):
        assert small_world.tile((0, 0)).walkable
        assert not small_world.tile((1, 1)).walkable  # rock
        assert not small_world.tile((1, 2)).walkable  # wall
        assert small_world.tile((3, 2)).walkable

    def test_render(self, small_world):
        robot = Robot(coordinate=(0, 0))
        assert small_world.render(robot).splitlines() == ["@...", ".r#.", ".t..", "..=."]
        small_world.reveal((0, 0))
        known = small_world.render(known_only=True).splitlines()
        assert known[0] == "..??"
        assert known[3] == "????"


# =============================================================================
# ROBOT STATE
# =============================================================================


class TestRobotState:
    def test_energy_consume_and_recharge(self):
        energy = Energy(10, 20)
        energy.consume(4)
        assert energy.level == 6
        assert energy.recharge(100) == 14
        assert energy.level == 20

    def test_energy_refuses_overdraft(self):
        energy = Energy(3, 20)
        with pytest.raises(NotEnoughEnergy):
            energy.consume(4)
        assert energy.level == 3

    def test_backpack_partial_add(self):
        backpack = BackPack(size=2)
        assert backpack.add(Content.ROCK, 5) == 2
        assert backpack.free_space == 0
        with pytest.raises(NotEnoughSpace):
            backpack.add(Content.TREE, 1)

    def test_backpack_remove(self):
        backpack = BackPack()
        backpack.add(Content.ROCK, 2)
        backpack.remove(Content.ROCK, 2)
        assert backpack.count(Content.ROCK) == 0
        with pytest.raises(NotEnoughContentInBackPack):
            backpack.remove(Content.ROCK, 1)

    def test_direction_helpers(self):
        assert Direction.NORTH.opposite == Direction.SOUTH
        assert Direction.EAST.step((2, 2)) == (2, 3)
        assert Direction.between((2, 2), (1, 2)) == Direction.NORTH
        assert Direction.between((2, 2), (1, 1)) is None
        assert Direction.from_name("west") == Direction.WEST
        with pytest.raises(ValueError):
            Direction.from_name("up")

    def test_content_from_name(self):
        assert Content.from_name("Rock") == Content.ROCK
        with pytest.raises(ValueError):
            Content.from_name("gold")


# =============================================================================
# PRIMITIVES
# =============================================================================


class TestVision:
    def test_robot_map_hides_undiscovered(self, small_world):
        small_world.discovered[0, 0] = True
        snapshot = robot_map(small_world)
        assert snapshot.types[0, 0] == TileType.GRASS
        assert snapshot.types[1, 1] == UNKNOWN
        assert snapshot.contents[1, 1] == UNKNOWN
        assert snapshot.tile((1, 1)) is None
        assert snapshot.positions_with(Content.ROCK) == []

    def test_snapshot_is_a_copy(self, small_world):
        small_world.discovered[:] = True
        snapshot = robot_map(small_world)
        small_world.contents[1, 1] = Content.NONE
        assert snapshot.positions_with(Content.ROCK) == [(1, 1)]

    def test_robot_view_reveals_neighbourhood(self, small_world):
        robot = Robot(coordinate=(0, 0))
        view = robot_view(robot, small_world)
        assert view[0] == [None, None, None]
        assert view[2][2].content == Content.ROCK
        assert small_world.discovered[1, 1]
        assert not small_world.discovered[2, 2]
        assert robot.energy.level == 1000

    def test_discover_charges_only_fresh_tiles(self, small_world):
        robot = Robot(coordinate=(0, 0))
        tiles = discover_tiles(robot, small_world, [(0, 0), (0, 1), (9, 9)])
        assert set(tiles) == {(0, 0), (0, 1)}
        assert robot.energy.level == 994

        discover_tiles(robot, small_world, [(0, 0), (0, 1)])
        assert robot.energy.level == 994

    def test_discover_is_all_or_nothing(self, small_world):
        robot = Robot(coordinate=(0, 0), energy=Energy(5, 100))
        with pytest.raises(NotEnoughEnergy):
            discover_tiles(robot, small_world, [(0, 0), (0, 1)])
        assert not small_world.discovered.any()
        assert robot.energy.level == 5


class TestMovement:
    def test_go_moves_and_charges(self, small_world):
        robot = Robot(coordinate=(0, 0))
        assert go(robot, small_world, Direction.EAST) == (0, 1)
        assert robot.energy.level == 998
        assert small_world.discovered[1, 2]
        moved = [e for e in small_world.events if e.kind == EventKind.MOVED]
        assert moved[0].data == {"origin": (0, 0), "target": (0, 1)}

    def test_street_is_cheapest(self, small_world):
        robot = Robot(coordinate=(3, 1))
        go(robot, small_world, Direction.EAST)
        assert robot.energy.level == 999

    @pytest.mark.parametrize(
        "start, direction, error",
        [
            ((0, 0), Direction.NORTH, OutOfBounds),
            ((0, 1), Direction.SOUTH, CannotWalk),  # rock
            ((0, 2), Direction.SOUTH, CannotWalk),  # wall
        ],
    )
    def test_go_refused(self, small_world, start, direction, error):
        robot = Robot(coordinate=start)
        with pytest.raises(error):
            go(robot, small_world, direction)
        assert robot.coordinate == start
        assert robot.energy.level == 1000

    def test_go_without_energy(self, small_world):
        robot = Robot(coordinate=(0, 0), energy=Energy(1, 100))
        with pytest.raises(NotEnoughEnergy):
            go(robot, small_world, Direction.EAST)
        assert robot.coordinate == (0, 0)

    def test_teleport(self):
        world = World.from_rows(["T..T", "....", "....", "...."])
        world.discovered[0, 3] = True
        robot = Robot(coordinate=(0, 0))
        assert teleport(robot, world, (0, 3)) == (0, 3)
        assert robot.energy.level == 970

    def test_teleport_requires_known_target(self):
        world = World.from_rows(["T..T", "....", "....", "...."])
        robot = Robot(coordinate=(0, 0))
        with pytest.raises(CannotWalk):
            teleport(robot, world, (0, 3))

    def test_teleport_requires_teleport_tile(self):
        world = World.from_rows(["T..T", "....", "....", "...."])
        world.discovered[:] = True
        robot = Robot(coordinate=(1, 1))
        with pytest.raises(NotOnTeleport):
            teleport(robot, world, (0, 3))


class TestDestroyAndPut:
    def test_destroy_into_backpack(self, small_world):
        robot = Robot(coordinate=(0, 1))
        assert destroy(robot, small_world, Direction.SOUTH, expected=Content.ROCK) == 1
        assert robot.backpack.count(Content.ROCK) == 1
        assert small_world.tile((1, 1)).content == Content.NONE
        assert robot.energy.level == 997

    def test_destroy_own_tile(self):
        world = World.from_rows(["g.", ".."])
        robot = Robot(coordinate=(0, 0))
        destroy(robot, world, None)
        assert robot.backpack.count(Content.GARBAGE) == 1

    def test_destroy_wrong_content(self, small_world):
        robot = Robot(coordinate=(2, 0))
        with pytest.raises(WrongContent):
            destroy(robot, small_world, Direction.EAST, expected=Content.ROCK)
        assert small_world.tile((2, 1)).content == Content.TREE

    def test_destroy_empty_tile(self, small_world):
        robot = Robot(coordinate=(0, 0))
        with pytest.raises(NoContent):
            destroy(robot, small_world, Direction.EAST)

    def test_destroy_with_full_backpack(self, small_world):
        robot = Robot(coordinate=(0, 1), backpack=BackPack(size=1))
        robot.backpack.add(Content.COIN, 1)
        with pytest.raises(NotEnoughSpace):
            destroy(robot, small_world, Direction.SOUTH)
        assert robot.energy.level == 1000

    def test_put_rock_paves_street(self, small_world):
        robot = Robot(coordinate=(0, 0))
        robot.backpack.add(Content.ROCK, 3)
        assert put(robot, small_world, Content.ROCK, 1, Direction.EAST) == 1
        assert small_world.tile((0, 1)).tile_type == TileType.STREET
        assert small_world.tile((0, 1)).content == Content.NONE
        assert robot.backpack.count(Content.ROCK) == 2
        assert robot.energy.level == 998
        assert small_world.discovered[0, 1]

    def test_put_other_content_is_laid(self, small_world):
        robot = Robot(coordinate=(0, 0))
        robot.backpack.add(Content.COIN, 2)
        put(robot, small_world, Content.COIN, 2, Direction.SOUTH)
        assert small_world.tile((1, 0)).content == Content.COIN
        assert small_world.tile((1, 0)).amount == 2

    def test_put_on_street_refused(self, small_world):
        robot = Robot(coordinate=(3, 1))
        robot.backpack.add(Content.ROCK, 1)
        with pytest.raises(CannotPut):
            put(robot, small_world, Content.ROCK, 1, Direction.EAST)
        assert robot.backpack.count(Content.ROCK) == 1
        assert robot.energy.level == 1000

    def test_put_without_material(self, small_world):
        robot = Robot(coordinate=(0, 0))
        with pytest.raises(NotEnoughContentInBackPack):
            put(robot, small_world, Content.ROCK, 1, Direction.EAST)


# =============================================================================
# GENERATION
# =============================================================================


class TestGeneration:
    def test_same_seed_same_world(self):
        a, spawn_a = generate_world(16, seed=5)
        b, spawn_b = generate_world(16, seed=5)
        assert np.array_equal(a.types, b.types)
        assert np.array_equal(a.contents, b.contents)
        assert spawn_a == spawn_b

    def test_spawn_is_empty_grass(self):
        world, spawn = generate_world(12, seed=1, rock_density=1.0)
        tile = world.tile(spawn)
        assert tile.tile_type == TileType.GRASS
        assert tile.content == Content.NONE

    def test_contents_only_on_walkable_terrain(self):
        world, _ = generate_world(24, seed=2, rock_density=0.3)
        rocks = world.contents == Content.ROCK
        for tile_type in np.unique(world.types[rocks]):
            assert TileType(int(tile_type)).walkable

    def test_recharge_emits_event(self):
        world, spawn = generate_world(8, seed=0, energy_recharge=7)
        robot = Robot(coordinate=spawn, energy=Energy(0, 100))
        assert world.recharge(robot) == 7
        assert world.drain_events()[0].kind == EventKind.ENERGY_RECHARGED
        assert world.events == []
