"""
Tests for the incremental ring scanner.
"""
import pytest

from streetbuilder.agent.interfaces import ScanStatus
from streetbuilder.agent.scanner import AreaScanner, ring
from streetbuilder.world import Content, Energy, Robot, TileType, World


def is_rock(tile):
    return tile.content == Content.ROCK


@pytest.fixture
def rocky_world() -> World:
    return World.from_rows([
        ".....",
        ".r...",
        ".....",
        ".....",
        "....r",
    ])


class TestRing:
    def test_center(self):
        assert ring((2, 2), 0) == [(2, 2)]

    @pytest.mark.parametrize("distance, count", [(1, 8), (2, 16), (3, 24)])
    def test_ring_sizes(self, distance, count):
        cells = ring((5, 5), distance)
        assert len(cells) == count
        assert len(set(cells)) == count
        assert all(max(abs(r - 5), abs(c - 5)) == distance for r, c in cells)


class TestAreaScanner:
    def test_one_ring_per_call(self, rocky_world):
        robot = Robot(coordinate=(2, 2))
        scanner = AreaScanner(robot, rocky_world)

        assert scanner.scan((2, 2), 1, is_rock).status == ScanStatus.SCANNING
        assert rocky_world.discovered[2, 2]
        assert not rocky_world.discovered[1, 1]

        result = scanner.scan((2, 2), 1, is_rock)
        assert result.status == ScanStatus.COMPLETE
        assert rocky_world.discovered[1:4, 1:4].all()
        assert robot.energy.level == 1000 - 9 * 3

    def test_failed_scan_reports_radius(self, rocky_world):
        scanner = AreaScanner(Robot(coordinate=(2, 3)), rocky_world)
        scanner.scan((2, 3), 1, is_rock)
        result = scanner.scan((2, 3), 1, is_rock)
        assert result.status == ScanStatus.FAILED
        assert result.reason == "no matching tile within radius 1"

    def test_radius_zero_single_call(self, rocky_world):
        scanner = AreaScanner(Robot(coordinate=(1, 1)), rocky_world)
        assert scanner.scan((1, 1), 0, is_rock).status == ScanStatus.COMPLETE

    def test_rings_beyond_the_edge(self, rocky_world):
        robot = Robot(coordinate=(4, 4))
        scanner = AreaScanner(robot, rocky_world)
        statuses = [scanner.scan((4, 4), 2, is_rock).status for _ in range(3)]
        assert statuses == [ScanStatus.SCANNING, ScanStatus.SCANNING, ScanStatus.COMPLETE]
        # Only the 9 in-bounds cells of the 5x5 square are paid for
        assert robot.energy.level == 1000 - 9 * 3

    def test_waits_for_energy(self, rocky_world):
        robot = Robot(coordinate=(2, 2), energy=Energy(0, 100))
        scanner = AreaScanner(robot, rocky_world)

        assert scanner.scan((2, 2), 1, is_rock).status == ScanStatus.SCANNING
        assert not rocky_world.discovered.any()

        robot.energy.recharge(100)
        assert scanner.scan((2, 2), 1, is_rock).status == ScanStatus.SCANNING
        assert scanner.scan((2, 2), 1, is_rock).status == ScanStatus.COMPLETE

    def test_new_area_restarts_sweep(self, rocky_world):
        scanner = AreaScanner(Robot(coordinate=(2, 2)), rocky_world)
        scanner.scan((2, 2), 2, is_rock)
        scanner.scan((2, 2), 2, is_rock)
        # Different radius: back to ring 0
        assert scanner.scan((2, 2), 1, is_rock).status == ScanStatus.SCANNING
        assert scanner.scan((2, 2), 1, is_rock).status == ScanStatus.COMPLETE

    def test_verdict_limited_to_scanned_square(self):
        world = World.from_rows(["...", "...", "..="])
        scanner = AreaScanner(Robot(coordinate=(0, 0)), world)
        scanner.scan((0, 0), 1, lambda tile: tile.tile_type == TileType.STREET)
        result = scanner.scan((0, 0), 1, lambda tile: tile.tile_type == TileType.STREET)
        assert result.status == ScanStatus.FAILED
