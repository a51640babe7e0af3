"""
Wear Tests: Store, Accumulation, Decay Sweep, Deferred Conversion

Tests:
- Wear store bookkeeping
- Monotonic accumulation and first-visit capture
- Staleness decay throttling
- Plant removal threshold and idempotence
- Reversion and two-phase removal
- Soil-like ground detection
- Distance-gated path conversion
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import unittest
from desire_paths.core.state import BlockPos, WearRecord, WearStore
from desire_paths.output.event_logger import (
    WearEventLogger, STEP, PLANT_CLEARED, CONVERTED, REVERTED, REMOVED,
)
from desire_paths.wear.terrain import (
    BlockMaterial, BlockRegistry, GridBlockAccessor, create_default_registry,
)
from desire_paths.wear.effects import DeferredEffectQueue, is_soil_like
from desire_paths.wear.accumulator import WearAccumulator
from desire_paths.wear.sweeper import DecaySweeper


PATH_CODE = "desire-paths:packeddirt-path"
SOIL_CODE = "game:soil-medium-normal"


class TestWearStore(unittest.TestCase):
    """Test the cell to record mapping."""

    def setUp(self):
        self.store = WearStore()
        self.pos = BlockPos(1, 3, -2)

    def test_empty_store(self):
        """A new store tracks nothing."""
        self.assertEqual(len(self.store), 0)
        self.assertIsNone(self.store.get(self.pos))
        self.assertNotIn(self.pos, self.store)

    def test_put_and_get(self):
        self.store.put(self.pos, WearRecord(wear_level=4))
        self.assertIn(self.pos, self.store)
        self.assertEqual(self.store.get(self.pos).wear_level, 4)

    def test_remove_untracked_is_noop(self):
        """Removing a cell that is not tracked returns None."""
        self.assertIsNone(self.store.remove(self.pos))

    def test_iteration_tolerates_removal(self):
        """Iteration works over a copy, so removal mid-scan is safe."""
        for x in range(5):
            self.store.put(BlockPos(x, 0, 0), WearRecord(wear_level=x))

        for pos, record in self.store:
            self.store.remove(pos)

        self.assertEqual(len(self.store), 0)

    def test_replace_and_snapshot(self):
        self.store.put(self.pos, WearRecord(wear_level=1))
        snapshot = self.store.snapshot()

        self.store.replace({BlockPos(9, 9, 9): WearRecord(wear_level=2)})

        self.assertNotIn(self.pos, self.store)
        self.assertIn(self.pos, snapshot)
        self.assertEqual(len(self.store), 1)

    def test_block_pos_helpers(self):
        self.assertEqual(self.pos.up(), BlockPos(1, 4, -2))
        self.assertEqual(self.pos.down(), BlockPos(1, 2, -2))
        self.assertEqual(BlockPos(0, 0, 0).distance_sq(BlockPos(3, 0, 4)), 25)
        self.assertEqual(str(self.pos), "X=1,Y=3,Z=-2")


class TestWearAccumulation(unittest.TestCase):
    """Test per-visit wear accumulation."""

    def setUp(self):
        self.store = WearStore()
        self.accessor = GridBlockAccessor()
        self.events = WearEventLogger()
        self.queue = DeferredEffectQueue(self.store, self.accessor, events=self.events)
        self.accumulator = WearAccumulator(self.store, self.queue, events=self.events)
        self.pos = BlockPos(4, 3, 4)

    def test_first_visit_creates_record(self):
        """First visit yields wear 1 and captures the block code."""
        record = self.accumulator.record_visit(self.pos, 10.0, SOIL_CODE)

        self.assertEqual(record.wear_level, 1)
        self.assertEqual(record.last_update_hours, 10.0)
        self.assertEqual(record.original_block_code, SOIL_CODE)

    def test_wear_increases_by_one_per_visit(self):
        """Each visit adds exactly one wear point."""
        for n in range(1, 26):
            record = self.accumulator.record_visit(self.pos, float(n), SOIL_CODE)
            self.assertEqual(record.wear_level, n)

    def test_original_block_never_overwritten(self):
        """Later visits keep the code captured on first visit."""
        self.accumulator.record_visit(self.pos, 1.0, SOIL_CODE)
        record = self.accumulator.record_visit(self.pos, 2.0, PATH_CODE)

        self.assertEqual(record.original_block_code, SOIL_CODE)
        self.assertEqual(record.last_update_hours, 2.0)

    def test_cell_queued_once(self):
        """Repeated visits leave a single queue entry."""
        for _ in range(3):
            self.accumulator.record_visit(self.pos, 1.0, SOIL_CODE)

        self.assertIn(self.pos, self.queue)
        self.assertEqual(len(self.queue), 1)

    def test_step_events_logged(self):
        for _ in range(3):
            self.accumulator.record_visit(self.pos, 1.0, SOIL_CODE)

        self.assertEqual(self.events.count_of(STEP), 3)
        self.assertEqual(self.events.last_of_type(STEP).wear_level, 3)


class TestDecay(unittest.TestCase):
    """Test staleness decay throttling."""

    def setUp(self):
        self.store = WearStore()
        self.accessor = GridBlockAccessor()
        self.sweeper = DecaySweeper(self.store, self.accessor)
        self.pos = BlockPos(0, 3, 0)
        self.accessor.place(SOIL_CODE, self.pos)

    def test_decay_throttled_to_stale_interval(self):
        """One point per stale interval, not one per sweep."""
        self.store.put(self.pos, WearRecord(3, 0.0, SOIL_CODE))

        self.sweeper.tick(47.0)
        self.assertEqual(self.store.get(self.pos).wear_level, 3)

        self.sweeper.tick(49.0)
        record = self.store.get(self.pos)
        self.assertEqual(record.wear_level, 2)
        self.assertEqual(record.last_update_hours, 49.0)

        self.sweeper.tick(49.5)
        self.assertEqual(self.store.get(self.pos).wear_level, 2)

    def test_exactly_stale_does_not_decay(self):
        """Decay needs strictly more than the stale interval."""
        self.store.put(self.pos, WearRecord(3, 0.0, SOIL_CODE))
        result = self.sweeper.tick(48.0)

        self.assertEqual(result.decayed, 0)
        self.assertEqual(self.store.get(self.pos).wear_level, 3)

    def test_fresh_cell_untouched(self):
        self.store.put(self.pos, WearRecord(7, 100.0, SOIL_CODE))
        result = self.sweeper.tick(101.0)

        self.assertEqual(result.scanned, 1)
        self.assertEqual(result.decayed, 0)
        self.assertEqual(self.store.get(self.pos).wear_level, 7)


class TestPlantRemoval(unittest.TestCase):
    """Test trampling of plants on worn cells."""

    def setUp(self):
        self.store = WearStore()
        self.accessor = GridBlockAccessor(create_default_registry())
        self.events = WearEventLogger()
        self.sweeper = DecaySweeper(self.store, self.accessor, events=self.events)
        self.pos = BlockPos(2, 3, 2)
        self.accessor.place(SOIL_CODE, self.pos)
        self.accessor.place("tallgrass-medium-free", self.pos.up())

    def test_plant_cleared_at_threshold(self):
        self.store.put(self.pos, WearRecord(5, 10.0, SOIL_CODE))
        result = self.sweeper.tick(10.0)

        self.assertEqual(result.plants_cleared, 1)
        self.assertEqual(self.accessor.get_block(self.pos.up()).material, BlockMaterial.AIR)
        self.assertEqual(self.events.count_of(PLANT_CLEARED), 1)

    def test_plant_kept_below_threshold(self):
        self.store.put(self.pos, WearRecord(4, 10.0, SOIL_CODE))
        self.sweeper.tick(10.0)

        self.assertEqual(self.accessor.get_block(self.pos.up()).material, BlockMaterial.PLANT)

    def test_plant_removal_idempotent(self):
        """A second sweep over the cleared cell changes nothing."""
        self.store.put(self.pos, WearRecord(6, 10.0, SOIL_CODE))
        self.sweeper.tick(10.0)
        changes = self.accessor.changes

        result = self.sweeper.tick(10.5)

        self.assertEqual(result.plants_cleared, 0)
        self.assertEqual(self.accessor.changes, changes)
        self.assertEqual(self.events.count_of(PLANT_CLEARED), 1)

    def test_non_plant_above_untouched(self):
        self.accessor.place("planks-oak-ud", self.pos.up())
        self.store.put(self.pos, WearRecord(10, 10.0, SOIL_CODE))
        self.sweeper.tick(10.0)

        self.assertEqual(self.accessor.get_block(self.pos.up()).code, "game:planks-oak-ud")

    def test_decay_applies_before_plant_check(self):
        """A stale cell at the threshold drops below it before the check."""
        self.store.put(self.pos, WearRecord(5, 0.0, SOIL_CODE))
        result = self.sweeper.tick(49.0)

        self.assertEqual(result.decayed, 1)
        self.assertEqual(result.plants_cleared, 0)
        self.assertEqual(self.accessor.get_block(self.pos.up()).material, BlockMaterial.PLANT)


class TestReversion(unittest.TestCase):
    """Test restoring the original block when wear runs out."""

    def setUp(self):
        registry = BlockRegistry()
        registry.register("soil-a", BlockMaterial.SOIL)
        registry.register(PATH_CODE, BlockMaterial.SOIL)

        self.store = WearStore()
        self.accessor = GridBlockAccessor(registry)
        self.events = WearEventLogger()
        self.sweeper = DecaySweeper(self.store, self.accessor, events=self.events)
        self.pos = BlockPos(0, 3, 0)
        self.accessor.place(PATH_CODE, self.pos)

    def test_revert_to_original_and_remove(self):
        """Last wear point gone: original block back, record dropped."""
        self.store.put(self.pos, WearRecord(1, 0.0, "game:soil-a"))
        result = self.sweeper.tick(49.0)

        self.assertEqual(self.accessor.get_block(self.pos).code, "game:soil-a")
        self.assertNotIn(self.pos, self.store)
        self.assertEqual(result.reverted, 1)
        self.assertEqual(result.removed, [self.pos])
        self.assertEqual(self.events.count_of(REVERTED), 1)
        self.assertEqual(self.events.count_of(REMOVED), 1)

    def test_unresolvable_original_still_removed(self):
        """The record goes even when its original block is unknown."""
        self.store.put(self.pos, WearRecord(1, 0.0, "game:no-such-block"))
        result = self.sweeper.tick(49.0)

        self.assertEqual(self.accessor.get_block(self.pos).code, PATH_CODE)
        self.assertNotIn(self.pos, self.store)
        self.assertEqual(result.reverted, 0)

    def test_zero_wear_record_removed_without_decay(self):
        self.store.put(self.pos, WearRecord(0, 5.0, "game:soil-a"))
        result = self.sweeper.tick(5.0)

        self.assertEqual(result.decayed, 0)
        self.assertEqual(len(self.store), 0)

    def test_several_removals_in_one_sweep(self):
        """Deletions collected during the scan are all applied."""
        for x in range(4):
            pos = BlockPos(x, 3, 0)
            self.accessor.place(PATH_CODE, pos)
            self.store.put(pos, WearRecord(1, 0.0, "game:soil-a"))
        self.store.put(BlockPos(9, 3, 0), WearRecord(8, 0.0, "game:soil-a"))

        result = self.sweeper.tick(49.0)

        self.assertEqual(len(result.removed), 4)
        self.assertEqual(list(self.store.positions()), [BlockPos(9, 3, 0)])
        self.assertEqual(self.store.get(BlockPos(9, 3, 0)).wear_level, 7)


class TestSoilLike(unittest.TestCase):
    """Test which grounds can wear into a path."""

    def setUp(self):
        self.registry = create_default_registry()
        self.keywords = ["soil", "dirt", "grass"]

    def check(self, code):
        return is_soil_like(self.registry.get_by_code(code), self.keywords)

    def test_soil_material_qualifies(self):
        self.assertTrue(self.check("soil-medium-normal"))
        self.assertTrue(self.check("forestfloor-3"))

    def test_keyword_in_code_qualifies(self):
        """Gravel material, but the code names dirt."""
        self.assertTrue(self.check("dirtygravel-wet-plain"))

    def test_hard_ground_rejected(self):
        self.assertFalse(self.check("gravel-granite"))
        self.assertFalse(self.check("rock-granite"))
        self.assertFalse(self.check("planks-oak-ud"))

    def test_domain_not_searched(self):
        registry = BlockRegistry()
        block = registry.register("soilmod:rock", BlockMaterial.STONE)
        self.assertFalse(is_soil_like(block, self.keywords))


class TestDeferredConversion(unittest.TestCase):
    """Test distance-gated path conversion."""

    def setUp(self):
        self.store = WearStore()
        self.accessor = GridBlockAccessor(create_default_registry())
        self.events = WearEventLogger()
        self.queue = DeferredEffectQueue(self.store, self.accessor, events=self.events)
        self.pos = BlockPos(0, 3, 0)
        self.accessor.place(SOIL_CODE, self.pos)

    def queue_cell(self, wear):
        self.store.put(self.pos, WearRecord(wear, 0.0, SOIL_CODE))
        self.queue.add(self.pos)

    def test_near_player_keeps_cell_queued(self):
        self.queue_cell(20)
        released = self.queue.release_if_far(BlockPos(10, 3, 0))

        self.assertEqual(released, [])
        self.assertIn(self.pos, self.queue)
        self.assertEqual(self.accessor.get_block(self.pos).code, SOIL_CODE)

    def test_far_player_converts_exactly_once(self):
        """Near: nothing. Far: one conversion. Far again: nothing."""
        self.queue_cell(20)
        self.queue.release_if_far(BlockPos(10, 3, 0))
        released = self.queue.release_if_far(BlockPos(35, 3, 0))

        self.assertEqual(released, [self.pos])
        self.assertEqual(self.accessor.get_block(self.pos).code, PATH_CODE)
        self.assertNotIn(self.pos, self.queue)

        self.assertEqual(self.queue.release_if_far(BlockPos(35, 3, 0)), [])
        self.assertEqual(self.events.count_of(CONVERTED), 1)

    def test_release_at_exact_distance(self):
        """The release boundary is inclusive."""
        self.queue_cell(20)
        released = self.queue.release_if_far(BlockPos(30, 3, 0))
        self.assertEqual(released, [self.pos])

    def test_low_wear_released_without_conversion(self):
        """Below the path threshold the cell leaves the queue unchanged."""
        self.queue_cell(19)
        released = self.queue.release_if_far(BlockPos(35, 3, 0))

        self.assertEqual(released, [self.pos])
        self.assertEqual(self.accessor.get_block(self.pos).code, SOIL_CODE)
        self.assertEqual(len(self.queue), 0)

    def test_hard_ground_not_converted(self):
        self.accessor.place("rock-granite", self.pos)
        self.queue_cell(30)
        self.queue.release_if_far(BlockPos(35, 3, 0))

        self.assertEqual(self.accessor.get_block(self.pos).code, "game:rock-granite")

    def test_missing_record_dropped(self):
        self.queue.add(self.pos)
        released = self.queue.release_if_far(BlockPos(35, 3, 0))

        self.assertEqual(released, [self.pos])
        self.assertEqual(self.events.count_of(CONVERTED), 0)

    def test_unregistered_path_block(self):
        registry = BlockRegistry()
        registry.register("soil-medium-normal", BlockMaterial.SOIL)
        accessor = GridBlockAccessor(registry)
        accessor.place(SOIL_CODE, self.pos)
        queue = DeferredEffectQueue(self.store, accessor)

        self.assertFalse(queue.apply_path_effect(self.pos, 50))
        self.assertEqual(accessor.get_block(self.pos).code, SOIL_CODE)

    def test_already_path_not_reconverted(self):
        self.accessor.place(PATH_CODE, self.pos)
        self.assertFalse(self.queue.apply_path_effect(self.pos, 40))
        self.assertEqual(self.events.count_of(CONVERTED), 0)

    def test_any_actor_releases_any_cell(self):
        """The queue does not track who walked a cell."""
        self.queue_cell(20)
        other = BlockPos(-40, 3, 0)
        self.queue.add(other)

        released = self.queue.release_if_far(BlockPos(100, 3, 0))
        self.assertEqual(sorted(released), sorted([self.pos, other]))


def run_tests():
    """Run all wear tests."""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    suite.addTests(loader.loadTestsFromTestCase(TestWearStore))
    suite.addTests(loader.loadTestsFromTestCase(TestWearAccumulation))
    suite.addTests(loader.loadTestsFromTestCase(TestDecay))
    suite.addTests(loader.loadTestsFromTestCase(TestPlantRemoval))
    suite.addTests(loader.loadTestsFromTestCase(TestReversion))
    suite.addTests(loader.loadTestsFromTestCase(TestSoilLike))
    suite.addTests(loader.loadTestsFromTestCase(TestDeferredConversion))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return result.wasSuccessful()


if __name__ == '__main__':
    success = run_tests()
    sys.exit(0 if success else 1)
