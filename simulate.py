#!/usr/bin/env python3
"""
Desire Paths Interactive Simulator

Walk a player around a small soil field and watch the ground wear.

Usage:
    python simulate.py [--seed N] [--config DIR]
    python simulate.py --demo [--duration SECONDS]

Commands:
    walk X Z     - Walk the player to block X,Z one cell at a time
    skip H       - Skip H world hours and run a decay sweep
    sweep        - Run a decay sweep now
    cell X Z     - Show the ground, plant and wear at X,Z
    status       - Show engine state
    log [N]      - Show the last N log entries (default: 10)
    save         - Save the world
    load         - Reload the world from the last save
    demo         - Run the batch demo and print its summary
    quit         - Exit simulator
"""

import sys
import os
import argparse
import cmd

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src'))

from desire_paths.core.state import BlockPos
from desire_paths.engine import DesirePathsEngine
from desire_paths.host import SimulatedHost
from desire_paths.output.debug_logger import DebugLogger, LogLevel
from desire_paths.simulation import (
    SimulationRunner, GROUND_Y, grid_steps, run_demo,
)
from desire_paths.utils.rng import SeededRNG


class PathSimulator(cmd.Cmd):
    """Interactive Desire Paths simulator."""

    intro = """
+-------------------------------------------------------------+
|                 Desire Paths Simulator                      |
|  Commands: walk X Z, skip H, sweep, cell X Z, status, quit  |
+-------------------------------------------------------------+
"""
    prompt = 'paths> '

    def __init__(self, seed: int = None, config_path: str = None):
        super().__init__()

        runner = SimulationRunner(seed=seed)
        runner.configure(field_length=48, field_width=48)
        accessor = runner.build_world(SeededRNG(seed=seed, name="world"))

        self.logger = DebugLogger(level=LogLevel.INFO, output=sys.stdout)
        self.host = SimulatedHost(block_accessor=accessor)
        self.engine = DesirePathsEngine(config_path=config_path, logger=self.logger)
        self.engine.start(self.host)
        self.player = self.host.join("you", x=0.5, y=GROUND_Y + 1.0, z=0.5)

    def _tick(self) -> None:
        self.host.advance(250)

    def do_walk(self, arg):
        """walk X Z - Walk to a block, one cell per server tick."""
        try:
            tx, tz = (int(v) for v in arg.split())
        except ValueError:
            print("Usage: walk X Z")
            return

        entity = self.player.entity
        here = entity.pos.as_block_pos()
        for cx, cz in grid_steps(here.x, here.z, tx, tz):
            entity.move_to(cx + 0.5, entity.pos.y, cz + 0.5)
            self._tick()

    def do_skip(self, arg):
        """skip H - Skip world hours, then sweep."""
        try:
            hours = float(arg or 24)
        except ValueError:
            print("Usage: skip H")
            return
        self.host.calendar.add_hours(hours)
        result = self.engine.on_decay_tick(0.0)
        print(f"Skipped {hours:g}h: {result.to_dict()}")

    def do_sweep(self, arg):
        """Run a decay sweep now."""
        result = self.engine.on_decay_tick(0.0)
        print(result.to_dict())

    def do_cell(self, arg):
        """cell X Z - Inspect one cell."""
        try:
            x, z = (int(v) for v in arg.split())
        except ValueError:
            print("Usage: cell X Z")
            return

        pos = BlockPos(x, GROUND_Y, z)
        accessor = self.host.block_accessor
        record = self.engine.store.get(pos)
        print(f"  ground : {accessor.get_block(pos).code}")
        print(f"  above  : {accessor.get_block(pos.up()).code}")
        if record is None:
            print("  wear   : untracked")
        else:
            print(f"  wear   : {record.wear_level} "
                  f"(last {record.last_update_hours:.2f}h, was {record.original_block_code})")
        print(f"  queued : {pos in self.engine.queue}")

    def do_status(self, arg):
        """Show engine state."""
        state = self.engine.get_state()
        print(f"  {self.host.calendar.format_time()} ({state['world_hours']:.2f}h)")
        print(f"  Tracked cells  : {state['tracked_cells']}")
        print(f"  Pending effects: {state['pending_effects']}")
        for key, value in state['stats'].items():
            print(f"  {key:<22}: {value}")

    def do_log(self, arg):
        """log [N] - Show recent log entries."""
        count = int(arg) if arg.strip().isdigit() else 10
        for entry in self.logger.get_recent(count):
            print(entry.format())

    def do_save(self, arg):
        """Save the world."""
        self.host.save()

    def do_load(self, arg):
        """Reload the world from the last save."""
        self.host.load()

    def do_demo(self, arg):
        """Run the batch demo."""
        print(run_demo().summary())

    def do_quit(self, arg):
        """Exit the simulator."""
        self.engine.dispose()
        print("Goodbye!")
        return True

    def do_exit(self, arg):
        """Exit the simulator."""
        return self.do_quit(arg)

    def default(self, line):
        print(f"Unknown command: {line}")
        print("Type 'help' for available commands.")

    def emptyline(self):
        pass


def main():
    parser = argparse.ArgumentParser(description='Desire Paths Simulator')
    parser.add_argument('--seed', type=int, default=42, help='Random seed')
    parser.add_argument('--config', default=None, help='Config directory')
    parser.add_argument('--demo', action='store_true', help='Run the batch demo and exit')
    parser.add_argument('--duration', type=float, default=600.0,
                        help='Demo duration in real seconds')
    parser.add_argument('--csv', help='Write demo snapshots to this CSV file')
    args = parser.parse_args()

    if args.demo:
        results = run_demo(duration=args.duration, seed=args.seed,
                           config_path=args.config)
        print(results.summary())
        if args.csv:
            with open(args.csv, 'w', newline='') as f:
                f.write(results.snapshots_to_csv())
        return

    sim = PathSimulator(seed=args.seed, config_path=args.config)

    try:
        sim.cmdloop()
    except KeyboardInterrupt:
        print("\nGoodbye!")


if __name__ == '__main__':
    main()
