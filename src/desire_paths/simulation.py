"""
Simulation runner for Desire Paths.

Builds a small grass field, walks seeded players back and forth across
it on a simulated server, and reports how the ground wore down:
- Configurable field, players and timing
- Scenario steps (skip hours, save, reload, players leaving)
- Wear event log and snapshots of the world over time
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
import csv
import io
import json

from .config import DesirePathsConfig
from .core.clock import WorldCalendar
from .core.state import BlockPos
from .engine import DesirePathsEngine
from .host import SimulatedHost, SimulatedPlayer
from .output.debug_logger import DebugLogger, LogLevel
from .output.event_logger import CONVERTED, PLANT_CLEARED, REVERTED
from .utils.rng import SeededRNG
from .wear.terrain import GridBlockAccessor, create_default_registry


GROUND_Y = 3
GROUND_CODE = "soil-medium-normal"
PLANT_CODE = "tallgrass-medium-free"
PATH_CODE = "desire-paths:packeddirt-path"


@dataclass
class ScenarioStep:
    """A single step in a simulation scenario."""
    time: float  # Real seconds since start
    action: str  # "skip_hours", "save", "load", "leave", "stop_walking"
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SimulationConfig:
    """Configuration for a simulation run."""
    duration: float = 600.0  # Real seconds
    tick_ms: int = 200
    seed: Optional[int] = 42

    # Field layout
    field_length: int = 64
    field_width: int = 9
    plant_chance: float = 0.6

    # Players
    players: int = 3
    walk_speed: float = 4.3  # Blocks per second
    lateral_jitter: float = 0.35  # Max sideways drift per second

    # World time
    speed_hours_per_minute: float = 1.0

    scenario: List[ScenarioStep] = field(default_factory=list)

    snapshot_interval: float = 60.0


def grid_steps(start_x: int, start_z: int,
               target_x: int, target_z: int) -> List[Tuple[int, int]]:
    """
    Cells visited walking from one cell to another, diagonals allowed.

    The start cell is not included; the target is the last entry.

    Example:
        >>> grid_steps(0, 0, -2, 1)
        [(-1, 1), (-2, 1)]
    """
    steps = []
    x, z = start_x, start_z
    while (x, z) != (target_x, target_z):
        x += (target_x > x) - (target_x < x)
        z += (target_z > z) - (target_z < z)
        steps.append((x, z))
    return steps


class Walker:
    """Moves one player between the two ends of the field."""

    def __init__(self, player: SimulatedPlayer, rng: SeededRNG,
                 x_min: float, x_max: float, z_center: float,
                 speed: float, jitter: float):
        self.player = player
        self.rng = rng
        self.x_min = x_min
        self.x_max = x_max
        self.z_center = z_center
        self.speed = speed
        self.jitter = jitter
        self.heading = 1
        self.active = True

    def step(self, dt: float) -> None:
        if not self.active or self.player.entity is None:
            return

        pos = self.player.entity.pos
        x = pos.x + self.heading * self.speed * dt
        if x >= self.x_max:
            x, self.heading = self.x_max, -1
        elif x <= self.x_min:
            x, self.heading = self.x_min, 1

        # Drift sideways but stay near the desire line
        z = pos.z + self.rng.uniform(-self.jitter, self.jitter) * dt
        z += (self.z_center - z) * 0.1 * dt
        z = min(max(z, 0.5), self.z_center * 2.0 - 0.5)
        self.player.entity.move_to(x, pos.y, z)


class SimulationRunner:
    """
    Runs Desire Paths simulations with scenarios.

    Example:
        >>> runner = SimulationRunner(seed=7)
        >>> runner.configure(duration=300.0, players=2)
        >>> runner.add_step(200.0, "skip_hours", {"hours": 72})
        >>> results = runner.run()
        >>> print(results.summary())
    """

    def __init__(self, config: Optional[DesirePathsConfig] = None,
                 config_path: Optional[str] = None,
                 seed: Optional[int] = None,
                 logger: Optional[DebugLogger] = None):
        """
        Initialize the runner.

        Args:
            config: Pre-built engine configuration
            config_path: Path to config directory
            seed: Random seed
            logger: Diagnostic logger for the engine
        """
        self.paths_config = config
        self.config_path = config_path
        self.sim_config = SimulationConfig(seed=seed)
        self.logger = logger or DebugLogger(level=LogLevel.INFO, max_entries=2000)

        self.host: Optional[SimulatedHost] = None
        self.engine: Optional[DesirePathsEngine] = None
        self._walkers: List[Walker] = []
        self._snapshots: List[Dict] = []
        self._step_log: List[Dict] = []

    def configure(self, **kwargs) -> 'SimulationRunner':
        """
        Configure simulation parameters.

        Returns self for chaining.
        """
        for key, value in kwargs.items():
            if hasattr(self.sim_config, key):
                setattr(self.sim_config, key, value)
        return self

    def add_step(self, time: float, action: str,
                 params: Optional[Dict[str, Any]] = None) -> 'SimulationRunner':
        """Add a scenario step. Returns self for chaining."""
        step = ScenarioStep(time=time, action=action, params=params or {})
        self.sim_config.scenario.append(step)
        return self

    def set_scenario(self, steps: List[Tuple[float, str, Dict]]) -> 'SimulationRunner':
        self.sim_config.scenario = [
            ScenarioStep(time=t, action=a, params=p)
            for t, a, p in steps
        ]
        return self

    # =========================================================================
    # World Setup
    # =========================================================================

    def build_world(self, rng: SeededRNG) -> GridBlockAccessor:
        """Soil field with tall grass growing on part of it."""
        cfg = self.sim_config
        accessor = GridBlockAccessor(create_default_registry())
        accessor.fill_layer([GROUND_CODE], GROUND_Y,
                            range(cfg.field_length), range(cfg.field_width))

        for x in range(cfg.field_length):
            for z in range(cfg.field_width):
                if rng.probability(cfg.plant_chance):
                    accessor.place(PLANT_CODE, BlockPos(x, GROUND_Y + 1, z))
        return accessor

    def _spawn_walkers(self, rng: SeededRNG) -> None:
        cfg = self.sim_config
        z_center = cfg.field_width / 2.0
        self._walkers = []

        for index in range(cfg.players):
            walker_rng = rng.fork(f"walker-{index}")
            start_x = walker_rng.uniform(1.5, cfg.field_length - 1.5)
            player = self.host.join(f"player-{index}", x=start_x,
                                    y=GROUND_Y + 1.0, z=z_center)
            walker = Walker(player, walker_rng, 0.5, cfg.field_length - 0.5,
                            z_center, cfg.walk_speed, cfg.lateral_jitter)
            walker.heading = 1 if walker_rng.probability(0.5) else -1
            self._walkers.append(walker)

    # =========================================================================
    # Run
    # =========================================================================

    def run(self, progress_callback: Optional[Callable] = None) -> 'SimulationResults':
        """
        Run the simulation.

        Args:
            progress_callback: Optional callback(current_time, total_time)

        Returns:
            SimulationResults object
        """
        cfg = self.sim_config
        rng = SeededRNG(seed=cfg.seed, name="simulation")

        accessor = self.build_world(rng)
        calendar = WorldCalendar(speed_hours_per_minute=cfg.speed_hours_per_minute)
        self.host = SimulatedHost(block_accessor=accessor, calendar=calendar)

        self.engine = DesirePathsEngine(config=self.paths_config,
                                        config_path=self.config_path,
                                        logger=self.logger)
        self.engine.start(self.host)
        self._spawn_walkers(rng)

        self._snapshots = []
        self._step_log = []

        scenario = sorted(cfg.scenario, key=lambda s: s.time)
        scenario_index = 0

        current_time = 0.0
        last_snapshot = 0.0
        dt = cfg.tick_ms / 1000.0

        while current_time < cfg.duration:
            while scenario_index < len(scenario) and scenario[scenario_index].time <= current_time:
                self._execute_step(scenario[scenario_index], current_time)
                scenario_index += 1

            for walker in self._walkers:
                walker.step(dt)
            self.host.advance(cfg.tick_ms)

            if current_time - last_snapshot >= cfg.snapshot_interval:
                self._snapshot(current_time)
                last_snapshot = current_time

            if progress_callback:
                progress_callback(current_time, cfg.duration)

            current_time += dt

        self._snapshot(current_time)
        final_state = self.engine.get_state()
        self.engine.dispose()

        return SimulationResults(
            snapshots=self._snapshots,
            step_log=self._step_log,
            events=[e.to_dict() for e in self.engine.events.get_all()],
            final_state=final_state,
            path_cells=accessor.count(PATH_CODE),
            plants_left=accessor.count(PLANT_CODE),
            config=cfg,
        )

    def _execute_step(self, step: ScenarioStep, current_time: float) -> None:
        """Execute a scenario step."""
        action = step.action
        params = step.params

        if action == "skip_hours":
            self.host.calendar.add_hours(params.get("hours", 24.0))
            self.host.advance(self.engine.config.decay_interval_ms)
        elif action == "save":
            self.host.save()
        elif action == "load":
            self.host.load()
        elif action == "leave":
            uid = params.get("player_uid", "")
            self.host.leave(uid)
            for walker in self._walkers:
                if walker.player.player_uid == uid:
                    walker.active = False
        elif action == "stop_walking":
            for walker in self._walkers:
                walker.active = False
        else:
            raise ValueError(f"Unknown scenario action: {action}")

        self._step_log.append({
            'time': current_time,
            'action': action,
            'params': params,
        })

    def _snapshot(self, current_time: float) -> None:
        state = self.engine.get_state()
        self._snapshots.append({
            'time': current_time,
            'world_hours': state['world_hours'],
            'tracked_cells': state['tracked_cells'],
            'pending_effects': state['pending_effects'],
            'steps': state['stats']['total_steps'],
            'max_wear': max((r.wear_level for _, r in self.engine.store), default=0),
        })


@dataclass
class SimulationResults:
    """Results from a simulation run."""
    snapshots: List[Dict]
    step_log: List[Dict]
    events: List[Dict]
    final_state: Dict[str, Any]
    path_cells: int
    plants_left: int
    config: SimulationConfig

    def count_events(self, event_type: str) -> int:
        return sum(1 for e in self.events if e['event_type'] == event_type)

    def summary(self) -> str:
        """Get a text summary of the simulation."""
        stats = self.final_state['stats']
        lines = [
            "=" * 60,
            "DESIRE PATHS SIMULATION",
            "=" * 60,
            "",
            f"Duration: {self.config.duration:.0f}s real, "
            f"{self.final_state['world_hours']:.1f}h world",
            f"Players: {self.config.players}",
            f"Seed: {self.config.seed}",
            "",
            "--- Statistics ---",
            f"Steps: {stats['total_steps']}",
            f"Sweeps: {stats['total_sweeps']}",
            f"Plants trampled: {self.count_events(PLANT_CLEARED)}",
            f"Cells converted: {self.count_events(CONVERTED)}",
            f"Cells reverted: {self.count_events(REVERTED)}",
            "",
            "--- Final World ---",
            f"Tracked cells: {self.final_state['tracked_cells']}",
            f"Pending effects: {self.final_state['pending_effects']}",
            f"Path blocks: {self.path_cells}",
            f"Plants left: {self.plants_left}",
        ]

        if self.step_log:
            lines.extend(["", "--- Scenario ---"])
            for step in self.step_log:
                lines.append(f"  {step['time']:7.1f}s {step['action']} {step['params']}")

        lines.append("")
        lines.append("=" * 60)

        return "\n".join(lines)

    def snapshots_to_csv(self) -> str:
        """Export snapshots to CSV string."""
        if not self.snapshots:
            return ""

        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=list(self.snapshots[0].keys()))
        writer.writeheader()
        writer.writerows(self.snapshots)
        return output.getvalue()

    def to_json(self) -> str:
        return json.dumps({
            'snapshots': self.snapshots,
            'step_log': self.step_log,
            'events': self.events,
            'final_state': self.final_state,
            'path_cells': self.path_cells,
            'plants_left': self.plants_left,
        }, indent=2)


def run_demo(duration: float = 600.0, seed: int = 42,
             config_path: Optional[str] = None) -> SimulationResults:
    """
    Run a demo: players wear a path, then everyone leaves and the
    world is fast-forwarded until the path grows back.
    """
    runner = SimulationRunner(config_path=config_path, seed=seed)
    runner.configure(duration=duration, players=3)

    runner.add_step(duration * 0.5, "save")
    runner.add_step(duration * 0.6, "stop_walking")
    for i in range(1, 31):
        runner.add_step(duration * 0.6 + i, "skip_hours", {"hours": 49.0})

    print(f"Running demo simulation ({duration:.0f}s)...")
    return runner.run()
