"""
Desire Paths

Foot traffic wears the ground down. Cells that players walk over
accumulate wear; plants on busy cells get trampled, heavily used soil
turns into a packed dirt path once the player has moved on, and cells
nobody walks on for a couple of in-game days slowly revert to the block
they started as.

Main entry points:
- DesirePathsEngine: The server-side system to start against a host
- SimulatedHost: In-memory host for tests and demos
- SimulationRunner: For running simulations and demos
- load_config: For loading configuration from JSON files

Example:
    >>> from desire_paths import DesirePathsEngine, SimulatedHost
    >>> host = SimulatedHost()
    >>> engine = DesirePathsEngine()
    >>> engine.start(host)
    >>> player = host.join("walker", x=0.5, y=4.0, z=0.5)
"""

__version__ = "0.3.0"
__author__ = "Desire Paths Project"

# Lazy imports to avoid circular dependencies
def __getattr__(name):
    if name == 'DesirePathsEngine':
        from .engine import DesirePathsEngine
        return DesirePathsEngine
    elif name == 'EngineStats':
        from .engine import EngineStats
        return EngineStats
    elif name == 'SimulatedHost':
        from .host import SimulatedHost
        return SimulatedHost
    elif name == 'SimulationRunner':
        from .simulation import SimulationRunner
        return SimulationRunner
    elif name == 'SimulationResults':
        from .simulation import SimulationResults
        return SimulationResults
    elif name == 'run_demo':
        from .simulation import run_demo
        return run_demo
    elif name == 'load_config':
        from .config import load_config
        return load_config
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    'DesirePathsEngine',
    'EngineStats',
    'SimulatedHost',
    'SimulationRunner',
    'SimulationResults',
    'run_demo',
    'load_config',
]
