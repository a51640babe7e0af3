"""
Block model and terrain access for Desire Paths.

The wear engine never owns terrain. It reads and swaps blocks through a
``BlockAccessor`` supplied by the host. ``GridBlockAccessor`` is the
in-memory implementation used by the simulator and the tests.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

from ..core.state import BlockPos


DEFAULT_DOMAIN = "game"
AIR_BLOCK_ID = 0


class BlockMaterial(Enum):
    """Material classification of a block."""
    AIR = "air"
    SOIL = "soil"
    GRAVEL = "gravel"
    SAND = "sand"
    STONE = "stone"
    PLANT = "plant"
    WOOD = "wood"
    LIQUID = "liquid"
    SNOW = "snow"


@dataclass(frozen=True)
class Block:
    """
    A registered block type.

    Attributes:
        block_id: Numeric id, 0 is air
        code: Full code, ``domain:path``
        material: Material classification
    """
    block_id: int
    code: str
    material: BlockMaterial

    @property
    def domain(self) -> str:
        return split_code(self.code)[0]

    @property
    def path(self) -> str:
        """Code without its domain, e.g. ``soil-medium-normal``."""
        return split_code(self.code)[1]


def split_code(code: str) -> tuple:
    """Split ``domain:path`` into its parts, defaulting the domain."""
    if ":" in code:
        domain, path = code.split(":", 1)
        return domain, path
    return DEFAULT_DOMAIN, code


def normalize_code(code: str) -> str:
    domain, path = split_code(code)
    return f"{domain}:{path}"


class BlockRegistry:
    """
    Block types known to the world, addressable by id and by code.

    Example:
        >>> registry = BlockRegistry()
        >>> soil = registry.register("soil-medium-normal", BlockMaterial.SOIL)
        >>> registry.get_by_code("game:soil-medium-normal") is soil
        True
        >>> registry.get_by_code("nonexistent") is None
        True
    """

    def __init__(self):
        self._by_id: Dict[int, Block] = {}
        self._by_code: Dict[str, Block] = {}
        self.air = self.register("air", BlockMaterial.AIR)

    def register(self, code: str, material: BlockMaterial) -> Block:
        """Register a block type. Re-registering a code returns the existing block."""
        full_code = normalize_code(code)
        existing = self._by_code.get(full_code)
        if existing is not None:
            return existing

        block = Block(block_id=len(self._by_id), code=full_code, material=material)
        self._by_id[block.block_id] = block
        self._by_code[full_code] = block
        return block

    def get_by_code(self, code: str) -> Optional[Block]:
        if not code:
            return None
        return self._by_code.get(normalize_code(code))

    def get_by_id(self, block_id: int) -> Optional[Block]:
        return self._by_id.get(block_id)

    def codes(self) -> List[str]:
        return list(self._by_code.keys())

    def __len__(self) -> int:
        return len(self._by_id)


def create_default_registry() -> BlockRegistry:
    """Registry with the vanilla ground blocks plus the worn-path block."""
    registry = BlockRegistry()
    registry.register("soil-medium-normal", BlockMaterial.SOIL)
    registry.register("soil-low-none", BlockMaterial.SOIL)
    registry.register("forestfloor-3", BlockMaterial.SOIL)
    registry.register("dirtygravel-wet-plain", BlockMaterial.GRAVEL)
    registry.register("gravel-granite", BlockMaterial.GRAVEL)
    registry.register("sand-granite", BlockMaterial.SAND)
    registry.register("rock-granite", BlockMaterial.STONE)
    registry.register("tallgrass-medium-free", BlockMaterial.PLANT)
    registry.register("flower-cornflower-free", BlockMaterial.PLANT)
    registry.register("planks-oak-ud", BlockMaterial.WOOD)
    registry.register("desire-paths:packeddirt-path", BlockMaterial.SOIL)
    return registry


class BlockAccessor:
    """
    Host terrain interface consumed by the wear engine.

    Subclasses provide the actual world storage.
    """

    def get_block(self, pos: BlockPos) -> Block:
        """Block currently at ``pos``. Unloaded or empty cells are air."""
        raise NotImplementedError

    def get_block_by_code(self, code: str) -> Optional[Block]:
        """Resolve a block code, or None if no such block exists."""
        raise NotImplementedError

    def set_block(self, block_id: int, pos: BlockPos) -> None:
        """Place a block. ``AIR_BLOCK_ID`` clears the cell."""
        raise NotImplementedError

    def exchange_block(self, block_id: int, pos: BlockPos) -> None:
        """Swap the block at ``pos`` in place, keeping neighbours untouched."""
        raise NotImplementedError


class GridBlockAccessor(BlockAccessor):
    """
    Sparse in-memory world.

    Cells that were never set read as air.

    Example:
        >>> accessor = GridBlockAccessor(create_default_registry())
        >>> accessor.fill_layer(["soil-medium-normal"], y=3, x_range=range(4), z_range=range(4))
        16
        >>> accessor.get_block(BlockPos(1, 3, 1)).material
        <BlockMaterial.SOIL: 'soil'>
    """

    def __init__(self, registry: Optional[BlockRegistry] = None):
        self.registry = registry or create_default_registry()
        self._cells: Dict[BlockPos, int] = {}
        self._changes = 0

    def get_block(self, pos: BlockPos) -> Block:
        block_id = self._cells.get(pos, AIR_BLOCK_ID)
        return self.registry.get_by_id(block_id) or self.registry.air

    def get_block_by_code(self, code: str) -> Optional[Block]:
        return self.registry.get_by_code(code)

    def set_block(self, block_id: int, pos: BlockPos) -> None:
        if self.registry.get_by_id(block_id) is None:
            raise KeyError(f"Unknown block id: {block_id}")

        if block_id == AIR_BLOCK_ID:
            self._cells.pop(pos, None)
        else:
            self._cells[pos] = block_id
        self._changes += 1

    def exchange_block(self, block_id: int, pos: BlockPos) -> None:
        self.set_block(block_id, pos)

    def place(self, code: str, pos: BlockPos) -> Block:
        """Place a block by code, for building test and demo worlds."""
        block = self.registry.get_by_code(code)
        if block is None:
            raise KeyError(f"Unknown block code: {code}")
        self.set_block(block.block_id, pos)
        return block

    def fill_layer(self, codes: List[str], y: int,
                   x_range: Iterable[int], z_range: Iterable[int]) -> int:
        """
        Fill a horizontal layer, cycling through ``codes``.

        Returns:
            Number of cells placed
        """
        placed = 0
        z_values = list(z_range)
        for x in x_range:
            for z in z_values:
                self.place(codes[placed % len(codes)], BlockPos(x, y, z))
                placed += 1
        return placed

    def count(self, code: str) -> int:
        """Number of cells holding a given block."""
        block = self.registry.get_by_code(code)
        if block is None:
            return 0
        return sum(1 for block_id in self._cells.values() if block_id == block.block_id)

    @property
    def changes(self) -> int:
        """Total number of set/exchange operations performed."""
        return self._changes

    def __repr__(self) -> str:
        return f"GridBlockAccessor(cells={len(self._cells)}, changes={self._changes})"
