import logging
import random
from typing import Optional, Tuple

from esper import World

from gemcascade.components.active_switch import ActiveSwitch
from gemcascade.components.board import Board
from gemcascade.components.board_position import BoardPosition
from gemcascade.components.level import LevelConfig
from gemcascade.components.obstacle import CellObstacle
from gemcascade.components.token import Token
from gemcascade.components.turn_state import TurnPhase
from gemcascade.events.bus import (
    EventBus,
    EVENT_TILE_CLICK,
    EVENT_TILE_DESELECTED,
    EVENT_TILE_SELECTED,
    EVENT_TILE_SWAP_REQUEST,
)
from gemcascade.systems.board_ops import get_palette, is_adjacent, iter_cells, place_token, read_cell
from gemcascade.systems.moves import respawn_full_board
from gemcascade.systems.obstacles import seed_frozen, seed_obstacles
from gemcascade.systems.turn_state_utils import get_or_create_turn_state

logger = logging.getLogger(__name__)


class BoardSystem:
    """Owns the board entity, seeds the initial layout and tracks tile selection."""

    def __init__(self, world: World, event_bus: EventBus, level: Optional[LevelConfig] = None):
        self.world = world
        self.event_bus = event_bus
        self.level = level or self._level_from_world()
        self.selected: Optional[Tuple[int, int]] = None
        # Create a single board entity with Board component and one entity per cell.
        self.board_entity = self.world.create_entity()
        board = Board(rows=self.level.rows, cols=self.level.cols)
        self.world.add_component(self.board_entity, board)
        for r in range(board.rows):
            row_entities = []
            for c in range(board.cols):
                ent = self.world.create_entity(
                    BoardPosition(row=r, col=c),
                    ActiveSwitch(active=False),
                    Token(token_id=0, color=0),
                    CellObstacle(),
                )
                row_entities.append(ent)
            board.entities.append(row_entities)
        self.event_bus.subscribe(EVENT_TILE_CLICK, self.on_tile_click)
        self._init_board()

    def _level_from_world(self) -> LevelConfig:
        for _, level in self.world.get_component(LevelConfig):
            return level
        return LevelConfig()

    def _rng(self) -> random.Random:
        rng = getattr(self.world, "random", None)
        if isinstance(rng, random.Random):
            return rng
        rng = random.Random(self.level.seed)
        setattr(self.world, "random", rng)
        return rng

    def _init_board(self):
        rng = self._rng()
        seed_obstacles(self.world, self.level, rng)
        placeholder = get_palette(self.world).spawnable_colors()[0]
        for pos, _ in iter_cells(self.world):
            if read_cell(self.world, pos) is None:
                place_token(self.world, pos, placeholder)
        seed_frozen(self.world, self.level.frozen_count, rng)
        respawn_full_board(self.world, rng=rng)
        logger.debug(
            f"Board {self.level.rows}x{self.level.cols} initialized "
            f"(blocking={self.level.blocking_count}, collectible={self.level.collectible_count}, "
            f"frozen={self.level.frozen_count})"
        )

    def on_tile_click(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        # Ignore input unless the cascade machine is waiting for a move.
        if get_or_create_turn_state(self.world).phase is not TurnPhase.IDLE:
            return
        if self.selected is None:
            self.selected = (row, col)
            self.event_bus.emit(EVENT_TILE_SELECTED, row=row, col=col)
        elif self.selected == (row, col):
            prev = self.selected
            self.selected = None
            self.event_bus.emit(EVENT_TILE_DESELECTED, reason='same_tile', prev_row=prev[0], prev_col=prev[1])
        elif is_adjacent(self.selected, (row, col)):
            src = self.selected
            dst = (row, col)
            self.selected = None
            self.event_bus.emit(EVENT_TILE_SWAP_REQUEST, src=src, dst=dst)
        else:
            # Change selection to new tile
            self.selected = (row, col)
            self.event_bus.emit(EVENT_TILE_SELECTED, row=row, col=col)

    def clear_selection(self, reason: str = 'external') -> None:
        prev = self.selected
        if prev is not None:
            self.selected = None
            self.event_bus.emit(EVENT_TILE_DESELECTED, reason=reason, prev_row=prev[0], prev_col=prev[1])
