from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Use weak=False to retain strong reference to bound methods so systems not kept in a variable still receive events.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# INPUT & SELECTION
# ============================================================================
EVENT_TILE_CLICK = "tile_click"            # payload: row, col
EVENT_TILE_SELECTED = "tile_selected"      # payload: row, col
EVENT_TILE_DESELECTED = "tile_deselected"  # payload: reason=str, prev_row, prev_col


# ============================================================================
# SWAP
# ============================================================================
EVENT_TILE_SWAP_REQUEST = "tile_swap_request"      # payload: src=(r,c), dst=(r,c)
EVENT_TILE_SWAP_VALID = "tile_swap_valid"          # payload: src=(r,c), dst=(r,c)
EVENT_TILE_SWAP_INVALID = "tile_swap_invalid"      # payload: src=(r,c), dst=(r,c), reason=str
EVENT_TILE_SWAP_REVERTED = "tile_swap_reverted"    # payload: src=(r,c), dst=(r,c)


# ============================================================================
# MATCHING & SPECIALS
# ============================================================================
EVENT_MATCH_FOUND = "match_found"                      # payload: positions=[(r,c),...], size=int, depth=int
EVENT_SPECIAL_CREATED = "special_created"              # payload: position=(r,c), token_id=int, kind=TokenKind
EVENT_INTERACTION_TRIGGERED = "interaction_triggered"  # payload: kind=InteractionKind, src, dst, bonus=int
EVENT_MATCH_CLEARED = "match_cleared"                  # payload: positions=[(r,c),...], tokens=list[CellView], depth=int


# ============================================================================
# OBSTACLES & OBJECTIVES
# ============================================================================
EVENT_OBSTACLE_CLEARED = "obstacle_cleared"            # payload: kind=str ('blocking'|'frozen'), positions=[(r,c),...]
EVENT_COLLECTIBLE_HARVESTED = "collectible_harvested"  # payload: positions=[(r,c),...]
EVENT_OBJECTIVE_PROGRESS = "objective_progress"        # payload: deltas=dict[ObjectiveType,int], totals=dict[ObjectiveType,int]


# ============================================================================
# GRAVITY & CASCADE
# ============================================================================
EVENT_GRAVITY_APPLIED = "gravity_applied"      # payload: moves=list[GravityMove], cascades=int
EVENT_REFILL_COMPLETED = "refill_completed"    # payload: new_tiles=[(r,c),...]
EVENT_CASCADE_STEP = "cascade_step"            # payload: depth=int, positions=[(r,c),...]
EVENT_CASCADE_COMPLETE = "cascade_complete"    # payload: depth=int
EVENT_BOARD_RESHUFFLED = "board_reshuffled"    # payload: reason=str
EVENT_BOARD_SNAPSHOT = "board_snapshot"        # payload: snapshot=PhaseSnapshot


# ============================================================================
# TURN & SESSION
# ============================================================================
EVENT_TURN_PHASE_CHANGED = "turn_phase_changed"  # payload: previous=TurnPhase, phase=TurnPhase
EVENT_TURN_COMPLETED = "turn_completed"          # payload: outcome=TurnOutcome
EVENT_SESSION_OVER = "session_over"              # payload: result=SessionResult, score=int, moves_left=int
