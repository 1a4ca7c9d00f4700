import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from esper import World

from gemcascade.components.level import ObjectiveType
from gemcascade.components.session_state import SessionResult, SessionState
from gemcascade.components.turn_state import TurnPhase, TurnState
from gemcascade.errors import InvalidSwap
from gemcascade.events.bus import (
    EventBus,
    EVENT_BOARD_RESHUFFLED,
    EVENT_BOARD_SNAPSHOT,
    EVENT_CASCADE_COMPLETE,
    EVENT_CASCADE_STEP,
    EVENT_COLLECTIBLE_HARVESTED,
    EVENT_GRAVITY_APPLIED,
    EVENT_INTERACTION_TRIGGERED,
    EVENT_MATCH_CLEARED,
    EVENT_MATCH_FOUND,
    EVENT_OBJECTIVE_PROGRESS,
    EVENT_OBSTACLE_CLEARED,
    EVENT_REFILL_COMPLETED,
    EVENT_SESSION_OVER,
    EVENT_SPECIAL_CREATED,
    EVENT_TILE_SWAP_INVALID,
    EVENT_TILE_SWAP_REQUEST,
    EVENT_TILE_SWAP_REVERTED,
    EVENT_TILE_SWAP_VALID,
    EVENT_TURN_COMPLETED,
    EVENT_TURN_PHASE_CHANGED,
)
from gemcascade.systems.board_ops import Position, get_palette, swap_cells, token_at, validate_swap
from gemcascade.systems.explosion import apply_explosion, propagate
from gemcascade.systems.gravity import settle_board
from gemcascade.systems.interactions import InteractionKind, InteractionResult, apply_interaction, resolve_interaction
from gemcascade.systems.match import MatchResult, Transformation, find_matches
from gemcascade.systems.moves import find_valid_swaps, respawn_full_board
from gemcascade.systems.objectives import empty_counts, merge_counts, objective_deltas, objectives_met, remaining
from gemcascade.systems.scoring import iteration_score
from gemcascade.systems.turn_state_utils import (
    get_level,
    get_or_create_turn_state,
    get_scoring_rules,
    get_session_state,
)
from gemcascade.utils.snapshot import PhaseSnapshot, take_snapshot

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TurnOutcome:
    """Result of one swap request, pushed outward after the board settles."""
    src: Position
    dst: Position
    accepted: bool = False
    reason: Optional[str] = None
    score_delta: int = 0
    bonus: int = 0
    combo_depth: int = 0
    removed: int = 0
    objective_deltas: Dict[ObjectiveType, int] = field(default_factory=empty_counts)
    interaction: Optional[InteractionKind] = None
    specials_created: List[Transformation] = field(default_factory=list)
    reshuffled: bool = False
    terminal: Optional[SessionResult] = None
    moves_left: int = 0
    snapshots: List[PhaseSnapshot] = field(default_factory=list)

    @property
    def final_snapshot(self) -> Optional[PhaseSnapshot]:
        return self.snapshots[-1] if self.snapshots else None


class TurnOrchestrator:
    """Drives one player move from swap request to a settled board.

    Flow:
      IDLE -> SWAPPING: swap applied; interaction check, else match check.
      SWAPPING -> TURN_REJECTED -> IDLE: nothing triggered, swap reverted.
      SWAPPING -> RESOLVING (repeated per cascade level): transform, explode,
        score, gravity/refill, re-detect.
      RESOLVING -> IDLE, or SESSION_OVER when the targets are met or moves run out.
    Every phase boundary emits events and records a snapshot, so a host can
    pace animation without affecting the logical result.
    """

    def __init__(self, world: World, event_bus: EventBus, *, record_snapshots: bool = True):
        self.world = world
        self.event_bus = event_bus
        self.record_snapshots = record_snapshots
        self.last_outcome: Optional[TurnOutcome] = None
        self.event_bus.subscribe(EVENT_TILE_SWAP_REQUEST, self.on_swap_request)
        get_or_create_turn_state(self.world)

    @property
    def phase(self) -> TurnPhase:
        return self._turn_state().phase

    def _turn_state(self) -> TurnState:
        return get_or_create_turn_state(self.world)

    def on_swap_request(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if src is None or dst is None:
            return
        self.request_swap(tuple(src), tuple(dst))

    def request_swap(self, src: Position, dst: Position) -> TurnOutcome:
        """Process one swap to completion. Never raises for an illegal request."""
        session = get_session_state(self.world)
        state = self._turn_state()
        outcome = TurnOutcome(src=src, dst=dst, moves_left=session.moves_left)
        if session.is_over:
            return self._reject_invalid(outcome, "session_over")
        if session.moves_left <= 0:
            return self._reject_invalid(outcome, "out_of_moves")
        if state.phase is not TurnPhase.IDLE:
            return self._reject_invalid(outcome, "busy")
        try:
            validate_swap(self.world, src, dst)
        except InvalidSwap as exc:
            return self._reject_invalid(outcome, exc.reason)

        self._set_phase(TurnPhase.SWAPPING)
        swap_cells(self.world, src, dst)
        self._snapshot(outcome, "swap", 0)
        interaction = resolve_interaction(self.world, src, dst, get_scoring_rules(self.world))
        matches: Optional[MatchResult] = None
        if interaction is None:
            matches = find_matches(self.world)
            if not matches:
                return self._reject_no_match(outcome, session)

        self.event_bus.emit(EVENT_TILE_SWAP_VALID, src=src, dst=dst)
        outcome.accepted = True
        session.moves_left -= 1
        session.moves_used += 1
        logger.debug(f"Swap {src}<->{dst} accepted; {session.moves_left} moves left")
        self._resolve(outcome, session, interaction, matches)
        self._finalize(outcome, session)
        return outcome

    def _reject_invalid(self, outcome: TurnOutcome, reason: str) -> TurnOutcome:
        logger.debug(f"Swap {outcome.src}<->{outcome.dst} rejected: {reason}")
        outcome.reason = reason
        self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=outcome.src, dst=outcome.dst, reason=reason)
        self.last_outcome = outcome
        return outcome

    def _reject_no_match(self, outcome: TurnOutcome, session: SessionState) -> TurnOutcome:
        swap_cells(self.world, outcome.src, outcome.dst)
        outcome.reason = "no_match"
        self._set_phase(TurnPhase.TURN_REJECTED)
        self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=outcome.src, dst=outcome.dst, reason="no_match")
        self.event_bus.emit(EVENT_TILE_SWAP_REVERTED, src=outcome.src, dst=outcome.dst)
        self._snapshot(outcome, "revert", 0)
        if get_level(self.world).rejected_swap_costs_move:
            session.moves_left -= 1
            session.moves_used += 1
            outcome.terminal = self._check_termination(session)
        outcome.moves_left = session.moves_left
        if outcome.terminal is None:
            self._set_phase(TurnPhase.IDLE)
        self.last_outcome = outcome
        self.event_bus.emit(EVENT_TURN_COMPLETED, outcome=outcome)
        return outcome

    def _resolve(
        self,
        outcome: TurnOutcome,
        session: SessionState,
        interaction: Optional[InteractionResult],
        matches: Optional[MatchResult],
    ) -> None:
        state = self._turn_state()
        rules = get_scoring_rules(self.world)
        objective_color = get_palette(self.world).objective_color
        level = get_level(self.world)
        rng = getattr(self.world, "random", None)
        state.cascade_active = True
        depth = 0
        while True:
            depth += 1
            state.cascade_depth = depth
            self._set_phase(TurnPhase.RESOLVING)
            specials: List[Transformation] = []
            bonus = 0
            if interaction is not None:
                apply_interaction(self.world, interaction)
                self.event_bus.emit(
                    EVENT_INTERACTION_TRIGGERED,
                    kind=interaction.kind,
                    src=outcome.src,
                    dst=outcome.dst,
                    bonus=interaction.bonus,
                )
                self.event_bus.emit(EVENT_CASCADE_STEP, depth=depth, positions=list(interaction.seeds))
                plan = propagate(self.world, interaction.seeds, spent=interaction.spent)
                outcome.interaction = interaction.kind
                bonus = interaction.bonus
                interaction = None
            else:
                positions = matches.positions
                self.event_bus.emit(EVENT_CASCADE_STEP, depth=depth, positions=positions)
                self.event_bus.emit(EVENT_MATCH_FOUND, positions=positions, size=len(positions), depth=depth)
                specials = self._apply_transformations(matches)
                plan = propagate(self.world, matches.matched, anchors=matches.anchors)

            report = apply_explosion(self.world, plan)
            self.event_bus.emit(
                EVENT_MATCH_CLEARED,
                positions=report.removed_positions,
                tokens=report.removed,
                depth=depth,
            )
            if report.destroyed_blockers:
                self.event_bus.emit(EVENT_OBSTACLE_CLEARED, kind="blocking", positions=report.destroyed_blockers)
            if report.thawed:
                self.event_bus.emit(EVENT_OBSTACLE_CLEARED, kind="frozen", positions=report.thawed)
            self._snapshot(outcome, "explosion", depth)

            gravity = settle_board(self.world, rng)
            self.event_bus.emit(EVENT_GRAVITY_APPLIED, moves=gravity.moves, cascades=gravity.cascades)
            if gravity.harvested:
                self.event_bus.emit(EVENT_COLLECTIBLE_HARVESTED, positions=gravity.harvested)
            self.event_bus.emit(EVENT_REFILL_COMPLETED, new_tiles=gravity.spawned)
            self._snapshot(outcome, "refill", depth)

            gained = iteration_score(len(report.removed), depth, rules, specials_created=len(specials)) + bonus
            deltas = objective_deltas(report, gravity, objective_color)
            session.score += gained
            merge_counts(session.objective_counts, deltas)
            merge_counts(outcome.objective_deltas, deltas)
            outcome.score_delta += gained
            outcome.bonus += bonus
            outcome.removed += len(report.removed)
            outcome.specials_created.extend(specials)
            if any(deltas.values()):
                self.event_bus.emit(
                    EVENT_OBJECTIVE_PROGRESS,
                    deltas=deltas,
                    totals=dict(session.objective_counts),
                    remaining=remaining(session, level.objectives),
                )
            logger.debug(
                f"Cascade depth {depth}: removed {len(report.removed)}, "
                f"detonations {report.detonations}, +{gained} points"
            )

            matches = find_matches(self.world)
            if not matches:
                break
        outcome.combo_depth = depth
        state.cascade_active = False
        self.event_bus.emit(EVENT_CASCADE_COMPLETE, depth=depth)

    def _apply_transformations(self, matches: MatchResult) -> List[Transformation]:
        applied: List[Transformation] = []
        for transformation in matches.transformations:
            token = token_at(self.world, transformation.position)
            if token is None or token.token_id != transformation.token_id:
                continue
            token.kind = transformation.kind
            applied.append(transformation)
            self.event_bus.emit(
                EVENT_SPECIAL_CREATED,
                position=transformation.position,
                token_id=transformation.token_id,
                kind=transformation.kind,
            )
        return applied

    def _finalize(self, outcome: TurnOutcome, session: SessionState) -> None:
        if not find_valid_swaps(self.world):
            logger.warning("No valid swaps left on a settled board; reshuffling")
            respawn_full_board(self.world, rng=getattr(self.world, "random", None))
            outcome.reshuffled = True
            self.event_bus.emit(EVENT_BOARD_RESHUFFLED, reason="stalemate")
            self._snapshot(outcome, "reshuffle", outcome.combo_depth)
        outcome.terminal = self._check_termination(session)
        outcome.moves_left = session.moves_left
        state = self._turn_state()
        state.turns_completed += 1
        if outcome.terminal is None:
            self._set_phase(TurnPhase.IDLE)
        self.last_outcome = outcome
        self.event_bus.emit(EVENT_TURN_COMPLETED, outcome=outcome)

    def _check_termination(self, session: SessionState) -> Optional[SessionResult]:
        level = get_level(self.world)
        result: Optional[SessionResult] = None
        if session.score >= session.target_score and objectives_met(session, level):
            result = SessionResult.WON
        elif session.moves_left <= 0:
            result = SessionResult.OUT_OF_MOVES
        if result is None:
            return None
        session.result = result
        self._set_phase(TurnPhase.SESSION_OVER)
        logger.info(f"Session over: {result.name} with score {session.score} after {session.moves_used} moves")
        self.event_bus.emit(
            EVENT_SESSION_OVER,
            result=result,
            score=session.score,
            moves_left=session.moves_left,
        )
        return result

    def _set_phase(self, phase: TurnPhase) -> None:
        state = self._turn_state()
        previous = state.phase
        if previous is phase:
            return
        state.phase = phase
        self.event_bus.emit(EVENT_TURN_PHASE_CHANGED, previous=previous, phase=phase)

    def _snapshot(self, outcome: TurnOutcome, phase: str, depth: int) -> None:
        snapshot = take_snapshot(self.world, phase, depth)
        if self.record_snapshots:
            outcome.snapshots.append(snapshot)
        self.event_bus.emit(EVENT_BOARD_SNAPSHOT, snapshot=snapshot)
