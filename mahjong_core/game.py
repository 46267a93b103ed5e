"""
Mahjong Game Engine

Turn and claim state machine for a four-player game. The Game object owns
the authoritative state and is its only writer; AI controllers and the UI
receive GameSnapshot copies and send actions back through step() or the
request_* commands.

Phases: DEALING -> (DRAWING <-> DISCARDING <-> CLAIM_WINDOW) -> FINISHED
"""

import logging
from enum import IntEnum
from dataclasses import dataclass, field, replace
from typing import List, Optional, Dict, Any

from .tiles import Tile
from .player import Player, Meld, MeldType
from .wall import Wall
from .rules import RuleSet, DEFAULT_RULES
from .errors import IllegalActionError, HandInvariantViolation, ControllerError
from .calls import (
    ClaimOrigin,
    QuadType,
    can_claim_quad,
    added_quad_options,
    can_claim_sequence,
    triplet_option,
)
from .shanten import is_winning_hand, is_seven_pairs

logger = logging.getLogger(__name__)


class GamePhase(IntEnum):
    """Phases of the game"""
    DEALING = 0       # Wall built, hands not dealt yet
    DRAWING = 1       # Active seat draws a tile (transient)
    DISCARDING = 2    # Active seat must discard or declare win/quad
    CLAIM_WINDOW = 3  # Other seats may claim the discard
    FINISHED = 4


class ActionType(IntEnum):
    """Types of actions a seat can take"""
    DISCARD = 0
    SEQUENCE = 1  # Claim a discard into a sequence
    TRIPLET = 2   # Claim a discard into a triplet
    QUAD = 3      # Claimed, concealed or added quad
    WIN = 4       # Self-draw win or win on a discard
    PASS = 5      # Decline every claim on a discard


class WinType(IntEnum):
    SELF_DRAW = 0
    CLAIM = 1


# Claim types in priority order; entries in the same group rank by seat proximity
CLAIM_PRIORITY = (
    (ActionType.WIN,),
    (ActionType.TRIPLET, ActionType.QUAD),
    (ActionType.SEQUENCE,),
)


@dataclass(frozen=True)
class Action:
    """
    Represents a seat action.

    Attributes:
        action_type: Type of action
        seat: Seat taking the action
        tile: Discarded tile, claimed tile, or winning tile
        meld_tiles: All tiles of the meld formed by a claim or quad
        quad_type: How a QUAD action forms its quad
    """
    action_type: ActionType
    seat: int
    tile: Optional[Tile] = None
    meld_tiles: Optional[tuple] = None
    quad_type: Optional[QuadType] = None

    def key(self) -> tuple:
        """Identity of the action down to physical tile ids"""
        return (
            self.action_type,
            self.seat,
            self.tile.id if self.tile is not None else None,
            tuple(t.id for t in self.meld_tiles) if self.meld_tiles else None,
            self.quad_type,
        )

    def __repr__(self) -> str:
        return f"Action({self.action_type.name}, S{self.seat}, {self.tile})"


@dataclass(frozen=True)
class GameMessage:
    """Event for the presentation layer: a message kind plus its parameters"""
    kind: str
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CommandResult:
    """Outcome of a request_* command"""
    accepted: bool
    legal_actions: List[Action]
    reason: Optional[str] = None


@dataclass
class PlayerView:
    """
    What one viewer may see of a seat.

    hand is None when hidden. Other viewers see concealed quads only as a
    count in hidden_quads; they are left out of melds.
    """
    seat: int
    hand: Optional[List[Tile]]
    hand_size: int
    melds: List[Meld]
    discards: List[Tile]
    seat_wind: int
    is_ai: bool
    hidden_quads: int = 0


@dataclass
class GameSnapshot:
    """Read-only copy of the game state for one viewer"""
    viewer: Optional[int]
    phase: GamePhase
    active_seat: int
    wall_remaining: int
    turn_count: int
    last_discard: Optional[Tile]
    last_discard_seat: Optional[int]
    last_draw: Optional[Tile]
    players: List[PlayerView]
    winner: Optional[int]
    win_type: Optional[WinType]
    winning_hand: Optional[List[Tile]]
    legal_actions: List[Action]
    acting_seats: List[int]


class Game:
    """
    Mahjong game engine.

    Manages the full game state and rules for a 4-player game. Transitions
    run one at a time; a command issued while another is being applied is
    rejected.

    Args:
        seed: Seed for the wall shuffle
        rules: Rule configuration
        controllers: Map of seat -> AI controller. A controller is any object
            with get_action(snapshot, seat, legal_actions) -> Action.
    """

    NUM_PLAYERS = 4

    def __init__(
        self,
        seed: Optional[int] = None,
        rules: RuleSet = DEFAULT_RULES,
        controllers: Optional[Dict[int, Any]] = None,
    ):
        self.seed = seed
        self.rules = rules
        self.controllers: Dict[int, Any] = dict(controllers or {})
        self._busy = False
        self._new_state(seed)

    def _new_state(self, seed: Optional[int]) -> None:
        """Replace the whole game state with a fresh, undealt one"""
        self.wall = Wall(seed=seed)
        self.players: List[Player] = [
            Player(
                seat=i,
                seat_wind=(i - self.rules.dealer) % self.NUM_PLAYERS + 1,
                is_ai=i in self.controllers,
            )
            for i in range(self.NUM_PLAYERS)
        ]

        self.phase = GamePhase.DEALING
        self.active_seat = self.rules.dealer
        self.turn_count = 0

        # Last action tracking
        self.last_discard: Optional[Tile] = None
        self.last_discard_seat: Optional[int] = None
        self.last_draw: Optional[Tile] = None

        # Claim window state
        self.claim_options: Dict[int, List[Action]] = {}
        self.claim_responses: Dict[int, Action] = {}

        # Result
        self.winner: Optional[int] = None
        self.win_type: Optional[WinType] = None
        self.winning_hand: Optional[List[Tile]] = None

        self.messages: List[GameMessage] = []

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def deal(self) -> None:
        """Dealing: deal and sort every hand, then wait for the dealer's draw"""
        if self.phase != GamePhase.DEALING:
            raise IllegalActionError("Game already dealt")

        hands = self.wall.deal_hands(self.NUM_PLAYERS, self.rules.hand_size)
        for player, hand in zip(self.players, hands):
            for tile in hand:
                player.add_tile(tile)
            player.hand.sort()

        self.active_seat = self.rules.dealer
        self.phase = GamePhase.DRAWING
        self._emit("game_started", dealer=self.rules.dealer, wall_remaining=self.wall.remaining)
        logger.info(f"Game dealt, seed={self.seed}, wall={self.wall.remaining}")

    def start_game(self) -> List[Action]:
        """
        Deal if needed and make the dealer's first draw, then let AI seats act
        until a human seat must decide or the game ends.
        """
        if self._busy:
            raise IllegalActionError("Another transition is in progress")
        self._busy = True
        try:
            if self.phase == GamePhase.DEALING:
                self.deal()
            if self.phase == GamePhase.DRAWING:
                self._draw()
            self._advance_ai()
        finally:
            self._busy = False
        return self.get_legal_actions(self.active_seat)

    def _draw(self, replacement: bool = False) -> None:
        """Drawing: take a tile from the wall tail for the active seat"""
        self.phase = GamePhase.DRAWING
        seat = self.active_seat
        tile = self.wall.draw()

        if tile is None:
            self._finish(None, None, None)
            self._emit("exhaustive_draw")
            logger.info("Wall exhausted, game ends without a winner")
            return

        player = self.players[seat]
        player.add_tile(tile)
        self.last_draw = tile
        self.turn_count += 1
        self._check_hand(seat)

        self.phase = GamePhase.DISCARDING
        self._emit("tile_drawn", seat=seat, replacement=replacement, wall_remaining=self.wall.remaining)

    def _finish(self, winner: Optional[int], win_type: Optional[WinType], hand: Optional[List[Tile]]) -> None:
        self.phase = GamePhase.FINISHED
        self.winner = winner
        self.win_type = win_type
        self.winning_hand = hand
        self.claim_options = {}
        self.claim_responses = {}

    def _apply(self, action: Action) -> None:
        """Validate and apply one action. Raises IllegalActionError with no state change."""
        legal = self.get_legal_actions(action.seat)
        key = action.key()
        if not any(a.key() == key for a in legal):
            raise IllegalActionError(
                f"{action!r} is not legal in phase {self.phase.name}", seat=action.seat
            )

        if self.phase == GamePhase.CLAIM_WINDOW:
            self._respond_to_claim(action)
        elif action.action_type == ActionType.DISCARD:
            self._handle_discard(action)
        elif action.action_type == ActionType.WIN:
            self._handle_self_draw_win(action)
        elif action.action_type == ActionType.QUAD:
            self._handle_own_quad(action)

    def _handle_discard(self, action: Action) -> None:
        """Discarding: move the tile to the discard pile and open the claim window"""
        player = self.players[action.seat]
        tile = player.discard_tile(action.tile.id)
        player.hand.sort()

        self.last_discard = tile
        self.last_discard_seat = action.seat
        self.last_draw = None
        self._check_hand(action.seat)
        self._emit("tile_discarded", seat=action.seat, tile=tile)

        self.claim_options = {}
        self.claim_responses = {}
        for seat in self._seats_after(action.seat):
            options = self._claim_options_for(seat, tile)
            if options:
                self.claim_options[seat] = options

        if not self.claim_options:
            self._next_turn()
            return

        self.phase = GamePhase.CLAIM_WINDOW
        self._emit("claim_window_opened", seat=action.seat, tile=tile,
                   eligible=sorted(self.claim_options))

    def _handle_self_draw_win(self, action: Action) -> None:
        player = self.players[action.seat]
        self._finish(action.seat, WinType.SELF_DRAW, player.get_hand_tiles())
        self._emit("self_draw_win", seat=action.seat, tile=action.tile)
        logger.info(f"Seat {action.seat} wins by self-draw")

    def _handle_own_quad(self, action: Action) -> None:
        """Concealed or added quad on the seat's own turn, followed by a replacement draw"""
        player = self.players[action.seat]

        if action.quad_type == QuadType.CONCEALED:
            for tile in action.meld_tiles:
                player.hand.remove_by_id(tile.id)
            player.declare_meld(Meld(
                meld_type=MeldType.CONCEALED_QUAD,
                tiles=list(action.meld_tiles),
                is_concealed=True,
            ))
        else:
            player.hand.remove_by_id(action.tile.id)
            idx = next(
                i for i, m in enumerate(player.melds)
                if m.meld_type == MeldType.TRIPLET and m.base_tile == action.tile
            )
            triplet = player.melds[idx]
            player.melds[idx] = Meld(
                meld_type=MeldType.QUAD,
                tiles=list(action.meld_tiles),
                source_seat=triplet.source_seat,
                source_tile=triplet.source_tile,
            )

        self.last_draw = None
        self._check_hand(action.seat)
        self._emit("quad_declared", seat=action.seat, quad_type=action.quad_type.name,
                   tile=action.meld_tiles[0])
        self._draw(replacement=True)

    def _respond_to_claim(self, action: Action) -> None:
        """Record one seat's response; resolve once every eligible seat has answered"""
        self.claim_responses[action.seat] = action
        if action.action_type == ActionType.PASS:
            self._emit("passed", seat=action.seat)
        if len(self.claim_responses) == len(self.claim_options):
            self._resolve_claim_window()

    def _resolve_claim_window(self) -> None:
        """
        Apply the winning claim: win beats triplet/quad beats sequence, and
        within a group the seat closest after the discarder wins.
        """
        order = self._seats_after(self.last_discard_seat)
        for group in CLAIM_PRIORITY:
            for seat in order:
                response = self.claim_responses.get(seat)
                if response is not None and response.action_type in group:
                    self._apply_claim(response)
                    return

        self._next_turn()

    def _apply_claim(self, action: Action) -> None:
        player = self.players[action.seat]
        tile = self.last_discard
        source_seat = self.last_discard_seat
        self.players[source_seat].discards.pop()

        self.claim_options = {}
        self.claim_responses = {}
        self.last_discard = None
        self.last_discard_seat = None
        self.last_draw = None

        if action.action_type == ActionType.WIN:
            hand = player.get_hand_tiles() + [tile]
            self._finish(action.seat, WinType.CLAIM, hand)
            self._emit("claim_win", seat=action.seat, tile=tile, source_seat=source_seat)
            logger.info(f"Seat {action.seat} wins on seat {source_seat}'s discard")
            return

        for t in action.meld_tiles:
            if t.id != tile.id:
                player.hand.remove_by_id(t.id)

        meld_type = {
            ActionType.SEQUENCE: MeldType.SEQUENCE,
            ActionType.TRIPLET: MeldType.TRIPLET,
            ActionType.QUAD: MeldType.QUAD,
        }[action.action_type]
        player.declare_meld(Meld(
            meld_type=meld_type,
            tiles=list(action.meld_tiles),
            source_seat=source_seat,
            source_tile=tile,
        ))

        self.active_seat = action.seat
        self._emit("claimed", seat=action.seat, claim=action.action_type.name,
                   tile=tile, source_seat=source_seat)
        self._check_hand(action.seat)

        if action.action_type == ActionType.QUAD:
            self._draw(replacement=True)
        else:
            self.phase = GamePhase.DISCARDING

    def _next_turn(self) -> None:
        """Nobody claimed: the seat after the discarder draws"""
        self.claim_options = {}
        self.claim_responses = {}
        self.active_seat = (self.last_discard_seat + 1) % self.NUM_PLAYERS
        self._draw()

    # ------------------------------------------------------------------
    # Legality
    # ------------------------------------------------------------------

    def _is_complete(self, tiles: List[Tile], melds: List[Meld]) -> bool:
        if is_winning_hand(tiles):
            return True
        return self.rules.allow_seven_pairs and not melds and is_seven_pairs(tiles)

    def _claim_options_for(self, seat: int, tile: Tile) -> List[Action]:
        """Every claim a seat may make on a discard, in enumeration order"""
        player = self.players[seat]
        hand = player.get_hand_tiles()
        options: List[Action] = []

        if self._is_complete(hand + [tile], player.melds):
            options.append(Action(ActionType.WIN, seat, tile))

        for quad in can_claim_quad(hand, tile, ClaimOrigin.DISCARD):
            options.append(Action(ActionType.QUAD, seat, tile, quad.tiles, quad.quad_type))

        triplet = triplet_option(hand, tile)
        if triplet is not None:
            options.append(Action(ActionType.TRIPLET, seat, tile, triplet))

        left_seat = (self.last_discard_seat + 1) % self.NUM_PLAYERS
        if seat == left_seat or not self.rules.sequence_from_left_only:
            for sequence in can_claim_sequence(hand, tile):
                options.append(Action(ActionType.SEQUENCE, seat, tile, sequence.tiles))

        return options

    def _turn_actions(self, seat: int) -> List[Action]:
        """Actions for the active seat while DISCARDING"""
        player = self.players[seat]
        hand = player.get_hand_tiles()
        actions: List[Action] = []

        if self.last_draw is not None and self._is_complete(hand, player.melds):
            actions.append(Action(ActionType.WIN, seat, self.last_draw))

        for quad in can_claim_quad(hand, None, ClaimOrigin.OWN_DRAW):
            actions.append(Action(ActionType.QUAD, seat, quad.tiles[0], quad.tiles, quad.quad_type))
        if self.rules.allow_added_quad:
            for quad in added_quad_options(hand, player.melds):
                actions.append(Action(ActionType.QUAD, seat, quad.from_hand[0], quad.tiles, quad.quad_type))

        for tile in hand:
            actions.append(Action(ActionType.DISCARD, seat, tile))

        return actions

    def get_legal_actions(self, seat: int) -> List[Action]:
        """
        Get all legal actions for a seat in the current state.

        Only the active seat acts while DISCARDING; during the claim window
        every eligible seat that has not responded yet may claim or pass.
        """
        if self.phase == GamePhase.DISCARDING and seat == self.active_seat:
            return self._turn_actions(seat)

        if self.phase == GamePhase.CLAIM_WINDOW:
            if seat in self.claim_options and seat not in self.claim_responses:
                return self.claim_options[seat] + [Action(ActionType.PASS, seat)]

        return []

    def acting_seats(self) -> List[int]:
        """Seats currently empowered to act"""
        if self.phase == GamePhase.DISCARDING:
            return [self.active_seat]
        if self.phase == GamePhase.CLAIM_WINDOW:
            return [s for s in self._seats_after(self.last_discard_seat)
                    if s in self.claim_options and s not in self.claim_responses]
        return []

    def _seats_after(self, seat: int) -> List[int]:
        """The other seats in turn order, starting right after seat"""
        return [(seat + i) % self.NUM_PLAYERS for i in range(1, self.NUM_PLAYERS)]

    def _check_hand(self, seat: int) -> None:
        size = self.players[seat].effective_hand_size
        if size not in (self.rules.hand_size, self.rules.hand_size + 1):
            raise HandInvariantViolation(
                f"Seat {seat} holds {size} effective tiles in phase {self.phase.name}"
            )

    # ------------------------------------------------------------------
    # Driving
    # ------------------------------------------------------------------

    def step(self, action: Action) -> List[Action]:
        """
        Apply an action, then let AI seats act.

        Raises:
            IllegalActionError: the action is not currently legal; the state
                is unchanged.
            ControllerError: the action was applied, but an AI controller
                answered with an illegal action afterwards.

        Returns:
            The legal actions now open to the acting seat
        """
        if self._busy:
            raise IllegalActionError("Another transition is in progress", seat=action.seat)
        self._busy = True
        try:
            self._apply(action)
            self._advance_ai()
        finally:
            self._busy = False
        return self.get_legal_actions(action.seat)

    def _advance_ai(self) -> None:
        """Ask AI controllers for decisions until a human seat must act or the game ends"""
        while self.phase in (GamePhase.DISCARDING, GamePhase.CLAIM_WINDOW):
            pending = [s for s in self.acting_seats() if s in self.controllers]
            if not pending:
                return
            seat = pending[0]
            snapshot = self.get_snapshot(seat)
            action = self.controllers[seat].get_action(snapshot, seat, snapshot.legal_actions)
            logger.debug(f"AI seat {seat} chose {action!r}")
            if action.seat != seat:
                logger.error(f"Controller for seat {seat} acted for seat {action.seat}")
                raise ControllerError(f"Controller for seat {seat} returned {action!r}", seat)
            try:
                self._apply(action)
            except IllegalActionError as e:
                logger.error(f"Controller for seat {seat} chose an illegal action: {e}")
                raise ControllerError(str(e), seat) from e

    def _command(self, seat: int, action: Optional[Action], reason: str) -> CommandResult:
        if action is None:
            logger.warning(f"Rejected command from seat {seat}: {reason}")
            return CommandResult(False, self.get_legal_actions(seat), reason)
        try:
            legal = self.step(action)
        except IllegalActionError as e:
            logger.warning(f"Rejected command from seat {seat}: {e}")
            return CommandResult(False, self.get_legal_actions(seat), str(e))
        except ControllerError as e:
            # The command itself went through; report the stalled controller
            return CommandResult(True, self.get_legal_actions(seat), f"seat {e.seat} controller: {e}")
        return CommandResult(True, legal)

    def request_discard(self, seat: int, tile_id: int) -> CommandResult:
        """Discard the physical tile with the given id"""
        action = next(
            (a for a in self.get_legal_actions(seat)
             if a.action_type == ActionType.DISCARD and a.tile.id == tile_id),
            None,
        )
        return self._command(seat, action, f"cannot discard tile {tile_id}")

    def request_claim(self, seat: int, claim_type: ActionType, option_index: int = 0) -> CommandResult:
        """
        Take the option_index-th legal option of a claim type (WIN, TRIPLET,
        QUAD or SEQUENCE), either on a discard or on the seat's own turn.
        """
        options = [a for a in self.get_legal_actions(seat) if a.action_type == claim_type]
        action = options[option_index] if 0 <= option_index < len(options) else None
        return self._command(seat, action, f"no {ActionType(claim_type).name} option {option_index}")

    def request_pass(self, seat: int) -> CommandResult:
        action = next(
            (a for a in self.get_legal_actions(seat) if a.action_type == ActionType.PASS),
            None,
        )
        return self._command(seat, action, "nothing to pass on")

    def request_sort(self, seat: int) -> CommandResult:
        """Cosmetic regrouping of a concealed hand; never affects the rules"""
        self.players[seat].hand.sort_grouped()
        return CommandResult(True, self.get_legal_actions(seat))

    def request_new_game(self, seed: Optional[int] = None) -> CommandResult:
        """Discard the current game wholesale and deal a new one"""
        if self._busy:
            return CommandResult(False, [], "Another transition is in progress")
        self.seed = seed
        self._new_state(seed)
        self.start_game()
        human = next((p.seat for p in self.players if not p.is_ai), self.active_seat)
        return CommandResult(True, self.get_legal_actions(human))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _emit(self, kind: str, **params) -> None:
        message = GameMessage(kind, params)
        self.messages.append(message)
        logger.debug(f"{kind}: {params}")

    def get_snapshot(self, viewer: Optional[int] = None) -> GameSnapshot:
        """
        Get a read-only copy of the state as seen by viewer (None for a
        spectator). Concealed hands of other seats are hidden.
        """
        players = [
            PlayerView(
                seat=p.seat,
                hand=p.get_hand_tiles() if p.seat == viewer else None,
                hand_size=len(p.hand),
                melds=[replace(m, tiles=list(m.tiles)) for m in p.melds
                       if p.seat == viewer or m.meld_type != MeldType.CONCEALED_QUAD],
                discards=list(p.discards),
                seat_wind=p.seat_wind,
                is_ai=p.is_ai,
                hidden_quads=0 if p.seat == viewer else sum(
                    1 for m in p.melds if m.meld_type == MeldType.CONCEALED_QUAD
                ),
            )
            for p in self.players
        ]
        return GameSnapshot(
            viewer=viewer,
            phase=self.phase,
            active_seat=self.active_seat,
            wall_remaining=self.wall.remaining,
            turn_count=self.turn_count,
            last_discard=self.last_discard,
            last_discard_seat=self.last_discard_seat,
            last_draw=self.last_draw if viewer == self.active_seat else None,
            players=players,
            winner=self.winner,
            win_type=self.win_type,
            winning_hand=list(self.winning_hand) if self.winning_hand is not None else None,
            legal_actions=self.get_legal_actions(viewer) if viewer is not None else [],
            acting_seats=self.acting_seats(),
        )

    def __repr__(self) -> str:
        return f"Game(phase={self.phase.name}, active={self.active_seat}, wall={self.wall.remaining})"
