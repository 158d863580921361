"""Session orchestration: the only code path that mutates stored games."""

from __future__ import annotations

import asyncio
import logging
import weakref
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from turn_games.plugins.base import Clock, utc_now
from turn_games.protocol.constants import (
    AI_PLAYER_ID,
    DEFAULT_AI_NAME,
    DEFAULT_DIFFICULTY,
    DEFAULT_PLAYER_NAME,
    HUMAN_PLAYER_ID,
)
from turn_games.protocol.errors import (
    ConflictError,
    InvalidMoveError,
    MalformedInputError,
    NotFoundError,
)
from turn_games.protocol.models import GameMove, GameSession, Player
from turn_games.registry import require_plugin
from turn_games.runtime.sanitizer import sanitize_session, sanitize_sessions
from turn_games.runtime.serialization import state_hash
from turn_games.runtime.session_store import SessionStore


logger = logging.getLogger(__name__)


class SessionOrchestrator:
    """Creates games and applies moves through the rules engines.

    Load, validate, apply and persist for one game id run under a per-id
    lock, and the stored `updated_at` is re-checked before writing so a
    second process updating the same record is reported as a conflict
    instead of being overwritten.
    """

    def __init__(self, store: SessionStore, plugins: Dict[str, object], clock: Clock = utc_now):
        self.store = store
        self.plugins = plugins
        self._clock = clock
        # Entries disappear once no coroutine holds or awaits the lock.
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, game_id: str) -> asyncio.Lock:
        lock = self._locks.get(game_id)
        if lock is None:
            lock = self._locks[game_id] = asyncio.Lock()
        return lock

    async def _load(self, game_type: str, game_id: str) -> GameSession:
        session = await self.store.get(game_id)
        if session is None or session.game_type != game_type:
            raise NotFoundError(f"Game not found: game://{game_type}/{game_id}")
        return session

    def _parse_move(self, rules: Any, move: Any) -> BaseModel:
        if isinstance(move, rules.move_model):
            return move
        if isinstance(move, BaseModel):
            move = move.model_dump()
        try:
            return rules.move_model.model_validate(move)
        except ValidationError as exc:
            raise MalformedInputError(f"Malformed {rules.game_type} move: {exc}") from exc

    async def create_game(
        self,
        game_type: str,
        player_name: Optional[str] = None,
        game_id: Optional[str] = None,
        difficulty: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> GameSession:
        plugin = require_plugin(self.plugins, game_type)
        supports_custom_id = bool(plugin.manifest().get("supports_custom_id"))

        players = [
            Player(id=HUMAN_PLAYER_ID, name=player_name or DEFAULT_PLAYER_NAME, is_ai=False),
            Player(id=AI_PLAYER_ID, name=DEFAULT_AI_NAME, is_ai=True),
        ]
        try:
            state = plugin.rules.get_initial_state(players, options or {})
        except ValueError as exc:
            raise MalformedInputError(str(exc)) from exc
        if game_id:
            state = state.model_copy(update={"id": game_id})

        async with self._lock_for(state.id):
            existing = await self.store.get(state.id)
            if existing is not None:
                if existing.game_type != game_type:
                    raise ConflictError(f"Game id {state.id} is already used by a {existing.game_type} game")
                if supports_custom_id:
                    logger.info("Found existing %s game %s", game_type, state.id)
                    return existing
                logger.warning("Replacing existing %s game %s", game_type, state.id)

            session = GameSession(
                game_state=state,
                game_type=game_type,
                history=[],
                difficulty=difficulty or DEFAULT_DIFFICULTY,
            )
            await self.store.set(state.id, session)

        logger.info("Created %s game %s (difficulty=%s)", game_type, state.id, session.difficulty)
        return session

    async def submit_move(self, game_type: str, game_id: str, player_id: str, move: Any) -> GameSession:
        """Validate and apply one move, returning the canonical updated session.

        Raises NotFoundError, MalformedInputError or InvalidMoveError without
        touching the stored record; storage failures propagate unchanged.
        """
        rules = require_plugin(self.plugins, game_type).rules
        parsed = self._parse_move(rules, move)

        async with self._lock_for(game_id):
            session = await self._load(game_type, game_id)
            state = session.game_state
            pre_hash = state_hash(session)

            if not rules.validate_move(state, parsed, player_id):
                logger.info(
                    "Rejected move from %s in %s game %s: %s",
                    player_id,
                    game_type,
                    game_id,
                    parsed.model_dump(),
                )
                raise InvalidMoveError(f"Invalid move for {player_id} in {game_type} game {game_id}")

            new_state = rules.apply_move(state, parsed, player_id)
            entry = GameMove(player_id=player_id, move=parsed, timestamp=self._clock())

            result = rules.check_game_end(new_state)
            if result is not None:
                new_state = new_state.model_copy(update={"status": "finished", "winner": result.winner})

            updated = session.model_copy(
                update={"game_state": new_state, "history": [*session.history, entry]},
                deep=True,
            )

            current = await self.store.get(game_id)
            if current is None or current.game_state.updated_at != state.updated_at:
                raise ConflictError(f"Game {game_id} changed while the move was being processed")
            await self.store.set(game_id, updated)

        logger.info(
            "Applied move from %s in %s game %s (%s -> %s)%s",
            player_id,
            game_type,
            game_id,
            pre_hash[:12],
            state_hash(updated)[:12],
            f"; finished: {result.reason}" if result is not None else "",
        )
        return updated

    async def get_session(self, game_type: str, game_id: str) -> GameSession:
        return await self._load(game_type, game_id)

    async def list_sessions(self, game_type: str) -> List[GameSession]:
        require_plugin(self.plugins, game_type)
        return await self.store.list_by_type(game_type)

    async def get_view(self, game_type: str, game_id: str) -> GameSession:
        """Sanitized read; the only single-game read the agent may use."""
        return sanitize_session(await self._load(game_type, game_id))

    async def list_views(self, game_type: str) -> List[GameSession]:
        return sanitize_sessions(await self.list_sessions(game_type))

    async def valid_moves(self, game_type: str, game_id: str, player_id: str) -> List[BaseModel]:
        rules = require_plugin(self.plugins, game_type).rules
        session = await self._load(game_type, game_id)
        return rules.get_valid_moves(session.game_state, player_id)

    async def delete_game(self, game_type: str, game_id: str) -> None:
        async with self._lock_for(game_id):
            await self._load(game_type, game_id)
            await self.store.delete(game_id)
        logger.info("Deleted %s game %s", game_type, game_id)
