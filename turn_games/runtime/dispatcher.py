"""Transport-independent request dispatcher.

Every request returns the same response envelope; failures carry a stable
code from `turn_games.protocol.errors` and never a partially applied state.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from turn_games.protocol.constants import GAME_DISPLAY_NAMES
from turn_games.protocol.errors import (
    INTERNAL_ERROR,
    INVALID_ARGS,
    OK,
    UNKNOWN_COMMAND,
    GameError,
)
from turn_games.protocol.models import (
    CreateGameRequest,
    GameRef,
    GameSession,
    ListRequest,
    MoveRequest,
    Request,
    Response,
    ValidMovesRequest,
    WaitRequest,
)
from turn_games.runtime.agent_turn import AgentTurn
from turn_games.runtime.orchestrator import SessionOrchestrator
from turn_games.runtime.session_store import FileSessionStore, SessionStore
from turn_games.runtime.synchronizer import TurnSynchronizer
from turn_games.settings import Settings, load_settings


logger = logging.getLogger(__name__)

Handler = Callable[[Any], Awaitable[Dict[str, Any]]]


def _session_fields(session: GameSession) -> Dict[str, Any]:
    state = session.game_state
    return {
        "game_over": state.status == "finished",
        "winner": state.winner,
        "game_id": state.id,
    }


class Dispatcher:
    def __init__(
        self,
        plugins: Dict[str, object],
        session_store: Optional[SessionStore] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or load_settings()
        self.plugins = plugins
        self.session_store = session_store or FileSessionStore(self.settings.sessions_dir)
        self.orchestrator = SessionOrchestrator(self.session_store, plugins)
        self.synchronizer = TurnSynchronizer(self.orchestrator.get_view)
        self.agent_turn = AgentTurn(self.orchestrator, agent_timeout_seconds=self.settings.agent_timeout_seconds)
        self._handlers: Dict[str, Tuple[Type[BaseModel], Handler]] = {
            "create": (CreateGameRequest, self._create),
            "move": (MoveRequest, self._move),
            "get": (GameRef, self._get),
            "list": (ListRequest, self._list),
            "view": (GameRef, self._view),
            "agent_list": (ListRequest, self._agent_list),
            "valid_moves": (ValidMovesRequest, self._valid_moves),
            "wait": (WaitRequest, self._wait),
            "play": (GameRef, self._play),
            "analyze": (GameRef, self._analyze),
            "delete": (GameRef, self._delete),
        }

    @property
    def commands(self) -> Tuple[str, ...]:
        return tuple(sorted(self._handlers))

    def _response(
        self,
        *,
        ok: bool,
        code: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        game_over: bool = False,
        winner: Optional[str] = None,
        game_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        response = Response(
            ok=ok,
            code=code,
            message=message,
            data=data or {},
            game_over=game_over,
            winner=winner,
            game_id=game_id,
        )
        return response.model_dump(mode="json")

    async def dispatch(self, raw_request: Dict[str, Any]) -> Dict[str, Any]:
        try:
            request = Request.model_validate(raw_request)
        except ValidationError as exc:
            return self._response(ok=False, code=INVALID_ARGS, message=str(exc))

        entry = self._handlers.get(request.command)
        if entry is None:
            return self._response(
                ok=False,
                code=UNKNOWN_COMMAND,
                message=f"Unknown command '{request.command}'",
            )

        args_model, handler = entry
        game_id = request.args.get("game_id") if isinstance(request.args.get("game_id"), str) else None
        try:
            args = args_model.model_validate(request.args)
            return await handler(args)
        except ValidationError as exc:
            return self._response(ok=False, code=INVALID_ARGS, message=str(exc), game_id=game_id)
        except GameError as exc:
            logger.info("%s failed with %s: %s", request.command, exc.code, exc)
            return self._response(ok=False, code=exc.code, message=str(exc), game_id=game_id)
        except Exception as exc:
            logger.exception("Unexpected failure handling %s", request.command)
            return self._response(ok=False, code=INTERNAL_ERROR, message=str(exc), game_id=game_id)

    async def _create(self, args: CreateGameRequest) -> Dict[str, Any]:
        existing = None
        if args.game_id:
            existing = await self.session_store.get(args.game_id)
        session = await self.orchestrator.create_game(
            args.game_type,
            player_name=args.player_name,
            game_id=args.game_id,
            difficulty=args.difficulty,
            options=args.options,
        )
        name = GAME_DISPLAY_NAMES[args.game_type]
        if existing is not None and existing == session:
            message = f"Found existing {name} game with ID: {session.game_id}"
        else:
            message = f"Created new {name} game with ID: {session.game_id}"
        return self._response(
            ok=True,
            code=OK,
            message=message,
            data={"session": session.model_dump(mode="json")},
            **_session_fields(session),
        )

    async def _move(self, args: MoveRequest) -> Dict[str, Any]:
        session = await self.orchestrator.submit_move(args.game_type, args.game_id, args.player_id, args.move)
        return self._response(
            ok=True,
            code=OK,
            message="Move applied",
            data={"session": session.model_dump(mode="json")},
            **_session_fields(session),
        )

    async def _get(self, args: GameRef) -> Dict[str, Any]:
        session = await self.orchestrator.get_session(args.game_type, args.game_id)
        return self._response(
            ok=True,
            code=OK,
            message="Game retrieved",
            data={"session": session.model_dump(mode="json")},
            **_session_fields(session),
        )

    async def _list(self, args: ListRequest) -> Dict[str, Any]:
        sessions = await self.orchestrator.list_sessions(args.game_type)
        return self._response(
            ok=True,
            code=OK,
            message=f"{len(sessions)} game(s) found",
            data={"sessions": [session.model_dump(mode="json") for session in sessions]},
        )

    async def _view(self, args: GameRef) -> Dict[str, Any]:
        view = await self.orchestrator.get_view(args.game_type, args.game_id)
        return self._response(
            ok=True,
            code=OK,
            message="Sanitized view retrieved",
            data={"session": view.model_dump(mode="json")},
            **_session_fields(view),
        )

    async def _agent_list(self, args: ListRequest) -> Dict[str, Any]:
        views = await self.orchestrator.list_views(args.game_type)
        return self._response(
            ok=True,
            code=OK,
            message=f"{len(views)} game(s) found",
            data={"sessions": [view.model_dump(mode="json") for view in views]},
        )

    async def _valid_moves(self, args: ValidMovesRequest) -> Dict[str, Any]:
        moves = await self.orchestrator.valid_moves(args.game_type, args.game_id, args.player_id)
        return self._response(
            ok=True,
            code=OK,
            message=f"{len(moves)} valid move(s)",
            data={"moves": [move.model_dump() for move in moves]},
            game_id=args.game_id,
        )

    async def _wait(self, args: WaitRequest) -> Dict[str, Any]:
        timeout = args.timeout_seconds if args.timeout_seconds is not None else self.settings.poll_timeout_seconds
        interval = (
            args.poll_interval_seconds
            if args.poll_interval_seconds is not None
            else self.settings.poll_interval_seconds
        )
        outcome = await self.synchronizer.wait_for_move(args.game_type, args.game_id, timeout, interval)
        state = outcome.game_state
        return self._response(
            ok=True,
            code=OK,
            message=outcome.message,
            data={"outcome": outcome.model_dump(mode="json")},
            game_over=state.status == "finished",
            winner=state.winner,
            game_id=args.game_id,
        )

    async def _play(self, args: GameRef) -> Dict[str, Any]:
        result = await self.agent_turn.play(args.game_type, args.game_id)
        return self._response(
            ok=True,
            code=OK,
            message=result.message,
            data={
                "move": result.move.model_dump(),
                "difficulty": result.difficulty,
                "session": result.session.model_dump(mode="json"),
            },
            **_session_fields(result.session),
        )

    async def _analyze(self, args: GameRef) -> Dict[str, Any]:
        analysis = await self.agent_turn.analyze(args.game_type, args.game_id)
        return self._response(
            ok=True,
            code=OK,
            message="Game analysed",
            data=analysis,
            game_over=analysis["status"] == "finished",
            winner=analysis["winner"],
            game_id=args.game_id,
        )

    async def _delete(self, args: GameRef) -> Dict[str, Any]:
        await self.orchestrator.delete_game(args.game_type, args.game_id)
        return self._response(ok=True, code=OK, message="Game deleted", game_id=args.game_id)
