"""Session storage: the async key-value contract and two implementations."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from pydantic import ValidationError

from turn_games.protocol.errors import MalformedInputError, StorageError
from turn_games.protocol.models import GameSession
from turn_games.runtime.serialization import dump_session, load_session


logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Key-value store for whole session documents, keyed by game id.

    Writes are all-or-nothing; failures surface as `StorageError`.
    """

    async def get(self, game_id: str) -> Optional[GameSession]:
        ...

    async def set(self, game_id: str, session: GameSession) -> None:
        ...

    async def delete(self, game_id: str) -> bool:
        ...

    async def list_by_type(self, game_type: str) -> List[GameSession]:
        ...


class MemorySessionStore:
    """Process-local store. Keeps serialized documents so callers never share objects."""

    def __init__(self) -> None:
        self._documents: Dict[str, str] = {}

    async def get(self, game_id: str) -> Optional[GameSession]:
        payload = self._documents.get(game_id)
        return load_session(payload) if payload is not None else None

    async def set(self, game_id: str, session: GameSession) -> None:
        self._documents[game_id] = dump_session(session)

    async def delete(self, game_id: str) -> bool:
        return self._documents.pop(game_id, None) is not None

    async def list_by_type(self, game_type: str) -> List[GameSession]:
        sessions = [load_session(payload) for payload in self._documents.values()]
        return [session for session in sessions if session.game_type == game_type]


class FileSessionStore:
    """Disk-backed store: one JSON document per game under `root_dir`."""

    def __init__(self, root_dir: str):
        self.root_dir = Path(root_dir)
        self.root_dir.mkdir(parents=True, exist_ok=True)

    def _session_path(self, game_id: str) -> Path:
        if not game_id or "/" in game_id or "\\" in game_id or game_id.startswith("."):
            raise MalformedInputError(f"Unusable game id {game_id!r}")
        return self.root_dir / f"{game_id}.json"

    def _read(self, path: Path) -> Optional[GameSession]:
        try:
            payload = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Could not read {path.name}: {exc}") from exc
        try:
            return load_session(payload)
        except (ValidationError, json.JSONDecodeError) as exc:
            raise StorageError(f"Corrupt session document {path.name}") from exc

    def _write(self, path: Path, payload: str) -> None:
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            raise StorageError(f"Could not write {path.name}: {exc}") from exc

    def _remove(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise StorageError(f"Could not delete {path.name}: {exc}") from exc
        return True

    def _read_all(self) -> List[GameSession]:
        sessions = []
        for path in sorted(self.root_dir.glob("*.json")):
            session = self._read(path)
            if session is not None:
                sessions.append(session)
        return sessions

    async def get(self, game_id: str) -> Optional[GameSession]:
        return await asyncio.to_thread(self._read, self._session_path(game_id))

    async def set(self, game_id: str, session: GameSession) -> None:
        path = self._session_path(game_id)
        await asyncio.to_thread(self._write, path, dump_session(session))
        logger.debug("Stored session %s (%s)", game_id, session.game_type)

    async def delete(self, game_id: str) -> bool:
        removed = await asyncio.to_thread(self._remove, self._session_path(game_id))
        if removed:
            logger.debug("Deleted session %s", game_id)
        return removed

    async def list_by_type(self, game_type: str) -> List[GameSession]:
        sessions = await asyncio.to_thread(self._read_all)
        return [session for session in sessions if session.game_type == game_type]
