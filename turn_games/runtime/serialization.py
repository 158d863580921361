"""Deterministic serialization helpers used by the session stores."""

from __future__ import annotations

import hashlib
import json
from typing import Any

from pydantic import BaseModel

from turn_games.protocol.models import GameSession


def stable_json_dumps(obj: Any) -> str:
    if isinstance(obj, BaseModel):
        obj = obj.model_dump(mode="json")
    return json.dumps(obj, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def state_hash(obj: Any) -> str:
    return hashlib.sha256(stable_json_dumps(obj).encode("utf-8")).hexdigest()


def dump_session(session: GameSession) -> str:
    return stable_json_dumps(session)


def load_session(payload: str) -> GameSession:
    return GameSession.model_validate_json(payload)
