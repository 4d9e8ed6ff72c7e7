"""Talent data store.

Talent records and career paths live in a JSON document:

    {
      "talents": [{"talentId": "...", "fullname": "...", "email": "...", ...}],
      "careerPaths": [{"id": "...", "title": "..."}]
    }

The service only depends on the get_talent / get_career_path_title pair, so any
other backend can be dropped in.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Protocol

logger = logging.getLogger(__name__)


class TalentStoreError(Exception):
    """Base class for data-store failures."""


class TalentNotFoundError(TalentStoreError):
    def __init__(self, talent_id: str):
        super().__init__(f"Talent not found: {talent_id}")
        self.talent_id = talent_id


class TalentStoreAccessError(TalentStoreError):
    """Raised when the store cannot be read with the configured permissions."""


class TalentStore(Protocol):
    def get_talent(self, talent_id: str) -> dict:
        ...

    def get_career_path_title(self, path_id: str) -> str | None:
        ...


class InMemoryTalentStore:
    def __init__(self, talents=(), career_paths=()):
        self._talents = {str(t.get("talentId")): dict(t) for t in talents}
        self._paths = {str(p.get("id")): p.get("title") for p in career_paths}

    def get_talent(self, talent_id: str) -> dict:
        try:
            return dict(self._talents[str(talent_id)])
        except KeyError:
            raise TalentNotFoundError(talent_id) from None

    def get_career_path_title(self, path_id: str) -> str | None:
        if not path_id:
            return None
        return self._paths.get(str(path_id))


class JsonTalentStore:
    """Reads the JSON document on every lookup so edits show up without a restart."""

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> InMemoryTalentStore:
        if not os.path.exists(self.path):
            raise TalentStoreError(f"Talent store not found: {self.path}")
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except PermissionError as e:
            raise TalentStoreAccessError(
                f"Talent store access not authorized: {self.path}"
            ) from e
        except (json.JSONDecodeError, OSError) as e:
            raise TalentStoreError(f"Talent store unreadable: {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise TalentStoreError(f"Talent store {self.path} must contain a JSON object")
        return InMemoryTalentStore(data.get("talents") or [], data.get("careerPaths") or [])

    def get_talent(self, talent_id: str) -> dict:
        talent = self._load().get_talent(talent_id)
        logger.info("Found talent %s in %s", talent_id, self.path)
        return talent

    def get_career_path_title(self, path_id: str) -> str | None:
        return self._load().get_career_path_title(path_id)
