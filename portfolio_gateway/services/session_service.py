from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

USER_ID_KEY = "userId"
ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"
SESSION_KEYS = (USER_ID_KEY, ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY)

NotifyFn = Callable[[str, str], None]


class SessionService:
    """Persist the signed-in user id and auth tokens in a small JSON file.

    Without a path the values are only kept in memory for the lifetime of the
    instance. Storage problems are reported, never raised: the cached id can
    always be re-derived from the backend session.
    """

    def __init__(self, path: Optional[Path] = None, reporter: Optional[NotifyFn] = None) -> None:
        self._path = path
        self._report = reporter
        self._memory: Dict[str, Any] = {}

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def get_user_id(self) -> Optional[str]:
        value = self._read().get(USER_ID_KEY)
        return value if isinstance(value, str) and value else None

    def persist_user_id(self, user_id: str) -> None:
        data = self._read()
        data[USER_ID_KEY] = user_id
        self._write(data)

    def get_tokens(self) -> Optional[Tuple[str, Optional[str]]]:
        """Return (access_token, refresh_token) from the last sign-in, if any."""
        data = self._read()
        access_token = data.get(ACCESS_TOKEN_KEY)
        if not isinstance(access_token, str) or not access_token:
            return None
        refresh_token = data.get(REFRESH_TOKEN_KEY)
        return access_token, refresh_token if isinstance(refresh_token, str) else None

    def persist_session(self, user_id: str, access_token: str, refresh_token: Optional[str]) -> None:
        data = self._read()
        data[USER_ID_KEY] = user_id
        if access_token:
            data[ACCESS_TOKEN_KEY] = access_token
            data[REFRESH_TOKEN_KEY] = refresh_token
        else:
            data.pop(ACCESS_TOKEN_KEY, None)
            data.pop(REFRESH_TOKEN_KEY, None)
        self._write(data)

    def clear_tokens(self) -> None:
        data = self._read()
        if ACCESS_TOKEN_KEY not in data and REFRESH_TOKEN_KEY not in data:
            return
        data.pop(ACCESS_TOKEN_KEY, None)
        data.pop(REFRESH_TOKEN_KEY, None)
        self._write(data)

    def clear_session(self) -> None:
        """Forget the user id and tokens; unrelated keys are kept."""
        if self._path is None:
            for key in SESSION_KEYS:
                self._memory.pop(key, None)
            return
        data = self._read()
        for key in SESSION_KEYS:
            data.pop(key, None)
        try:
            if data:
                self._path.write_text(json.dumps(data), encoding="utf-8")
            elif self._path.exists():
                self._path.unlink()
        except PermissionError as exc:
            self._notify(f"Permission denied while removing stored session data: {exc}", "warning")
        except OSError as exc:
            self._notify(f"Unable to remove stored session data ({self._path}): {exc}", "warning")

    def _read(self) -> Dict[str, Any]:
        if self._path is None:
            return dict(self._memory)
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except PermissionError as exc:
            self._notify(f"Permission denied while reading saved session data: {exc}", "warning")
            return {}
        except OSError as exc:
            self._notify(f"Unable to read saved session data ({self._path}): {exc}", "warning")
            return {}
        except json.JSONDecodeError as exc:
            self._notify(
                f"Saved session data is corrupted ({exc}). Sign in again to refresh it.",
                "warning",
            )
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]) -> None:
        if self._path is None:
            self._memory = dict(data)
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(data), encoding="utf-8")
        except (PermissionError, OSError) as exc:
            self._notify(f"Unable to save session data to {self._path}: {exc}", "error")

    def _notify(self, message: str, tone: str) -> None:
        if tone == "error":
            logger.error(message)
        else:
            logger.warning(message)
        if self._report:
            self._report(message, tone)
