"""SQLite storage for users, refresh tokens and video metadata."""

from __future__ import annotations

import sqlite3
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        password TEXT NOT NULL,
        email TEXT UNIQUE NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS refresh_tokens (
        token TEXT PRIMARY KEY,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        revoked_at TIMESTAMP,
        user_id TEXT NOT NULL,
        expires_at TIMESTAMP NOT NULL,
        FOREIGN KEY(user_id) REFERENCES users(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS videos (
        id TEXT PRIMARY KEY,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        title TEXT NOT NULL,
        description TEXT,
        thumbnail_url TEXT,
        video_url TEXT TEXT,
        user_id INTEGER,
        FOREIGN KEY(user_id) REFERENCES users(id)
    )
    """,
)

_VIDEO_COLUMNS = (
    "id, created_at, updated_at, title, description, thumbnail_url, video_url, user_id"
)


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _store_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(sep=" ")


def _format_time(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class User:
    """A registered user; ``password`` holds the password hash."""

    id: uuid.UUID
    email: str
    password: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "created_at": _format_time(self.created_at),
            "updated_at": _format_time(self.updated_at),
            "email": self.email,
            "password": self.password,
        }


@dataclass
class RefreshToken:
    """A long-lived token that can be exchanged for access tokens."""

    token: str
    user_id: uuid.UUID
    expires_at: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    revoked_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "token": self.token,
            "user_id": str(self.user_id),
            "expires_at": _format_time(self.expires_at),
            "created_at": _format_time(self.created_at),
            "updated_at": _format_time(self.updated_at),
            "revoked_at": _format_time(self.revoked_at),
        }


@dataclass
class Video:
    """Metadata of an uploaded video."""

    id: uuid.UUID
    title: str
    description: str
    user_id: uuid.UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "created_at": _format_time(self.created_at),
            "updated_at": _format_time(self.updated_at),
            "thumbnail_url": self.thumbnail_url,
            "video_url": self.video_url,
            "title": self.title,
            "description": self.description,
            "user_id": str(self.user_id),
        }

    @classmethod
    def _from_row(cls, row: sqlite3.Row) -> "Video":
        return cls(
            id=uuid.UUID(row["id"]),
            created_at=_parse_time(row["created_at"]),
            updated_at=_parse_time(row["updated_at"]),
            title=row["title"],
            description=row["description"] or "",
            thumbnail_url=row["thumbnail_url"],
            video_url=row["video_url"],
            user_id=uuid.UUID(str(row["user_id"])),
        )


@dataclass
class Client:
    """Database client; creates the schema when opened."""

    path: str
    _conn: sqlite3.Connection = field(init=False, repr=False)
    _lock: threading.Lock = field(init=False, repr=False, default_factory=threading.Lock)

    def __init__(self, path) -> None:
        self.path = str(path)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(
            self.path, check_same_thread=False, isolation_level=None
        )
        self._conn.row_factory = sqlite3.Row
        try:
            for statement in _SCHEMA:
                self._conn.execute(statement)
        except sqlite3.Error:
            self._conn.close()
            raise

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    def _execute(self, query: str, params: tuple = ()) -> None:
        with self._lock:
            self._conn.execute(query, params)

    def _one(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        with self._lock:
            return self._conn.execute(query, params).fetchone()

    def _all(self, query: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self._lock:
            return self._conn.execute(query, params).fetchall()

    def reset(self) -> None:
        """Delete every row of every table."""
        for table in ("refresh_tokens", "users", "videos"):
            try:
                self._execute(f"DELETE FROM {table}")
            except sqlite3.Error as err:
                raise sqlite3.DatabaseError(
                    f"failed to reset table {table}: {err}"
                ) from err

    # Refresh tokens

    def create_refresh_token(
        self, token: str, user_id: uuid.UUID, expires_at: datetime
    ) -> Optional[RefreshToken]:
        self._execute(
            """
            INSERT INTO refresh_tokens (token, created_at, updated_at, user_id, expires_at)
            VALUES (?, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP, ?, ?)
            """,
            (token, str(user_id), _store_time(expires_at)),
        )
        return self.get_refresh_token(token)

    def revoke_refresh_token(self, token: str) -> None:
        self._execute(
            "UPDATE refresh_tokens SET revoked_at = CURRENT_TIMESTAMP WHERE token = ?",
            (token,),
        )

    def get_refresh_token(self, token: str) -> Optional[RefreshToken]:
        row = self._one(
            """
            SELECT token, created_at, updated_at, user_id, expires_at, revoked_at
            FROM refresh_tokens WHERE token = ?
            """,
            (token,),
        )
        if row is None:
            return None
        return RefreshToken(
            token=row["token"],
            user_id=uuid.UUID(row["user_id"]),
            expires_at=_parse_time(row["expires_at"]),
            created_at=_parse_time(row["created_at"]),
            updated_at=_parse_time(row["updated_at"]),
            revoked_at=_parse_time(row["revoked_at"]),
        )

    def delete_refresh_token(self, token: str) -> None:
        self._execute("DELETE FROM refresh_tokens WHERE token = ?", (token,))

    # Users

    @staticmethod
    def _user_from_row(row: sqlite3.Row) -> User:
        return User(
            id=uuid.UUID(row["id"]),
            email=row["email"],
            password=row["password"],
            created_at=_parse_time(row["created_at"]),
            updated_at=_parse_time(row["updated_at"]),
        )

    def get_users(self) -> list[User]:
        """List all users; only id and email are filled in."""
        return [
            User(id=uuid.UUID(row["id"]), email=row["email"])
            for row in self._all("SELECT id, email FROM users")
        ]

    def get_user_by_email(self, email: str) -> Optional[User]:
        row = self._one(
            "SELECT id, created_at, updated_at, email, password FROM users WHERE email = ?",
            (email,),
        )
        return self._user_from_row(row) if row is not None else None

    def get_user_by_refresh_token(self, token: str) -> Optional[User]:
        row = self._one(
            """
            SELECT u.id, u.email, u.created_at, u.updated_at, u.password
            FROM users u
            JOIN refresh_tokens rt ON u.id = rt.user_id
            WHERE rt.token = ?
            """,
            (token,),
        )
        return self._user_from_row(row) if row is not None else None

    def create_user(self, email: str, password: str) -> Optional[User]:
        user_id = uuid.uuid4()
        self._execute(
            """
            INSERT INTO users (id, created_at, updated_at, email, password)
            VALUES (?, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP, ?, ?)
            """,
            (str(user_id), email, password),
        )
        return self.get_user(user_id)

    def get_user(self, user_id: uuid.UUID) -> Optional[User]:
        row = self._one(
            "SELECT id, created_at, updated_at, email, password FROM users WHERE id = ?",
            (str(user_id),),
        )
        return self._user_from_row(row) if row is not None else None

    def delete_user(self, user_id: uuid.UUID) -> None:
        self._execute("DELETE FROM users WHERE id = ?", (str(user_id),))

    # Videos

    def get_videos(self, user_id: uuid.UUID) -> list[Video]:
        rows = self._all(
            f"SELECT {_VIDEO_COLUMNS} FROM videos WHERE user_id = ? ORDER BY created_at DESC",
            (str(user_id),),
        )
        return [Video._from_row(row) for row in rows]

    def iter_videos(self, user_id: uuid.UUID) -> Iterator[Video]:
        yield from self.get_videos(user_id)

    def create_video(
        self, title: str, description: str, user_id: uuid.UUID
    ) -> Optional[Video]:
        video_id = uuid.uuid4()
        self._execute(
            """
            INSERT INTO videos (id, created_at, updated_at, title, description, user_id)
            VALUES (?, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP, ?, ?, ?)
            """,
            (str(video_id), title, description, str(user_id)),
        )
        return self.get_video(video_id)

    def get_video(self, video_id: uuid.UUID) -> Optional[Video]:
        row = self._one(
            f"SELECT {_VIDEO_COLUMNS} FROM videos WHERE id = ?", (str(video_id),)
        )
        return Video._from_row(row) if row is not None else None

    def update_video(self, video: Video) -> None:
        self._execute(
            """
            UPDATE videos
            SET title = ?, description = ?, thumbnail_url = ?, video_url = ?, user_id = ?
            WHERE id = ?
            """,
            (
                video.title,
                video.description,
                video.thumbnail_url,
                video.video_url,
                str(video.user_id),
                str(video.id),
            ),
        )

    def delete_video(self, video_id: uuid.UUID) -> None:
        self._execute("DELETE FROM videos WHERE id = ?", (str(video_id),))