import sqlite3
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from tubestore.database import Client, RefreshToken, User, Video


@pytest.fixture
def db(tmp_path):
    with Client(tmp_path / "tubely.db") as client:
        yield client


@pytest.fixture
def user(db):
    password = "password"
    return db.create_user("alice@example.com", password)


def test_create_user_round_trip(db):
    password = "password"
    created = db.create_user("bob@example.com", password)
    assert created.email == "bob@example.com"
    assert created.password == "password"
    assert created.created_at.tzinfo is not None
    assert db.get_user(created.id) == created


def test_get_user_by_email(db, user):
    found = db.get_user_by_email("alice@example.com")
    assert found == user
    assert db.get_user_by_email("nobody@example.com") is None


def test_duplicate_email_rejected(db, user):
    password = "password"
    with pytest.raises(sqlite3.IntegrityError):
        db.create_user("alice@example.com", password)


def test_get_users_fills_id_and_email(db, user):
    users = db.get_users()
    assert [(u.id, u.email) for u in users] == [(user.id, user.email)]
    assert users[0].password == ""
    assert users[0].created_at is None


def test_delete_user(db, user):
    db.delete_user(user.id)
    assert db.get_user(user.id) is None
    assert db.get_users() == []


def test_missing_user_is_none(db):
    assert db.get_user(uuid.uuid4()) is None


def test_refresh_token_round_trip(db, user):
    expires = datetime(2030, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)
    rt = db.create_refresh_token("token", user.id, expires)
    assert isinstance(rt, RefreshToken)
    assert rt.token == "token"
    assert rt.user_id == user.id
    assert rt.expires_at == expires
    assert rt.revoked_at is None
    assert db.get_refresh_token("token") == rt


def test_naive_expiry_is_treated_as_utc(db, user):
    expires = datetime(2031, 5, 6, 7, 8, 9)
    rt = db.create_refresh_token("token", user.id, expires)
    assert rt.expires_at == expires.replace(tzinfo=timezone.utc)


def test_revoke_refresh_token(db, user):
    db.create_refresh_token("token", user.id, datetime.now(timezone.utc) + timedelta(days=60))
    db.revoke_refresh_token("token")
    assert db.get_refresh_token("token").revoked_at is not None
    assert db.get_refresh_token("token").revoked_at.tzinfo == timezone.utc


def test_user_by_refresh_token(db, user):
    db.create_refresh_token("token", user.id, datetime.now(timezone.utc))
    assert db.get_user_by_refresh_token("token") == user
    assert db.get_user_by_refresh_token("placeholder") is None


def test_delete_refresh_token(db, user):
    db.create_refresh_token("token", user.id, datetime.now(timezone.utc))
    db.delete_refresh_token("token")
    assert db.get_refresh_token("token") is None


def test_video_create_and_get(db, user):
    video = db.create_video("Boots", "A bear", user.id)
    assert isinstance(video, Video)
    assert (video.title, video.description, video.user_id) == ("Boots", "A bear", user.id)
    assert video.thumbnail_url is None
    assert video.video_url is None
    assert db.get_video(video.id) == video


def test_update_video(db, user):
    video = db.create_video("Boots", "A bear", user.id)
    video.thumbnail_url = "http://localhost:8091/assets/thumb.png"
    video.title = "Boots 2"
    db.update_video(video)
    stored = db.get_video(video.id)
    assert stored.thumbnail_url == video.thumbnail_url
    assert stored.title == "Boots 2"


def test_get_videos_filters_by_user(db, user):
    password = "password"
    other = db.create_user("carol@example.com", password)
    first = db.create_video("one", "", user.id)
    second = db.create_video("two", "", user.id)
    db.create_video("three", "", other.id)
    ids = {v.id for v in db.get_videos(user.id)}
    assert ids == {first.id, second.id}
    assert db.get_videos(uuid.uuid4()) == []


def test_delete_video(db, user):
    video = db.create_video("Boots", "A bear", user.id)
    db.delete_video(video.id)
    assert db.get_video(video.id) is None


def test_reset_clears_all_tables(db, user):
    db.create_refresh_token("token", user.id, datetime.now(timezone.utc))
    db.create_video("Boots", "A bear", user.id)
    db.reset()
    assert db.get_users() == []
    assert db.get_refresh_token("token") is None
    assert db.get_videos(user.id) == []


def test_to_dict_shapes(db, user):
    video = db.create_video("Boots", "A bear", user.id)
    data = video.to_dict()
    assert data["id"] == str(video.id)
    assert data["user_id"] == str(user.id)
    assert data["thumbnail_url"] is None
    assert data["title"] == "Boots"
    user_data = user.to_dict()
    assert set(user_data) == {"id", "created_at", "updated_at", "email", "password"}
    assert datetime.fromisoformat(user_data["created_at"]) == user.created_at


def test_refresh_token_to_dict(db, user):
    expires = datetime(2030, 1, 1, tzinfo=timezone.utc)
    data = db.create_refresh_token("token", user.id, expires).to_dict()
    assert data["token"] == "token"
    assert data["revoked_at"] is None
    assert datetime.fromisoformat(data["expires_at"]) == expires


def test_data_persists_across_reopen(tmp_path):
    path = tmp_path / "tubely.db"
    password = "password"
    with Client(path) as first:
        created = first.create_user("dave@example.com", password)
    with Client(path) as second:
        assert second.get_user(created.id) == created


def test_closed_client_raises(tmp_path):
    client = Client(tmp_path / "tubely.db")
    client.close()
    with pytest.raises(sqlite3.ProgrammingError):
        client.get_users()


def test_user_defaults():
    user_id = uuid.uuid4()
    user = User(id=user_id, email="eve@example.com")
    assert user.to_dict()["created_at"] is None
    assert user.to_dict()["id"] == str(user_id)