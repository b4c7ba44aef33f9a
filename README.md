# tubestore

tubestore is a small WSGI server for a video-sharing front end. It keeps
users, refresh tokens and video metadata in a SQLite database, serves the
static front end and uploaded assets from local directories, and answers a
few JSON requests about videos.

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## Configuration

Settings are read from the environment. A `.env` file in the working
directory is loaded first, so the values can live there. Every variable
below is required; if one is missing or empty the server logs which one
and exits with status 1.

| Variable        | Meaning                                                   |
|-----------------|-----------------------------------------------------------|
| `DB_PATH`       | Path of the SQLite database file                          |
| `JWT_SECRET`    | Required, but not used by any endpoint yet                |
| `PLATFORM`      | Deployment platform; `dev` enables the reset endpoint     |
| `FILEPATH_ROOT` | Directory holding the static front end                    |
| `ASSETS_ROOT`   | Directory of stored assets; created on start-up if absent |
| `S3_BUCKET`     | Required, but not used by any endpoint yet                |
| `S3_REGION`     | Required, but not used by any endpoint yet                |
| `S3_CF_DISTRO`  | Required, but not used by any endpoint yet                |
| `PORT`          | Port the server listens on; must be an integer            |

An example `.env`:

```
DB_PATH=./tubestore.db
JWT_SECRET=secret
PLATFORM=dev
FILEPATH_ROOT=./app
ASSETS_ROOT=./assets
S3_BUCKET=placeholder
S3_REGION=placeholder
S3_CF_DISTRO=placeholder
PORT=8091
```

## Running

```
tubestore
```

The command takes no options besides `--help`. It listens on all
interfaces at `PORT`, handles requests in threads, and logs
`Serving on: http://localhost:<PORT>/app/` when it starts.

## Endpoints

- `GET /app/...` — files from `FILEPATH_ROOT`; a directory is answered with
  its `index.html`.
- `GET /assets/...` — files from `ASSETS_ROOT`, sent with
  `Cache-Control: max-age=3600`.
- `GET /api/videos/{videoID}` — the metadata of one video as JSON, with the
  fields `id`, `created_at`, `updated_at`, `thumbnail_url`, `video_url`,
  `title`, `description` and `user_id`. A malformed ID gives `400`
  (`Invalid video ID`); an unknown video gives `404` (`Couldn't get video`).
- `POST /admin/reset` — deletes every row of the refresh token, user and
  video tables and answers `200` with a plain-text message. When `PLATFORM`
  is not `dev` it answers `403` with
  `Reset is only allowed in dev environment.`

API errors are JSON of the form `{"error": "<message>"}`. Other paths give
`404`, and a known path with the wrong method gives `405`.

## What the server does not do

The HTTP interface stops at the endpoints listed above. There are no
endpoints to create users, log in, refresh or revoke tokens, create, list
or delete videos, or upload thumbnails and video files, and no access
tokens are issued or checked. The database client below has the storage
operations for users, refresh tokens and videos, but the server does not
expose them over HTTP. Passwords are stored exactly as they are passed to
`Client.create_user`; the package does no hashing.

## Using the pieces directly

`tubestore.server.Server` is a plain WSGI application, so it can be mounted
in any WSGI host:

```python
from tubestore.config import Config
from tubestore.database import Client
from tubestore.server import Server

config = Config.from_env()
config.ensure_assets_dir()
with Client(config.db_path) as db:
    app = Server(config, db)
    # hand `app` to a WSGI server
```

`Config.from_env` also accepts a mapping in place of the process
environment and raises `ConfigError` for a missing setting.

### Database

`tubestore.database.Client` opens (or creates) the SQLite file, creates the
tables if needed and can be used as a context manager. Lookups return
`None` when nothing matches.

```python
from tubestore.database import Client

with Client("tubestore.db") as db:
    user = db.create_user("someone@example.com", "password")
    video = db.create_video("First clip", "A short description", user.id)
    video.thumbnail_url = "http://localhost:8091/assets/thumb.png"
    db.update_video(video)
    print(db.get_video(video.id).to_dict())
```

The client offers:

- users: `create_user`, `get_user`, `get_user_by_email`,
  `get_user_by_refresh_token`, `get_users` (id and email only),
  `delete_user`;
- refresh tokens: `create_refresh_token`, `get_refresh_token`,
  `revoke_refresh_token`, `delete_refresh_token`;
- videos: `create_video`, `get_video`, `get_videos` (newest first),
  `update_video`, `delete_video`;
- `reset`, which empties every table.

`User`, `RefreshToken` and `Video` are dataclasses with a `to_dict` method
giving their JSON form; times are UTC ISO 8601 strings.

### Assets and responses

`tubestore.config` has the asset helpers: `get_asset_path(video_id,
media_type)` builds a file name such as `<uuid>.png`, `media_type_to_ext`
maps `image/png` to `.png` and anything not of the form `type/subtype` to
`.bin`, and `Config.asset_disk_path` and `Config.asset_url` give where an
asset lives on disk and the URL it is served at.

`tubestore.responses` has `json_response`, `error_response` and
`cache_middleware`, which wraps any WSGI application so that its responses
carry `Cache-Control: max-age=3600`.