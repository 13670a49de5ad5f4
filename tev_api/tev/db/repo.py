from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from tev.settings import Settings
from tev.db.conn import connect_sqlite

log = logging.getLogger(__name__)

METADATA_COLUMNS = (
    "blog",
    "base_media_path",
    "sort_order",
    "sort_column",
    "filter",
    "fav_filter",
    "page_length",
    "show_reading_pane",
    "overwrite_post_data",
    "overwrite_convo_data",
    "main_tumblr_user",
    "main_tumblr_user_avatar_url",
    "conversation_display_style",
    "conversation_sort_column",
    "conversation_sort_order",
    "theme",
    "is_default",
    "show_hashtags_for_all_blogs",
    "export_images_file_path",
)

POST_COLUMNS = (
    "id",
    "url",
    "url_with_slug",
    "date_gmt",
    "date",
    "unix_timestamp",
    "reblog_key",
    "slug",
    "is_reblog",
    "tumblelog",
    "width",
    "height",
    "type",
    "state",
    "is_read",
    "is_favourite",
    "tags",
)

# one row per post, keyed by post_id
TYPE_TABLE_COLUMNS: Dict[str, tuple] = {
    "answer": ("question", "answer"),
    "link": ("text", "url", "description"),
    "regular": ("title", "body"),
    "video": ("content_type", "extension", "width", "height", "duration", "revision", "video_caption"),
}

PHOTO_COLUMNS = (
    "post_id",
    "caption",
    "photo_link_url",
    "offset",
    "width",
    "height",
    "url1280",
    "url500",
    "url400",
    "url250",
    "url100",
    "url75",
)

CONVERSATION_COLUMNS = (
    "blog",
    "participant",
    "participant_avatar_url",
    "participant_id",
    "num_messages",
    "hide_conversation",
)

MESSAGE_COLUMNS = ("conversation_id", "timestamp", "received", "type", "message")

_POST_FLAGS = {"is_read", "is_favourite"}


def _q(col: str) -> str:
    # "offset" is an SQL keyword
    return f'"{col}"'


def _pick(data: Dict[str, Any], cols: Iterable[str]) -> Dict[str, Any]:
    return {c: data.get(c) for c in cols}


def _rows(cur: sqlite3.Cursor) -> List[Dict[str, Any]]:
    return [dict(r) for r in cur.fetchall()]


def _row(cur: sqlite3.Cursor) -> Optional[Dict[str, Any]]:
    r = cur.fetchone()
    return dict(r) if r else None


@dataclass
class Repo:
    """SQLite access for every TEV table.

    Write methods do not commit: group them with ``with repo.conn():``.
    """

    settings: Settings = field(default_factory=Settings.from_env)
    _conn: sqlite3.Connection | None = None

    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = connect_sqlite(self.settings.db_url)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # ---- schema & migrations ----
    def ensure_schema(self) -> None:
        """Create tables if missing + migrate columns if needed."""
        schema_path = Path(__file__).with_name("schema.sql")
        sql = schema_path.read_text(encoding="utf-8")
        self.conn().executescript(sql)
        self.conn().commit()
        self._migrate()
        self.conn().commit()

    def _table_columns(self, table: str) -> set[str]:
        try:
            rows = self.conn().execute(f"PRAGMA table_info({table})").fetchall()
        except sqlite3.OperationalError:
            return set()
        return {r["name"] for r in rows}

    def _ensure_column(self, table: str, col_name: str, col_def_sql: str) -> None:
        cols = self._table_columns(table)
        if col_name in cols:
            return
        self.conn().execute(f"ALTER TABLE {table} ADD COLUMN {col_def_sql}")
        log.warning("Migrated: added column %s to %s", col_name, table)

    def _migrate(self) -> None:
        # metadata fields added after the first multi-blog release
        self._ensure_column(
            "metadata", "show_hashtags_for_all_blogs", "show_hashtags_for_all_blogs INTEGER NOT NULL DEFAULT 1"
        )
        self._ensure_column("metadata", "export_images_file_path", "export_images_file_path TEXT")
        self._ensure_column("metadata", "is_default", "is_default INTEGER NOT NULL DEFAULT 0")
        self._ensure_column("post", "is_favourite", "is_favourite INTEGER NOT NULL DEFAULT 0")

    # -------- metadata --------
    def list_metadata(self) -> List[Dict[str, Any]]:
        return _rows(self.conn().execute("SELECT * FROM metadata ORDER BY id ASC"))

    def count_metadata(self) -> int:
        return int(self.conn().execute("SELECT COUNT(1) AS c FROM metadata").fetchone()["c"])

    def get_metadata(self, metadata_id: int) -> Optional[Dict[str, Any]]:
        return _row(self.conn().execute("SELECT * FROM metadata WHERE id=?", (int(metadata_id),)))

    def get_metadata_by_blog(self, blog: str) -> Optional[Dict[str, Any]]:
        return _row(self.conn().execute("SELECT * FROM metadata WHERE blog=?", (blog,)))

    def get_default_metadata(self) -> Optional[Dict[str, Any]]:
        return _row(
            self.conn().execute("SELECT * FROM metadata WHERE is_default=1 ORDER BY id ASC LIMIT 1")
        )

    def insert_metadata(self, md: Dict[str, Any]) -> int:
        cols = ", ".join(METADATA_COLUMNS)
        params = ", ".join(f":{c}" for c in METADATA_COLUMNS)
        cur = self.conn().execute(
            f"INSERT INTO metadata ({cols}) VALUES ({params})",
            _pick(md, METADATA_COLUMNS),
        )
        return int(cur.lastrowid)

    def update_metadata(self, metadata_id: int, md: Dict[str, Any]) -> None:
        sets = ", ".join(f"{c}=:{c}" for c in METADATA_COLUMNS)
        data = _pick(md, METADATA_COLUMNS)
        data["id"] = int(metadata_id)
        self.conn().execute(f"UPDATE metadata SET {sets} WHERE id=:id", data)

    def set_default_metadata(self, metadata_id: int) -> None:
        self.conn().execute(
            "UPDATE metadata SET is_default = CASE WHEN id=? THEN 1 ELSE 0 END",
            (int(metadata_id),),
        )

    def set_main_user(self, blog: str, name: Optional[str], avatar_url: Optional[str]) -> None:
        self.conn().execute(
            "UPDATE metadata SET main_tumblr_user=?, main_tumblr_user_avatar_url=? WHERE blog=?",
            (name, avatar_url, blog),
        )

    def set_export_images_path(self, blog: str, path: str) -> None:
        self.conn().execute("UPDATE metadata SET export_images_file_path=? WHERE blog=?", (path, blog))

    def delete_metadata(self, metadata_id: int) -> None:
        self.conn().execute("DELETE FROM metadata WHERE id=?", (int(metadata_id),))

    # -------- posts --------
    def list_posts(self, blog: str, post_type: Optional[str] = None) -> List[Dict[str, Any]]:
        if post_type:
            cur = self.conn().execute(
                "SELECT * FROM post WHERE tumblelog=? AND type=? ORDER BY id ASC",
                (blog, post_type),
            )
        else:
            cur = self.conn().execute("SELECT * FROM post WHERE tumblelog=? ORDER BY id ASC", (blog,))
        return _rows(cur)

    def get_post(self, post_id: int) -> Optional[Dict[str, Any]]:
        return _row(self.conn().execute("SELECT * FROM post WHERE id=?", (int(post_id),)))

    def upsert_post(self, p: Dict[str, Any], *, keep_flags: bool = True) -> None:
        """Insert or update a post.

        keep_flags=True leaves is_read / is_favourite of an existing row alone
        (re-importing an export must not reset reader state).
        """
        data = _pick(p, POST_COLUMNS)
        data["is_reblog"] = int(bool(data["is_reblog"]))
        data["is_read"] = int(bool(data["is_read"]))
        data["is_favourite"] = int(bool(data["is_favourite"]))
        data["tags"] = data["tags"] or ""

        flags_sql = (
            ""
            if keep_flags
            else """,
              is_read=excluded.is_read,
              is_favourite=excluded.is_favourite"""
        )
        cols = ", ".join(POST_COLUMNS)
        params = ", ".join(f":{c}" for c in POST_COLUMNS)
        self.conn().execute(
            f"""
            INSERT INTO post ({cols})
            VALUES ({params})
            ON CONFLICT(id) DO UPDATE SET
              url=excluded.url,
              url_with_slug=excluded.url_with_slug,
              date_gmt=excluded.date_gmt,
              date=excluded.date,
              unix_timestamp=excluded.unix_timestamp,
              reblog_key=excluded.reblog_key,
              slug=excluded.slug,
              is_reblog=excluded.is_reblog,
              tumblelog=excluded.tumblelog,
              width=excluded.width,
              height=excluded.height,
              type=excluded.type,
              state=excluded.state,
              tags=excluded.tags{flags_sql}
            """,
            data,
        )

    def set_post_flag(self, post_id: int, flag: str, value: bool) -> None:
        if flag not in _POST_FLAGS:
            raise ValueError(f"Unknown post flag: {flag}")
        self.conn().execute(f"UPDATE post SET {flag}=? WHERE id=?", (int(bool(value)), int(post_id)))

    def set_blog_read(self, blog: str, is_read: bool) -> int:
        cur = self.conn().execute("UPDATE post SET is_read=? WHERE tumblelog=?", (int(bool(is_read)), blog))
        return cur.rowcount

    def delete_post(self, post_id: int) -> None:
        self.conn().execute("DELETE FROM post WHERE id=?", (int(post_id),))

    def delete_posts_for_blog(self, blog: str) -> int:
        # type rows and photos cascade
        cur = self.conn().execute("DELETE FROM post WHERE tumblelog=?", (blog,))
        return cur.rowcount

    # -------- answer / link / regular / video --------
    def list_type_rows(self, table: str, blog: str) -> List[Dict[str, Any]]:
        self._check_type_table(table)
        return _rows(
            self.conn().execute(
                f"""
                SELECT t.* FROM {table} t
                JOIN post p ON p.id = t.post_id
                WHERE p.tumblelog=?
                ORDER BY t.post_id ASC
                """,
                (blog,),
            )
        )

    def get_type_row(self, table: str, post_id: int) -> Optional[Dict[str, Any]]:
        self._check_type_table(table)
        return _row(self.conn().execute(f"SELECT * FROM {table} WHERE post_id=?", (int(post_id),)))

    def upsert_type_row(self, table: str, row: Dict[str, Any]) -> None:
        self._check_type_table(table)
        cols = ("post_id",) + TYPE_TABLE_COLUMNS[table]
        updates = ", ".join(f"{c}=excluded.{c}" for c in TYPE_TABLE_COLUMNS[table])
        self.conn().execute(
            f"""
            INSERT INTO {table} ({", ".join(cols)})
            VALUES ({", ".join(f":{c}" for c in cols)})
            ON CONFLICT(post_id) DO UPDATE SET {updates}
            """,
            _pick(row, cols),
        )

    def delete_type_row(self, table: str, post_id: int) -> None:
        self._check_type_table(table)
        self.conn().execute(f"DELETE FROM {table} WHERE post_id=?", (int(post_id),))

    def delete_type_rows_for_blog(self, table: str, blog: str) -> int:
        if table != "photo":
            self._check_type_table(table)
        cur = self.conn().execute(
            f"DELETE FROM {table} WHERE post_id IN (SELECT id FROM post WHERE tumblelog=?)",
            (blog,),
        )
        return cur.rowcount

    @staticmethod
    def _check_type_table(table: str) -> None:
        if table not in TYPE_TABLE_COLUMNS:
            raise ValueError(f"Unknown post type table: {table}")

    # -------- photos --------
    def list_photos_for_blog(self, blog: str) -> List[Dict[str, Any]]:
        return _rows(
            self.conn().execute(
                """
                SELECT ph.* FROM photo ph
                JOIN post p ON p.id = ph.post_id
                WHERE p.tumblelog=?
                ORDER BY ph.post_id ASC, ph.id ASC
                """,
                (blog,),
            )
        )

    def list_photos(self, post_id: int) -> List[Dict[str, Any]]:
        return _rows(self.conn().execute("SELECT * FROM photo WHERE post_id=? ORDER BY id ASC", (int(post_id),)))

    def get_photo(self, photo_id: int) -> Optional[Dict[str, Any]]:
        return _row(self.conn().execute("SELECT * FROM photo WHERE id=?", (int(photo_id),)))

    def insert_photo(self, row: Dict[str, Any]) -> int:
        cur = self.conn().execute(
            f"""
            INSERT INTO photo ({", ".join(_q(c) for c in PHOTO_COLUMNS)})
            VALUES ({", ".join(f":{c}" for c in PHOTO_COLUMNS)})
            """,
            _pick(row, PHOTO_COLUMNS),
        )
        return int(cur.lastrowid)

    def update_photo(self, photo_id: int, row: Dict[str, Any]) -> None:
        sets = ", ".join(f"{_q(c)}=:{c}" for c in PHOTO_COLUMNS)
        data = _pick(row, PHOTO_COLUMNS)
        data["id"] = int(photo_id)
        self.conn().execute(f"UPDATE photo SET {sets} WHERE id=:id", data)

    def delete_photo(self, photo_id: int) -> None:
        self.conn().execute("DELETE FROM photo WHERE id=?", (int(photo_id),))

    def delete_photos(self, post_id: int) -> int:
        cur = self.conn().execute("DELETE FROM photo WHERE post_id=?", (int(post_id),))
        return cur.rowcount

    # -------- hashtags --------
    def list_hashtags(self, blog: Optional[str] = None) -> List[Dict[str, Any]]:
        if blog is None:
            cur = self.conn().execute("SELECT * FROM hashtag ORDER BY tag ASC, blog ASC")
        else:
            cur = self.conn().execute("SELECT * FROM hashtag WHERE blog=? ORDER BY tag ASC", (blog,))
        return _rows(cur)

    def get_hashtag(self, tag: str, blog: str) -> Optional[Dict[str, Any]]:
        return _row(self.conn().execute("SELECT * FROM hashtag WHERE tag=? AND blog=?", (tag, blog)))

    def find_hashtags(self, tag: str) -> List[Dict[str, Any]]:
        return _rows(self.conn().execute("SELECT * FROM hashtag WHERE tag=? ORDER BY blog ASC", (tag,)))

    def increment_hashtag(self, tag: str, blog: str) -> None:
        self.conn().execute(
            """
            INSERT INTO hashtag (tag, blog, count)
            VALUES (?, ?, 1)
            ON CONFLICT(tag, blog) DO UPDATE SET count=hashtag.count + 1
            """,
            (tag, blog),
        )

    def delete_hashtag(self, tag: str, blog: str) -> int:
        cur = self.conn().execute("DELETE FROM hashtag WHERE tag=? AND blog=?", (tag, blog))
        return cur.rowcount

    def delete_hashtags_for_blog(self, blog: str) -> int:
        cur = self.conn().execute("DELETE FROM hashtag WHERE blog=?", (blog,))
        return cur.rowcount

    # -------- conversations --------
    def list_conversations(self, blog: str, hidden: Optional[bool] = None) -> List[Dict[str, Any]]:
        sql = "SELECT * FROM conversation WHERE blog=?"
        params: List[Any] = [blog]
        if hidden is not None:
            sql += " AND hide_conversation=?"
            params.append(int(bool(hidden)))
        sql += " ORDER BY participant COLLATE NOCASE ASC, id ASC"
        return _rows(self.conn().execute(sql, params))

    def get_conversation(self, conversation_id: int) -> Optional[Dict[str, Any]]:
        return _row(self.conn().execute("SELECT * FROM conversation WHERE id=?", (int(conversation_id),)))

    def find_conversations_by_participant(self, blog: str, participant: str) -> List[Dict[str, Any]]:
        return _rows(
            self.conn().execute(
                "SELECT * FROM conversation WHERE blog=? AND participant=? ORDER BY id ASC",
                (blog, participant),
            )
        )

    def find_conversation_by_participant_id(self, blog: str, participant_id: str) -> Optional[Dict[str, Any]]:
        return _row(
            self.conn().execute(
                "SELECT * FROM conversation WHERE blog=? AND participant_id=? ORDER BY id ASC LIMIT 1",
                (blog, participant_id),
            )
        )

    def insert_conversation(self, c: Dict[str, Any]) -> int:
        data = _pick(c, CONVERSATION_COLUMNS)
        data["num_messages"] = int(data["num_messages"] or 0)
        data["hide_conversation"] = int(bool(data["hide_conversation"]))
        cur = self.conn().execute(
            f"""
            INSERT INTO conversation ({", ".join(CONVERSATION_COLUMNS)})
            VALUES ({", ".join(f":{c}" for c in CONVERSATION_COLUMNS)})
            """,
            data,
        )
        return int(cur.lastrowid)

    def update_conversation(self, conversation_id: int, c: Dict[str, Any]) -> None:
        data = _pick(c, CONVERSATION_COLUMNS)
        data["num_messages"] = int(data["num_messages"] or 0)
        data["hide_conversation"] = int(bool(data["hide_conversation"]))
        data["id"] = int(conversation_id)
        sets = ", ".join(f"{c}=:{c}" for c in CONVERSATION_COLUMNS)
        self.conn().execute(f"UPDATE conversation SET {sets} WHERE id=:id", data)

    def set_conversation_hidden(self, blog: str, participant: str, hidden: bool) -> int:
        cur = self.conn().execute(
            "UPDATE conversation SET hide_conversation=? WHERE blog=? AND participant=?",
            (int(bool(hidden)), blog, participant),
        )
        return cur.rowcount

    def unhide_all_conversations(self, blog: str) -> int:
        cur = self.conn().execute("UPDATE conversation SET hide_conversation=0 WHERE blog=?", (blog,))
        return cur.rowcount

    def refresh_message_count(self, conversation_id: int) -> int:
        n = self.conn().execute(
            "SELECT COUNT(1) AS c FROM conversation_message WHERE conversation_id=?",
            (int(conversation_id),),
        ).fetchone()["c"]
        self.conn().execute(
            "UPDATE conversation SET num_messages=? WHERE id=?",
            (int(n), int(conversation_id)),
        )
        return int(n)

    def delete_conversation(self, conversation_id: int) -> None:
        self.conn().execute("DELETE FROM conversation WHERE id=?", (int(conversation_id),))

    def delete_conversations_for_blog(self, blog: str) -> int:
        # messages cascade
        cur = self.conn().execute("DELETE FROM conversation WHERE blog=?", (blog,))
        return cur.rowcount

    # -------- conversation messages --------
    def list_messages_for_blog(self, blog: str) -> List[Dict[str, Any]]:
        return _rows(
            self.conn().execute(
                """
                SELECT m.* FROM conversation_message m
                JOIN conversation c ON c.id = m.conversation_id
                WHERE c.blog=?
                ORDER BY m.conversation_id ASC, m.timestamp ASC, m.id ASC
                """,
                (blog,),
            )
        )

    def list_messages(self, conversation_id: int) -> List[Dict[str, Any]]:
        return _rows(
            self.conn().execute(
                "SELECT * FROM conversation_message WHERE conversation_id=? ORDER BY timestamp ASC, id ASC",
                (int(conversation_id),),
            )
        )

    def get_message(self, message_id: int) -> Optional[Dict[str, Any]]:
        return _row(self.conn().execute("SELECT * FROM conversation_message WHERE id=?", (int(message_id),)))

    def insert_message(self, m: Dict[str, Any]) -> int:
        data = _pick(m, MESSAGE_COLUMNS)
        data["received"] = int(bool(data["received"]))
        data["type"] = data["type"] or "TEXT"
        cur = self.conn().execute(
            f"""
            INSERT INTO conversation_message ({", ".join(MESSAGE_COLUMNS)})
            VALUES ({", ".join(f":{c}" for c in MESSAGE_COLUMNS)})
            """,
            data,
        )
        return int(cur.lastrowid)

    def update_message(self, message_id: int, m: Dict[str, Any]) -> None:
        data = _pick(m, MESSAGE_COLUMNS)
        data["received"] = int(bool(data["received"]))
        data["type"] = data["type"] or "TEXT"
        data["id"] = int(message_id)
        sets = ", ".join(f"{c}=:{c}" for c in MESSAGE_COLUMNS)
        self.conn().execute(f"UPDATE conversation_message SET {sets} WHERE id=:id", data)

    def delete_message(self, message_id: int) -> None:
        self.conn().execute("DELETE FROM conversation_message WHERE id=?", (int(message_id),))

    def delete_messages_for_blog(self, blog: str) -> int:
        cur = self.conn().execute(
            "DELETE FROM conversation_message WHERE conversation_id IN (SELECT id FROM conversation WHERE blog=?)",
            (blog,),
        )
        self.conn().execute("UPDATE conversation SET num_messages=0 WHERE blog=?", (blog,))
        return cur.rowcount

    # -------- staging --------
    def list_staged_ids(self, blog: str) -> List[int]:
        rows = self.conn().execute(
            "SELECT id FROM staging_post WHERE blog=? ORDER BY rowid ASC",
            (blog,),
        ).fetchall()
        return [int(r["id"]) for r in rows]

    def get_staged(self, post_id: int) -> List[Dict[str, Any]]:
        return _rows(self.conn().execute("SELECT id, blog FROM staging_post WHERE id=?", (int(post_id),)))

    def stage_post(self, post_id: int, blog: str) -> None:
        self.conn().execute(
            "INSERT OR IGNORE INTO staging_post (id, blog) VALUES (?, ?)",
            (int(post_id), blog),
        )

    def unstage_post(self, post_id: int, blog: str) -> int:
        cur = self.conn().execute("DELETE FROM staging_post WHERE id=? AND blog=?", (int(post_id), blog))
        return cur.rowcount

    def unstage_all(self, blog: str) -> int:
        cur = self.conn().execute("DELETE FROM staging_post WHERE blog=?", (blog,))
        return cur.rowcount

    # -------- whole blog --------
    def delete_blog_data(self, blog: str) -> None:
        """Remove everything stored for a blog except its metadata row."""
        self.delete_conversations_for_blog(blog)
        self.delete_posts_for_blog(blog)
        self.delete_hashtags_for_blog(blog)
        self.unstage_all(blog)
        log.info("Deleted all data for blog=%s", blog)
