"""SQLite database for pages, leads and analytics."""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, List, Dict, Any, Generator, Tuple, Union

from .models import (
    User,
    Profile,
    Session,
    LandingPage,
    Template,
    ThankYouPage,
    Lead,
    PageView,
    AnalyticsEvent,
    AppConfig,
)

logger = logging.getLogger(__name__)

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS profiles (
        id TEXT PRIMARY KEY,
        name TEXT,
        avatar_url TEXT,
        updated_at TEXT,
        FOREIGN KEY (id) REFERENCES users(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS sessions (
        token TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        expires_at TEXT,
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS templates (
        id TEXT PRIMARY KEY,
        user_id TEXT,
        title TEXT NOT NULL,
        slug TEXT NOT NULL,
        description TEXT,
        colors TEXT,
        gradients TEXT,
        fonts TEXT,
        form_position TEXT,
        form_style TEXT,
        layout_type TEXT,
        max_width TEXT,
        spacing TEXT,
        effects TEXT,
        seo TEXT,
        widgets TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS thank_you_pages (
        id TEXT PRIMARY KEY,
        user_id TEXT,
        title TEXT NOT NULL,
        description TEXT,
        slug TEXT NOT NULL UNIQUE,
        logo_url TEXT,
        message TEXT,
        redirect_url TEXT,
        redirect_delay INTEGER,
        colors TEXT,
        published INTEGER DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS landing_pages (
        id TEXT PRIMARY KEY,
        user_id TEXT,
        title TEXT NOT NULL,
        description TEXT,
        slug TEXT NOT NULL UNIQUE,
        content TEXT,
        logo_url TEXT,
        background_url TEXT,
        event_date_image_url TEXT,
        participants_image_url TEXT,
        ga_id TEXT,
        meta_pixel_id TEXT,
        thank_you_page_id TEXT,
        template_id TEXT,
        published INTEGER DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (thank_you_page_id) REFERENCES thank_you_pages(id) ON DELETE SET NULL,
        FOREIGN KEY (template_id) REFERENCES templates(id) ON DELETE SET NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS leads (
        id TEXT PRIMARY KEY,
        landing_page_id TEXT NOT NULL,
        data TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (landing_page_id) REFERENCES landing_pages(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS page_views (
        id TEXT PRIMARY KEY,
        landing_page_id TEXT NOT NULL,
        session_id TEXT NOT NULL,
        referrer TEXT,
        user_agent TEXT,
        duration_seconds INTEGER,
        created_at TEXT NOT NULL,
        FOREIGN KEY (landing_page_id) REFERENCES landing_pages(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS analytics_events (
        id TEXT PRIMARY KEY,
        landing_page_id TEXT NOT NULL,
        session_id TEXT NOT NULL,
        event_type TEXT NOT NULL,
        event_data TEXT,
        created_at TEXT NOT NULL,
        FOREIGN KEY (landing_page_id) REFERENCES landing_pages(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS app_config (
        id TEXT PRIMARY KEY,
        site_name TEXT,
        logo_url TEXT,
        favicon_url TEXT,
        primary_color TEXT,
        notify_on_lead INTEGER DEFAULT 1,
        admin_email TEXT,
        whatsapp_number TEXT,
        whatsapp_message TEXT,
        integration_api_key TEXT,
        is_active INTEGER DEFAULT 1
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_landing_pages_user ON landing_pages(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_templates_user ON templates(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_thank_you_user ON thank_you_pages(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_leads_page ON leads(landing_page_id, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_leads_created ON leads(created_at)",
    "CREATE INDEX IF NOT EXISTS idx_page_views_page ON page_views(landing_page_id, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_page_views_session ON page_views(session_id)",
    "CREATE INDEX IF NOT EXISTS idx_events_page ON analytics_events(landing_page_id)",
    "CREATE INDEX IF NOT EXISTS idx_sessions_user ON sessions(user_id)",
]

LANDING_PAGE_COLUMNS = [
    "user_id", "title", "description", "slug", "content", "logo_url",
    "background_url", "event_date_image_url", "participants_image_url",
    "ga_id", "meta_pixel_id", "thank_you_page_id", "template_id",
    "published", "created_at", "updated_at",
]

TEMPLATE_COLUMNS = [
    "user_id", "title", "slug", "description", "colors", "gradients",
    "fonts", "form_position", "form_style", "layout_type", "max_width",
    "spacing", "effects", "seo", "widgets", "created_at",
]

TEMPLATE_JSON_COLUMNS = {
    "colors", "gradients", "fonts", "form_style", "spacing",
    "effects", "seo", "widgets",
}

THANK_YOU_COLUMNS = [
    "user_id", "title", "description", "slug", "logo_url", "message",
    "redirect_url", "redirect_delay", "colors", "published",
    "created_at", "updated_at",
]

APP_CONFIG_COLUMNS = [
    "site_name", "logo_url", "favicon_url", "primary_color",
    "notify_on_lead", "admin_email", "whatsapp_number",
    "whatsapp_message", "integration_api_key", "is_active",
]


def to_timestamp(value: datetime) -> str:
    """Serialize a datetime as a sortable UTC ISO string."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _loads(value: Optional[str], default):
    if not value:
        return default
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        logger.warning(f"Discarding malformed JSON column value: {value[:80]!r}")
        return default


class Database:
    """SQLite database for landing pages, leads and analytics."""

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        """Initialize database connection."""
        if db_path is None:
            db_path = Path.home() / ".simplo-pages" / "simplo.db"

        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_db()

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with row factory."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self):
        """Initialize database schema."""
        with self._get_connection() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            for statement in SCHEMA:
                conn.execute(statement)

    def ping(self) -> bool:
        """Check the database answers a trivial query."""
        with self._get_connection() as conn:
            conn.execute("SELECT 1")
        return True

    # === ROW CONVERSION ===

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            created_at=from_timestamp(row["created_at"]),
        )

    def _row_to_landing_page(self, row: sqlite3.Row) -> LandingPage:
        return LandingPage(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            description=row["description"] or "",
            slug=row["slug"],
            content=_loads(row["content"], {}),
            logo_url=row["logo_url"],
            background_url=row["background_url"],
            event_date_image_url=row["event_date_image_url"],
            participants_image_url=row["participants_image_url"],
            ga_id=row["ga_id"],
            meta_pixel_id=row["meta_pixel_id"],
            thank_you_page_id=row["thank_you_page_id"],
            template_id=row["template_id"],
            published=bool(row["published"]),
            created_at=from_timestamp(row["created_at"]),
            updated_at=from_timestamp(row["updated_at"]),
        )

    def _row_to_template(self, row: sqlite3.Row) -> Template:
        template = Template(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            slug=row["slug"],
            description=row["description"] or "",
            form_position=row["form_position"] or "right",
            layout_type=row["layout_type"] or "default",
            max_width=row["max_width"] or "full",
            created_at=from_timestamp(row["created_at"]),
        )
        for column in TEMPLATE_JSON_COLUMNS:
            default = getattr(template, column)
            setattr(template, column, _loads(row[column], default))
        return template

    def _row_to_thank_you_page(self, row: sqlite3.Row) -> ThankYouPage:
        page = ThankYouPage(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            description=row["description"] or "",
            slug=row["slug"],
            logo_url=row["logo_url"],
            message=row["message"] or "",
            redirect_url=row["redirect_url"],
            redirect_delay=row["redirect_delay"],
            published=bool(row["published"]),
            created_at=from_timestamp(row["created_at"]),
            updated_at=from_timestamp(row["updated_at"]),
        )
        page.colors = _loads(row["colors"], page.colors)
        return page

    def _row_to_lead(self, row: sqlite3.Row) -> Lead:
        keys = row.keys()
        return Lead(
            id=row["id"],
            landing_page_id=row["landing_page_id"],
            data=_loads(row["data"], {}),
            created_at=from_timestamp(row["created_at"]),
            landing_page_title=row["page_title"] if "page_title" in keys else None,
            landing_page_slug=row["page_slug"] if "page_slug" in keys else None,
        )

    def _row_to_page_view(self, row: sqlite3.Row) -> PageView:
        return PageView(
            id=row["id"],
            landing_page_id=row["landing_page_id"],
            session_id=row["session_id"],
            referrer=row["referrer"] or "",
            user_agent=row["user_agent"] or "",
            duration_seconds=row["duration_seconds"],
            created_at=from_timestamp(row["created_at"]),
        )

    def _row_to_app_config(self, row: sqlite3.Row) -> AppConfig:
        return AppConfig(
            id=row["id"],
            site_name=row["site_name"] or "Simplo Pages",
            logo_url=row["logo_url"],
            favicon_url=row["favicon_url"],
            primary_color=row["primary_color"] or "#0066FF",
            notify_on_lead=bool(row["notify_on_lead"]),
            admin_email=row["admin_email"] or "",
            whatsapp_number=row["whatsapp_number"],
            whatsapp_message=row["whatsapp_message"],
            integration_api_key=row["integration_api_key"],
            is_active=bool(row["is_active"]),
        )

    def _landing_page_values(self, page: LandingPage) -> List[Any]:
        return [
            page.user_id, page.title, page.description, page.slug,
            json.dumps(page.content), page.logo_url, page.background_url,
            page.event_date_image_url, page.participants_image_url,
            page.ga_id, page.meta_pixel_id, page.thank_you_page_id,
            page.template_id, int(page.published),
            to_timestamp(page.created_at), to_timestamp(page.updated_at),
        ]

    def _template_values(self, template: Template) -> List[Any]:
        values = []
        for column in TEMPLATE_COLUMNS:
            value = getattr(template, column)
            if column in TEMPLATE_JSON_COLUMNS:
                value = json.dumps(value)
            elif column == "created_at":
                value = to_timestamp(value)
            values.append(value)
        return values

    def _thank_you_values(self, page: ThankYouPage) -> List[Any]:
        return [
            page.user_id, page.title, page.description, page.slug,
            page.logo_url, page.message, page.redirect_url,
            page.redirect_delay, json.dumps(page.colors), int(page.published),
            to_timestamp(page.created_at), to_timestamp(page.updated_at),
        ]

    # === USERS & SESSIONS ===

    def insert_user(self, user: User):
        with self._get_connection() as conn:
            conn.execute(
                "INSERT INTO users (id, email, password_hash, created_at) VALUES (?, ?, ?, ?)",
                (user.id, user.email, user.password_hash, to_timestamp(user.created_at)),
            )

    def get_user(self, user_id: str) -> Optional[User]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            return self._row_to_user(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE email = ? COLLATE NOCASE", (email,)
            ).fetchone()
            return self._row_to_user(row) if row else None

    def count_users(self) -> int:
        with self._get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]

    def update_password(self, user_id: str, password_hash: str):
        with self._get_connection() as conn:
            conn.execute(
                "UPDATE users SET password_hash = ? WHERE id = ?", (password_hash, user_id)
            )

    def save_profile(self, profile: Profile):
        with self._get_connection() as conn:
            conn.execute(
                """INSERT INTO profiles (id, name, avatar_url, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    avatar_url = excluded.avatar_url,
                    updated_at = excluded.updated_at""",
                (profile.id, profile.name, profile.avatar_url, to_timestamp(profile.updated_at)),
            )

    def get_profile(self, user_id: str) -> Optional[Profile]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT * FROM profiles WHERE id = ?", (user_id,)).fetchone()
            if not row:
                return None
            return Profile(
                id=row["id"],
                name=row["name"] or "",
                avatar_url=row["avatar_url"],
                updated_at=from_timestamp(row["updated_at"]),
            )

    def insert_session(self, session: Session):
        with self._get_connection() as conn:
            conn.execute(
                "INSERT INTO sessions (token, user_id, created_at, expires_at) VALUES (?, ?, ?, ?)",
                (
                    session.token,
                    session.user_id,
                    to_timestamp(session.created_at),
                    to_timestamp(session.expires_at) if session.expires_at else None,
                ),
            )

    def get_session(self, token: str) -> Optional[Session]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT * FROM sessions WHERE token = ?", (token,)).fetchone()
            if not row:
                return None
            return Session(
                token=row["token"],
                user_id=row["user_id"],
                created_at=from_timestamp(row["created_at"]),
                expires_at=from_timestamp(row["expires_at"]),
            )

    def delete_session(self, token: str) -> bool:
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM sessions WHERE token = ?", (token,))
            return cursor.rowcount > 0

    def delete_expired_sessions(self, now: datetime) -> int:
        with self._get_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM sessions WHERE expires_at IS NOT NULL AND expires_at <= ?",
                (to_timestamp(now),),
            )
            return cursor.rowcount

    # === LANDING PAGES ===

    def slug_exists(self, table: str, slug: str, exclude_id: Optional[str] = None) -> bool:
        """Check whether a slug is taken in ``landing_pages`` or ``thank_you_pages``."""
        if table not in ("landing_pages", "thank_you_pages"):
            raise ValueError(f"Unknown slug table: {table}")
        with self._get_connection() as conn:
            if exclude_id:
                row = conn.execute(
                    f"SELECT 1 FROM {table} WHERE slug = ? AND id != ?", (slug, exclude_id)
                ).fetchone()
            else:
                row = conn.execute(f"SELECT 1 FROM {table} WHERE slug = ?", (slug,)).fetchone()
            return row is not None

    def insert_landing_page(self, page: LandingPage):
        placeholders = ", ".join("?" for _ in range(len(LANDING_PAGE_COLUMNS) + 1))
        with self._get_connection() as conn:
            conn.execute(
                f"INSERT INTO landing_pages (id, {', '.join(LANDING_PAGE_COLUMNS)}) VALUES ({placeholders})",
                [page.id] + self._landing_page_values(page),
            )

    def update_landing_page(self, page: LandingPage) -> bool:
        assignments = ", ".join(f"{c} = ?" for c in LANDING_PAGE_COLUMNS)
        with self._get_connection() as conn:
            cursor = conn.execute(
                f"UPDATE landing_pages SET {assignments} WHERE id = ?",
                self._landing_page_values(page) + [page.id],
            )
            return cursor.rowcount > 0

    def delete_landing_page(self, page_id: str) -> bool:
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM landing_pages WHERE id = ?", (page_id,))
            return cursor.rowcount > 0

    def get_landing_page(self, page_id: str) -> Optional[LandingPage]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT * FROM landing_pages WHERE id = ?", (page_id,)).fetchone()
            return self._row_to_landing_page(row) if row else None

    def get_landing_page_by_slug(self, slug: str) -> Optional[LandingPage]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT * FROM landing_pages WHERE slug = ?", (slug,)).fetchone()
            return self._row_to_landing_page(row) if row else None

    def list_landing_pages(self, user_id: Optional[str] = None) -> List[LandingPage]:
        with self._get_connection() as conn:
            if user_id:
                rows = conn.execute(
                    "SELECT * FROM landing_pages WHERE user_id = ? ORDER BY created_at DESC",
                    (user_id,),
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM landing_pages ORDER BY created_at DESC"
                ).fetchall()
            return [self._row_to_landing_page(r) for r in rows]

    # === TEMPLATES ===

    def insert_template(self, template: Template):
        placeholders = ", ".join("?" for _ in range(len(TEMPLATE_COLUMNS) + 1))
        with self._get_connection() as conn:
            conn.execute(
                f"INSERT INTO templates (id, {', '.join(TEMPLATE_COLUMNS)}) VALUES ({placeholders})",
                [template.id] + self._template_values(template),
            )

    def update_template(self, template: Template) -> bool:
        assignments = ", ".join(f"{c} = ?" for c in TEMPLATE_COLUMNS)
        with self._get_connection() as conn:
            cursor = conn.execute(
                f"UPDATE templates SET {assignments} WHERE id = ?",
                self._template_values(template) + [template.id],
            )
            return cursor.rowcount > 0

    def delete_template(self, template_id: str) -> bool:
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM templates WHERE id = ?", (template_id,))
            return cursor.rowcount > 0

    def get_template(self, template_id: str) -> Optional[Template]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT * FROM templates WHERE id = ?", (template_id,)).fetchone()
            return self._row_to_template(row) if row else None

    def list_templates(self, user_id: Optional[str] = None) -> List[Template]:
        with self._get_connection() as conn:
            if user_id:
                rows = conn.execute(
                    "SELECT * FROM templates WHERE user_id = ? ORDER BY created_at DESC",
                    (user_id,),
                ).fetchall()
            else:
                rows = conn.execute("SELECT * FROM templates ORDER BY created_at DESC").fetchall()
            return [self._row_to_template(r) for r in rows]

    # === THANK-YOU PAGES ===

    def insert_thank_you_page(self, page: ThankYouPage):
        placeholders = ", ".join("?" for _ in range(len(THANK_YOU_COLUMNS) + 1))
        with self._get_connection() as conn:
            conn.execute(
                f"INSERT INTO thank_you_pages (id, {', '.join(THANK_YOU_COLUMNS)}) VALUES ({placeholders})",
                [page.id] + self._thank_you_values(page),
            )

    def update_thank_you_page(self, page: ThankYouPage) -> bool:
        assignments = ", ".join(f"{c} = ?" for c in THANK_YOU_COLUMNS)
        with self._get_connection() as conn:
            cursor = conn.execute(
                f"UPDATE thank_you_pages SET {assignments} WHERE id = ?",
                self._thank_you_values(page) + [page.id],
            )
            return cursor.rowcount > 0

    def delete_thank_you_page(self, page_id: str) -> bool:
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM thank_you_pages WHERE id = ?", (page_id,))
            return cursor.rowcount > 0

    def get_thank_you_page(self, page_id: str) -> Optional[ThankYouPage]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT * FROM thank_you_pages WHERE id = ?", (page_id,)).fetchone()
            return self._row_to_thank_you_page(row) if row else None

    def get_thank_you_page_by_slug(self, slug: str) -> Optional[ThankYouPage]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT * FROM thank_you_pages WHERE slug = ?", (slug,)).fetchone()
            return self._row_to_thank_you_page(row) if row else None

    def list_thank_you_pages(self, user_id: Optional[str] = None) -> List[ThankYouPage]:
        with self._get_connection() as conn:
            if user_id:
                rows = conn.execute(
                    "SELECT * FROM thank_you_pages WHERE user_id = ? ORDER BY created_at DESC",
                    (user_id,),
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM thank_you_pages ORDER BY created_at DESC"
                ).fetchall()
            return [self._row_to_thank_you_page(r) for r in rows]

    # === LEADS ===

    _LEAD_SELECT = """
        SELECT l.id, l.landing_page_id, l.data, l.created_at,
               lp.title AS page_title, lp.slug AS page_slug
        FROM leads l
        LEFT JOIN landing_pages lp ON lp.id = l.landing_page_id
    """

    def insert_lead(self, lead: Lead):
        with self._get_connection() as conn:
            conn.execute(
                "INSERT INTO leads (id, landing_page_id, data, created_at) VALUES (?, ?, ?, ?)",
                (lead.id, lead.landing_page_id, json.dumps(lead.data), to_timestamp(lead.created_at)),
            )

    def get_lead(self, lead_id: str) -> Optional[Lead]:
        with self._get_connection() as conn:
            row = conn.execute(self._LEAD_SELECT + " WHERE l.id = ?", (lead_id,)).fetchone()
            return self._row_to_lead(row) if row else None

    def delete_lead(self, lead_id: str) -> bool:
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM leads WHERE id = ?", (lead_id,))
            return cursor.rowcount > 0

    def query_leads(
        self,
        user_id: Optional[str] = None,
        landing_page_id: Optional[str] = None,
        start: Optional[str] = None,
        end_before: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[Lead], int]:
        """Filter leads, newest first. Returns (page of leads, total matching)."""
        wheres = []
        params: List[Any] = []

        if user_id:
            wheres.append("lp.user_id = ?")
            params.append(user_id)
        if landing_page_id:
            wheres.append("l.landing_page_id = ?")
            params.append(landing_page_id)
        if start:
            wheres.append("l.created_at >= ?")
            params.append(start)
        if end_before:
            wheres.append("l.created_at < ?")
            params.append(end_before)

        where_sql = f" WHERE {' AND '.join(wheres)}" if wheres else ""

        with self._get_connection() as conn:
            total = conn.execute(
                "SELECT COUNT(*) FROM leads l LEFT JOIN landing_pages lp ON lp.id = l.landing_page_id"
                + where_sql,
                params,
            ).fetchone()[0]

            query = self._LEAD_SELECT + where_sql + " ORDER BY l.created_at DESC"
            page_params = list(params)
            if limit is not None:
                query += " LIMIT ? OFFSET ?"
                page_params.extend([limit, offset])

            rows = conn.execute(query, page_params).fetchall()
            return [self._row_to_lead(r) for r in rows], total

    # === PAGE VIEWS & EVENTS ===

    def insert_page_view(self, view: PageView):
        with self._get_connection() as conn:
            conn.execute(
                """INSERT INTO page_views (
                    id, landing_page_id, session_id, referrer, user_agent,
                    duration_seconds, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    view.id, view.landing_page_id, view.session_id, view.referrer,
                    view.user_agent, view.duration_seconds, to_timestamp(view.created_at),
                ),
            )

    def update_view_duration(self, session_id: str, duration_seconds: int) -> int:
        with self._get_connection() as conn:
            cursor = conn.execute(
                "UPDATE page_views SET duration_seconds = ? WHERE session_id = ?",
                (duration_seconds, session_id),
            )
            return cursor.rowcount

    def list_page_views(
        self,
        landing_page_id: Optional[str] = None,
        since: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> List[PageView]:
        wheres = []
        params: List[Any] = []
        if landing_page_id:
            wheres.append("pv.landing_page_id = ?")
            params.append(landing_page_id)
        if since:
            wheres.append("pv.created_at >= ?")
            params.append(since)
        if user_id:
            wheres.append("lp.user_id = ?")
            params.append(user_id)

        query = (
            "SELECT pv.* FROM page_views pv "
            "JOIN landing_pages lp ON lp.id = pv.landing_page_id"
        )
        if wheres:
            query += " WHERE " + " AND ".join(wheres)
        query += " ORDER BY pv.created_at"

        with self._get_connection() as conn:
            rows = conn.execute(query, params).fetchall()
            return [self._row_to_page_view(r) for r in rows]

    def insert_event(self, event: AnalyticsEvent):
        with self._get_connection() as conn:
            conn.execute(
                """INSERT INTO analytics_events (
                    id, landing_page_id, session_id, event_type, event_data, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    event.id, event.landing_page_id, event.session_id, event.event_type,
                    json.dumps(event.event_data), to_timestamp(event.created_at),
                ),
            )

    def count_events(self, landing_page_id: str, event_type: Optional[str] = None) -> int:
        with self._get_connection() as conn:
            if event_type:
                row = conn.execute(
                    "SELECT COUNT(*) FROM analytics_events WHERE landing_page_id = ? AND event_type = ?",
                    (landing_page_id, event_type),
                ).fetchone()
            else:
                row = conn.execute(
                    "SELECT COUNT(*) FROM analytics_events WHERE landing_page_id = ?",
                    (landing_page_id,),
                ).fetchone()
            return row[0]

    # === APP CONFIG ===

    def get_active_config(self) -> Optional[AppConfig]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM app_config WHERE is_active = 1 LIMIT 1"
            ).fetchone()
            return self._row_to_app_config(row) if row else None

    def save_config(self, config: AppConfig):
        values: Dict[str, Any] = config.to_dict()
        values["notify_on_lead"] = int(config.notify_on_lead)
        values["is_active"] = int(config.is_active)
        columns = ", ".join(APP_CONFIG_COLUMNS)
        placeholders = ", ".join("?" for _ in range(len(APP_CONFIG_COLUMNS) + 1))
        updates = ", ".join(f"{c} = excluded.{c}" for c in APP_CONFIG_COLUMNS)
        with self._get_connection() as conn:
            conn.execute(
                f"""INSERT INTO app_config (id, {columns}) VALUES ({placeholders})
                ON CONFLICT(id) DO UPDATE SET {updates}""",
                [config.id] + [values[c] for c in APP_CONFIG_COLUMNS],
            )
