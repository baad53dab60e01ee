# pdf_tools/auth.py
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from fastapi import HTTPException, Request
from itsdangerous import BadSignature, URLSafeSerializer
from passlib.context import CryptContext

from . import config


# ----------------------------
# AUTH (Python 3.13 safe)
# ----------------------------
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

session_serializer = URLSafeSerializer(config.SECRET_KEY, salt="pdf-tools-session")


# ----------------------------
# DB
# ----------------------------
def db(path: Optional[Path] = None):
    conn = sqlite3.connect(path or config.DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(path: Optional[Path] = None):
    path = Path(path or config.DB_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = db(path)
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS users(
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL,
            subscription TEXT NOT NULL DEFAULT 'free',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """
    )
    conn.commit()
    conn.close()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def create_user(email: str, password: str) -> None:
    email = normalize_email(email)
    if not email:
        raise HTTPException(400, "Email is required")
    now = _now()
    conn = db()
    try:
        conn.execute(
            "INSERT INTO users(email, password_hash, created_at, updated_at) VALUES (?, ?, ?, ?)",
            (email, hash_password(password), now, now),
        )
        conn.commit()
    except sqlite3.IntegrityError:
        raise HTTPException(400, "Email already exists")
    finally:
        conn.close()


def get_user(email: str) -> Optional[sqlite3.Row]:
    conn = db()
    row = conn.execute("SELECT * FROM users WHERE email=?", (normalize_email(email),)).fetchone()
    conn.close()
    return row


def authenticate(email: str, password: str) -> Optional[sqlite3.Row]:
    row = get_user(email)
    if not row or not verify_password(password, row["password_hash"]):
        return None
    return row


def set_subscription(email: str, plan: str) -> None:
    conn = db()
    conn.execute(
        "UPDATE users SET subscription=?, updated_at=? WHERE email=?",
        (plan, _now(), normalize_email(email)),
    )
    conn.commit()
    conn.close()


# ----------------------------
# Auth helpers
# ----------------------------
def validate_password(password: str):
    if not password or len(password) < 6:
        raise HTTPException(400, "Password must be at least 6 characters")
    if len(password) > 200:
        raise HTTPException(400, "Password too long (max 200 characters)")


def hash_password(password: str) -> str:
    validate_password(password)
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def create_session(email: str) -> str:
    return session_serializer.dumps({"email": email})


def read_session(token: str) -> Optional[str]:
    try:
        data = session_serializer.loads(token)
        return data.get("email")
    except BadSignature:
        return None


def get_current_user_email(request: Request) -> Optional[str]:
    token = request.cookies.get(config.COOKIE_NAME)
    if not token:
        return None
    return read_session(token)


def is_protected(path: str) -> bool:
    return any(path == p or path.startswith(p + "/") for p in config.PROTECTED_PREFIXES)


def signin_redirect_url(path: str) -> str:
    return f"/auth/signin?callbackUrl={quote(path, safe='')}"


def safe_callback(url: Optional[str]) -> str:
    # Only same-site relative paths; anything else lands on the dashboard
    if url and url.startswith("/") and not url.startswith("//"):
        return url
    return "/dashboard"
