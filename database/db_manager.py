import sqlite3
import datetime
from config import DATABASE_NAME

def get_db_connection():
    conn = sqlite3.connect(DATABASE_NAME)
    conn.row_factory = sqlite3.Row
    return conn

def init_db():
    conn = get_db_connection()
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY,
            first_name TEXT,
            username TEXT,
            searches INTEGER DEFAULT 0,
            found_searches INTEGER DEFAULT 0,
            join_date TEXT
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS announcements (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            text TEXT NOT NULL,
            status TEXT DEFAULT 'pending', -- pending, sent
            created_by INTEGER,
            created_date TEXT,
            sent_date TEXT
        )
    """)

    conn.commit()
    conn.close()

def _now():
    return datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")

def save_user(user):
    conn = get_db_connection()
    cursor = conn.cursor()
    cursor.execute("SELECT id FROM users WHERE id = ?", (user.id,))
    if cursor.fetchone() is None:
        cursor.execute("INSERT INTO users (id, first_name, username, join_date) VALUES (?, ?, ?, ?)",
                       (user.id, user.first_name, user.username, _now()))
    conn.commit()
    conn.close()

def record_search(user_id, found):
    conn = get_db_connection()
    conn.execute("UPDATE users SET searches = searches + 1, found_searches = found_searches + ? WHERE id = ?",
                 (1 if found else 0, user_id))
    conn.commit()
    conn.close()

def get_all_users_id():
    conn = get_db_connection()
    ids = [row['id'] for row in conn.execute("SELECT id FROM users").fetchall()]
    conn.close()
    return ids

def get_search_totals():
    conn = get_db_connection()
    row = conn.execute("SELECT COALESCE(SUM(searches), 0) AS searches, COALESCE(SUM(found_searches), 0) AS found FROM users").fetchone()
    conn.close()
    return (row['searches'], row['found']) if row else (0, 0)

# ---------------------------
# الإعلانات
# ---------------------------

def add_announcement(text, created_by=None):
    conn = get_db_connection()
    cursor = conn.cursor()
    cursor.execute("INSERT INTO announcements (text, status, created_by, created_date) VALUES (?, 'pending', ?, ?)",
                   (text, created_by, _now()))
    announcement_id = cursor.lastrowid
    conn.commit()
    conn.close()
    return announcement_id

def get_latest_announcements(limit=5):
    conn = get_db_connection()
    rows = conn.execute(
        "SELECT id, text, status, created_date FROM announcements ORDER BY id DESC LIMIT ?",
        (limit,)
    ).fetchall()
    conn.close()
    return [dict(r) for r in rows]

def get_pending_announcements():
    conn = get_db_connection()
    rows = conn.execute("SELECT id, text FROM announcements WHERE status = 'pending' ORDER BY id").fetchall()
    conn.close()
    return [dict(r) for r in rows]

def mark_announcements_sent(announcement_ids):
    if not announcement_ids:
        return
    conn = get_db_connection()
    placeholders = ','.join(['?'] * len(announcement_ids))
    conn.execute(f"UPDATE announcements SET status = 'sent', sent_date = ? WHERE id IN ({placeholders})",
                 (_now(), *announcement_ids))
    conn.commit()
    conn.close()
