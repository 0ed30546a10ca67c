"""
database.py
SQLite storage for investor and deal definitions

Provides:
- Connection management
- Schema creation and seeding with the sample portfolio
- Investor / deal CRUD (removing an investor also strips its participations)
- Reset to defaults

Only definitions are stored. Calculation state (unpaid pref, results) is
never persisted.
"""

import json
import logging
import sqlite3
from typing import List, Optional

import pandas as pd

from config import DB_PATH, DEFAULT_INVESTORS, DEFAULT_DEALS
from models import Investor, Deal

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def get_db_connection(db_path: Optional[str] = None) -> sqlite3.Connection:
    """
    Get database connection

    Returns:
        sqlite3.Connection with row_factory set to Row
    """
    conn = sqlite3.connect(db_path or DB_PATH, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA synchronous=NORMAL")
    return conn


def create_tables(conn: sqlite3.Connection):
    """Create investor and deal tables if missing"""
    conn.execute("""
        CREATE TABLE IF NOT EXISTS investors (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            is_gp INTEGER NOT NULL DEFAULT 0,
            commitment REAL NOT NULL DEFAULT 0,
            carry_percentage REAL NOT NULL DEFAULT 0,
            sort_order INTEGER NOT NULL DEFAULT 0
        )
    """)

    # Nested structures (participants, actual returns, tiers) stored as JSON
    conn.execute("""
        CREATE TABLE IF NOT EXISTS deals (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            is_active INTEGER NOT NULL DEFAULT 1,
            timeline_years INTEGER NOT NULL,
            management_fee REAL NOT NULL DEFAULT 0,
            preferred_return REAL NOT NULL DEFAULT 0,
            projected_annual_return REAL NOT NULL DEFAULT 0,
            actual_annual_returns TEXT NOT NULL DEFAULT '[]',
            participants TEXT NOT NULL DEFAULT '[]',
            waterfall TEXT NOT NULL DEFAULT '{}',
            sort_order INTEGER NOT NULL DEFAULT 0,
            last_updated TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)
    conn.commit()


def init_database(db_path: Optional[str] = None, seed: bool = True) -> int:
    """
    Create tables and seed the sample portfolio into an empty database

    Returns:
        Number of investors in the database afterwards
    """
    conn = get_db_connection(db_path)
    try:
        create_tables(conn)
        count = conn.execute("SELECT COUNT(*) FROM investors").fetchone()[0]
        deal_count = conn.execute("SELECT COUNT(*) FROM deals").fetchone()[0]
        if seed and count == 0 and deal_count == 0:
            _write_defaults(conn)
            count = len(DEFAULT_INVESTORS)
            logger.info(f"✅ Seeded {count} investors and {len(DEFAULT_DEALS)} deals")
        return count
    finally:
        conn.close()


def _write_defaults(conn: sqlite3.Connection):
    for i, d in enumerate(DEFAULT_INVESTORS):
        _upsert_investor(conn, Investor.from_dict(d), i)
    for i, d in enumerate(DEFAULT_DEALS):
        _upsert_deal(conn, Deal.from_dict(d), i)
    conn.commit()


# ============================================================
# INVESTORS
# ============================================================

def load_investors(db_path: Optional[str] = None) -> List[Investor]:
    """Load all investors in display order"""
    conn = get_db_connection(db_path)
    try:
        df = pd.read_sql("SELECT * FROM investors ORDER BY sort_order, rowid", conn)
    finally:
        conn.close()

    return [
        Investor(
            id=str(r["id"]),
            name=str(r["name"]),
            is_gp=bool(r["is_gp"]),
            commitment=float(r["commitment"]),
            carry_percentage=float(r["carry_percentage"]),
        )
        for r in df.to_dict("records")
    ]


def _next_sort_order(conn: sqlite3.Connection, table: str) -> int:
    row = conn.execute(f"SELECT COALESCE(MAX(sort_order), -1) + 1 FROM {table}").fetchone()
    return int(row[0])


def _upsert_investor(conn: sqlite3.Connection, investor: Investor, sort_order: Optional[int] = None):
    cursor = conn.cursor()
    cursor.execute("SELECT 1 FROM investors WHERE id = ?", (investor.id,))
    exists = cursor.fetchone() is not None

    if exists:
        cursor.execute(
            """UPDATE investors SET name = ?, is_gp = ?, commitment = ?, carry_percentage = ?
               WHERE id = ?""",
            (investor.name, int(investor.is_gp), float(investor.commitment),
             float(investor.carry_percentage), investor.id)
        )
    else:
        if sort_order is None:
            sort_order = _next_sort_order(conn, "investors")
        cursor.execute(
            """INSERT INTO investors (id, name, is_gp, commitment, carry_percentage, sort_order)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (investor.id, investor.name, int(investor.is_gp), float(investor.commitment),
             float(investor.carry_percentage), sort_order)
        )


def save_investor(investor: Investor, db_path: Optional[str] = None):
    """Insert or update one investor"""
    conn = get_db_connection(db_path)
    try:
        _upsert_investor(conn, investor)
        conn.commit()
    except Exception as e:
        logger.error(f"❌ Error saving investor {investor.id}: {e}")
        raise
    finally:
        conn.close()


def save_investors(investors: List[Investor], db_path: Optional[str] = None):
    """Replace the investor table with the given list (keeps list order)"""
    conn = get_db_connection(db_path)
    try:
        keep = {i.id for i in investors}
        existing = [r[0] for r in conn.execute("SELECT id FROM investors").fetchall()]
        for inv_id in existing:
            if inv_id not in keep:
                _delete_investor(conn, inv_id)
        for idx, inv in enumerate(investors):
            _upsert_investor(conn, inv, idx)
            conn.execute("UPDATE investors SET sort_order = ? WHERE id = ?", (idx, inv.id))
        conn.commit()
    except Exception as e:
        logger.error(f"❌ Error saving investors: {e}")
        raise
    finally:
        conn.close()


def _delete_investor(conn: sqlite3.Connection, investor_id: str):
    conn.execute("DELETE FROM investors WHERE id = ?", (investor_id,))

    # Cascade: drop this investor from every deal's participants
    rows = conn.execute("SELECT id, participants FROM deals").fetchall()
    for r in rows:
        parts = json.loads(r["participants"] or "[]")
        kept = [p for p in parts if p.get("investor_id") != investor_id]
        if len(kept) != len(parts):
            conn.execute(
                "UPDATE deals SET participants = ?, last_updated = CURRENT_TIMESTAMP WHERE id = ?",
                (json.dumps(kept), r["id"])
            )


def remove_investor(investor_id: str, db_path: Optional[str] = None):
    """Delete an investor and its participations in all deals"""
    conn = get_db_connection(db_path)
    try:
        _delete_investor(conn, investor_id)
        conn.commit()
        logger.info(f"Removed investor {investor_id}")
    finally:
        conn.close()


# ============================================================
# DEALS
# ============================================================

def _deal_from_row(r: dict) -> Deal:
    d = json.loads(r["waterfall"] or "{}")
    d.update({
        "id": r["id"],
        "name": r["name"],
        "is_active": bool(r["is_active"]),
        "timeline_years": int(r["timeline_years"]),
        "management_fee": float(r["management_fee"]),
        "preferred_return": float(r["preferred_return"]),
        "projected_annual_return": float(r["projected_annual_return"]),
        "actual_annual_returns": json.loads(r["actual_annual_returns"] or "[]"),
        "participants": json.loads(r["participants"] or "[]"),
    })
    return Deal.from_dict(d)


def load_deals(db_path: Optional[str] = None) -> List[Deal]:
    """Load deals in display order"""
    conn = get_db_connection(db_path)
    try:
        df = pd.read_sql("SELECT * FROM deals ORDER BY sort_order, rowid", conn)
    finally:
        conn.close()

    return [_deal_from_row(r) for r in df.to_dict("records")]


def _upsert_deal(conn: sqlite3.Connection, deal: Deal, sort_order: Optional[int] = None):
    d = deal.to_dict()
    waterfall = json.dumps({
        "gp_catch_up": d["gp_catch_up"],
        "first_tier": d["first_tier"],
        "second_tier": d["second_tier"],
    })
    values = (
        d["name"], int(d["is_active"]), d["timeline_years"], d["management_fee"],
        d["preferred_return"], d["projected_annual_return"],
        json.dumps(d["actual_annual_returns"]), json.dumps(d["participants"]), waterfall,
    )

    cursor = conn.cursor()
    cursor.execute("SELECT 1 FROM deals WHERE id = ?", (deal.id,))
    if cursor.fetchone() is not None:
        cursor.execute(
            """UPDATE deals SET name = ?, is_active = ?, timeline_years = ?, management_fee = ?,
                   preferred_return = ?, projected_annual_return = ?, actual_annual_returns = ?,
                   participants = ?, waterfall = ?, last_updated = CURRENT_TIMESTAMP
               WHERE id = ?""",
            values + (deal.id,)
        )
    else:
        if sort_order is None:
            sort_order = _next_sort_order(conn, "deals")
        cursor.execute(
            """INSERT INTO deals (name, is_active, timeline_years, management_fee, preferred_return,
                   projected_annual_return, actual_annual_returns, participants, waterfall,
                   id, sort_order)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            values + (deal.id, sort_order)
        )


def save_deal(deal: Deal, db_path: Optional[str] = None):
    """Insert or update one deal"""
    conn = get_db_connection(db_path)
    try:
        _upsert_deal(conn, deal)
        conn.commit()
    except Exception as e:
        logger.error(f"❌ Error saving deal {deal.id}: {e}")
        raise
    finally:
        conn.close()


def remove_deal(deal_id: str, db_path: Optional[str] = None):
    conn = get_db_connection(db_path)
    try:
        conn.execute("DELETE FROM deals WHERE id = ?", (deal_id,))
        conn.commit()
        logger.info(f"Removed deal {deal_id}")
    finally:
        conn.close()


def toggle_deal_active(deal_id: str, db_path: Optional[str] = None) -> Optional[bool]:
    """
    Flip a deal's active flag

    Returns:
        New is_active value, or None if the deal does not exist
    """
    conn = get_db_connection(db_path)
    try:
        row = conn.execute("SELECT is_active FROM deals WHERE id = ?", (deal_id,)).fetchone()
        if row is None:
            logger.warning(f"⚠️  toggle_deal_active: deal {deal_id} not found")
            return None
        new_val = not bool(row["is_active"])
        conn.execute(
            "UPDATE deals SET is_active = ?, last_updated = CURRENT_TIMESTAMP WHERE id = ?",
            (int(new_val), deal_id)
        )
        conn.commit()
        return new_val
    finally:
        conn.close()


def reset_to_defaults(db_path: Optional[str] = None):
    """Wipe investors and deals and restore the sample portfolio"""
    conn = get_db_connection(db_path)
    try:
        create_tables(conn)
        conn.execute("DELETE FROM investors")
        conn.execute("DELETE FROM deals")
        _write_defaults(conn)
        logger.info("✅ Reset investors and deals to defaults")
    finally:
        conn.close()
