import logging
import os
from typing import Any, Dict, List, Optional

import psycopg2
from dotenv import load_dotenv
from psycopg2.extras import Json

from state import SimpleQuote

load_dotenv()

logger = logging.getLogger(__name__)

# Scalar columns written from a SimpleQuote; breakdown trees go in as jsonb
QUOTE_COLUMNS = (
    "project_id",
    "project_type",
    "total_estimate",
    "scope_of_work",
    "is_interior",
    "is_exterior",
    "is_special_requirements",
    "status",
    "notes",
    "valid_until",
    "sent_date",
    "approved_date",
    "rejected_date",
)
JSON_COLUMNS = ("exterior_breakdown", "interior_breakdown", "optional_comments")


# --- DB Helper ---
def get_db_connection():
    return psycopg2.connect(os.getenv("DATABASE_URL"))


def quote_params(quote: SimpleQuote) -> Dict[str, Any]:
    params = {column: getattr(quote, column) for column in QUOTE_COLUMNS}
    for column in JSON_COLUMNS:
        # Stored with the same camelCase keys the API speaks
        params[column] = Json(getattr(quote, column).model_dump(by_alias=True))
    return params


# --- Projects ---
def fetch_projects(cur, status: Optional[str] = None, client_id: Optional[int] = None) -> List[Dict[str, Any]]:
    if status:
        cur.execute("SELECT * FROM projects WHERE status = %s ORDER BY id", (status,))
    elif client_id is not None:
        cur.execute("SELECT * FROM projects WHERE client_id = %s ORDER BY id", (client_id,))
    else:
        cur.execute("SELECT * FROM projects ORDER BY id")
    return cur.fetchall()


def fetch_project(cur, project_id: int) -> Optional[Dict[str, Any]]:
    cur.execute("SELECT * FROM projects WHERE id = %s", (project_id,))
    return cur.fetchone()


def update_project_status(cur, project_id: int, status: str) -> None:
    cur.execute("UPDATE projects SET status = %s WHERE id = %s", (status, project_id))


# --- Quotes ---
def fetch_quotes(cur) -> List[Dict[str, Any]]:
    cur.execute("SELECT * FROM quotes ORDER BY created_at DESC")
    return cur.fetchall()


def fetch_quote(cur, quote_id: int) -> Optional[Dict[str, Any]]:
    cur.execute("SELECT * FROM quotes WHERE id = %s", (quote_id,))
    return cur.fetchone()


def fetch_quote_by_project(cur, project_id: int) -> Optional[Dict[str, Any]]:
    cur.execute(
        "SELECT * FROM quotes WHERE project_id = %s ORDER BY created_at DESC LIMIT 1",
        (project_id,),
    )
    return cur.fetchone()


def insert_quote(cur, quote: SimpleQuote) -> Dict[str, Any]:
    params = quote_params(quote)
    columns = ", ".join(params)
    placeholders = ", ".join(f"%({column})s" for column in params)
    cur.execute(f"INSERT INTO quotes ({columns}) VALUES ({placeholders}) RETURNING *", params)
    return cur.fetchone()


def update_quote(cur, quote_id: int, quote: SimpleQuote) -> Optional[Dict[str, Any]]:
    params = quote_params(quote)
    assignments = ", ".join(f"{column} = %({column})s" for column in params)
    params["id"] = quote_id
    cur.execute(f"UPDATE quotes SET {assignments} WHERE id = %(id)s RETURNING *", params)
    return cur.fetchone()


def update_quote_status(cur, quote_id: int, status: str) -> None:
    cur.execute("UPDATE quotes SET status = %s WHERE id = %s", (status, quote_id))


def delete_quote(cur, quote_id: int) -> bool:
    cur.execute("DELETE FROM quotes WHERE id = %s", (quote_id,))
    return cur.rowcount > 0


# --- Activities & service orders ---
def insert_activity(cur, activity_type: str, description: str,
                    project_id: Optional[int] = None, client_id: Optional[int] = None) -> None:
    cur.execute("""
        INSERT INTO activities (type, description, project_id, client_id)
        VALUES (%s, %s, %s, %s)
    """, (activity_type, description, project_id, client_id))
    logger.info("Activity %s: %s", activity_type, description)


def insert_service_order(cur, project_id: int, quote_id: int, details: str,
                         status: str = "pending") -> Dict[str, Any]:
    cur.execute("""
        INSERT INTO service_orders (project_id, quote_id, details, status)
        VALUES (%s, %s, %s, %s)
        RETURNING *
    """, (project_id, quote_id, details, status))
    return cur.fetchone()
