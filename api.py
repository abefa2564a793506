import logging
import os
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional

import psycopg2
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from psycopg2.extras import RealDictCursor
from pydantic import BaseModel
from thefuzz import fuzz, process

import storage
from graph import calculate_total
from nodes.aggregator import aggregate
from service_order import build_service_order_details
from state import SimpleQuote

load_dotenv()

logger = logging.getLogger(__name__)

PROJECT_SEARCH_CUTOFF = int(os.getenv("PROJECT_SEARCH_CUTOFF", "60"))

app = FastAPI(title="Painting Quote API")


# --- Models ---
class CalculationResponse(BaseModel):
    quote: SimpleQuote
    summary: str
    warnings: List[str]


# --- DB Helper ---
@contextmanager
def db_cursor():
    """One connection per request: commit on success, roll back on any error."""
    try:
        conn = storage.get_db_connection()
    except psycopg2.Error as e:
        logger.error("Could not connect to database: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    cur = conn.cursor(cursor_factory=RealDictCursor)

    try:
        yield cur
        conn.commit()
    except psycopg2.Error as e:
        conn.rollback()
        logger.error("Database error: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    except Exception:
        conn.rollback()
        raise
    finally:
        cur.close()
        conn.close()


def quote_from_row(row: Dict[str, Any]) -> SimpleQuote:
    return SimpleQuote.model_validate(dict(row))


def _project_title(project: Optional[Dict[str, Any]]) -> str:
    return project["title"] if project else "Unknown"


def _audit_total(quote: SimpleQuote) -> None:
    # The submitted total is trusted; a mismatch is only logged
    recomputed = aggregate(quote).total_estimate
    if recomputed != 0 and abs(recomputed - quote.total_estimate) >= 0.005:
        logger.warning(
            "Quote for project %s submitted total $%.2f but its breakdown sums to $%.2f; "
            "keeping the submitted total.",
            quote.project_id, quote.total_estimate, recomputed,
        )


def _stamp_status_dates(quote: SimpleQuote) -> SimpleQuote:
    now = datetime.now()
    update = {}
    if quote.status == "sent" and quote.sent_date is None:
        update["sent_date"] = now
    elif quote.status == "approved" and quote.approved_date is None:
        update["approved_date"] = now
    elif quote.status == "rejected" and quote.rejected_date is None:
        update["rejected_date"] = now
    return quote.model_copy(update=update) if update else quote


def _record_status_change(cur, row: Dict[str, Any], project: Optional[Dict[str, Any]]) -> None:
    """Moves the project along with the quote and logs the matching activity."""
    status = row["status"]
    title = _project_title(project)
    client_id = project["client_id"] if project else None

    if status == "approved":
        storage.update_project_status(cur, row["project_id"], "approved")
        storage.insert_activity(cur, "quote_approved", f'Quote for project "{title}" has been approved',
                                row["project_id"], client_id)
    elif status == "rejected":
        storage.insert_activity(cur, "quote_rejected", f'Quote for project "{title}" has been rejected',
                                row["project_id"], client_id)
    elif status == "sent":
        storage.update_project_status(cur, row["project_id"], "quoted")
        storage.insert_activity(cur, "quote_sent", f'Quote for project "{title}" has been sent to client',
                                row["project_id"], client_id)


# --- Error Handlers ---
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
    )


# --- Endpoints ---

@app.post("/api/simple-quotes/calculate", response_model=CalculationResponse)
def calculate_simple_quote(quote: SimpleQuote):
    """The "Calculate Total" action; nothing is saved."""
    breakdown, summary, warnings = calculate_total(quote)
    return {"quote": breakdown, "summary": summary, "warnings": warnings}


@app.post("/api/simple-quotes", response_model=SimpleQuote, status_code=201)
def create_simple_quote(quote: SimpleQuote):
    _audit_total(quote)
    quote = _stamp_status_dates(quote)

    with db_cursor() as cur:
        project = storage.fetch_project(cur, quote.project_id)
        if not project:
            raise HTTPException(status_code=404, detail=f"Project {quote.project_id} not found")

        row = storage.insert_quote(cur, quote)
        storage.insert_activity(cur, "quote_created", f'New quote created for project "{project["title"]}"',
                                row["project_id"], project["client_id"])
        if row["status"] == "sent":
            _record_status_change(cur, row, project)

    return quote_from_row(row)


@app.put("/api/simple-quotes/{quote_id}", response_model=SimpleQuote)
def update_simple_quote(quote_id: int, quote: SimpleQuote):
    _audit_total(quote)
    quote = _stamp_status_dates(quote)

    with db_cursor() as cur:
        existing = storage.fetch_quote(cur, quote_id)
        if not existing:
            raise HTTPException(status_code=404, detail="Quote not found")

        row = storage.update_quote(cur, quote_id, quote)
        project = storage.fetch_project(cur, row["project_id"])
        if row["status"] != existing["status"] and row["status"] in ("approved", "rejected", "sent"):
            _record_status_change(cur, row, project)
        else:
            storage.insert_activity(cur, "quote_updated",
                                    f'Quote updated for project "{_project_title(project)}"',
                                    row["project_id"], project["client_id"] if project else None)

    return quote_from_row(row)


@app.get("/api/quotes", response_model=List[SimpleQuote])
def list_quotes():
    with db_cursor() as cur:
        rows = storage.fetch_quotes(cur)
    return [quote_from_row(row) for row in rows]


@app.get("/api/quotes/{quote_id}", response_model=SimpleQuote)
def get_quote(quote_id: int):
    with db_cursor() as cur:
        row = storage.fetch_quote(cur, quote_id)
    if not row:
        raise HTTPException(status_code=404, detail="Quote not found")
    return quote_from_row(row)


@app.delete("/api/quotes/{quote_id}", status_code=204)
def delete_quote(quote_id: int):
    with db_cursor() as cur:
        row = storage.fetch_quote(cur, quote_id)
        if not row:
            raise HTTPException(status_code=404, detail="Quote not found")
        project = storage.fetch_project(cur, row["project_id"])
        storage.delete_quote(cur, quote_id)
        storage.insert_activity(cur, "quote_deleted",
                                f'Quote deleted for project "{_project_title(project)}"',
                                row["project_id"], project["client_id"] if project else None)
    return Response(status_code=204)


@app.post("/api/quotes/{quote_id}/service-order", status_code=201)
def convert_to_service_order(quote_id: int):
    with db_cursor() as cur:
        row = storage.fetch_quote(cur, quote_id)
        if not row:
            raise HTTPException(status_code=404, detail="Quote not found")
        quote = quote_from_row(row)
        project = storage.fetch_project(cur, quote.project_id)

        details = build_service_order_details(quote, project)
        service_order = storage.insert_service_order(cur, quote.project_id, quote_id, details)
        storage.update_quote_status(cur, quote_id, "converted")
        storage.insert_activity(cur, "service_order_created",
                                f'New service order created for project "{_project_title(project)}"',
                                quote.project_id, project["client_id"] if project else None)

    return jsonable_encoder(service_order)


@app.get("/api/projects")
def list_projects(status: Optional[str] = None,
                  client_id: Optional[int] = Query(None, alias="clientId"),
                  search: Optional[str] = None):
    with db_cursor() as cur:
        projects = storage.fetch_projects(cur, status=status, client_id=client_id)

    if search and projects:
        # Fuzzy title search for the quote form's project dropdown
        choices = {project["id"]: project["title"] for project in projects}
        by_id = {project["id"]: project for project in projects}
        matches = process.extractBests(search, choices, scorer=fuzz.token_set_ratio,
                                       score_cutoff=PROJECT_SEARCH_CUTOFF, limit=len(choices))
        projects = [by_id[project_id] for _, _, project_id in matches]

    return jsonable_encoder(projects)


@app.get("/api/projects/{project_id}/quote", response_model=SimpleQuote)
def get_project_quote(project_id: int):
    with db_cursor() as cur:
        row = storage.fetch_quote_by_project(cur, project_id)
    if not row:
        raise HTTPException(status_code=404, detail="Quote not found for project")
    return quote_from_row(row)


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    uvicorn.run(app, host="0.0.0.0", port=8000)
