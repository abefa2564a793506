from datetime import datetime

import pytest

import storage
from state import (
    BoxesModule,
    DormerLine,
    LineModule,
    SidingLine,
    SimpleQuote,
    WindowLine,
)


class FakeCursor:
    def close(self):
        pass


class FakeConnection:
    def __init__(self):
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, cursor_factory=None):
        return FakeCursor()

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeStore:
    """In-memory stand-in for the storage module's SQL functions."""

    FUNCTIONS = (
        "fetch_projects",
        "fetch_project",
        "update_project_status",
        "fetch_quotes",
        "fetch_quote",
        "fetch_quote_by_project",
        "insert_quote",
        "update_quote",
        "update_quote_status",
        "delete_quote",
        "insert_activity",
        "insert_service_order",
    )

    def __init__(self):
        self.projects = {}
        self.quotes = {}
        self.activities = []
        self.service_orders = []
        self.connections = []

    def install(self, monkeypatch):
        monkeypatch.setattr(storage, "get_db_connection", self.connect)
        for name in self.FUNCTIONS:
            monkeypatch.setattr(storage, name, getattr(self, name))

    def connect(self):
        conn = FakeConnection()
        self.connections.append(conn)
        return conn

    def add_project(self, project_id, title, status="pending", client_id=1, service_type="Exterior Painting"):
        self.projects[project_id] = {
            "id": project_id,
            "client_id": client_id,
            "title": title,
            "description": f"{title} description",
            "service_type": service_type,
            "status": status,
        }

    def fetch_projects(self, cur, status=None, client_id=None):
        projects = list(self.projects.values())
        if status:
            return [p for p in projects if p["status"] == status]
        if client_id is not None:
            return [p for p in projects if p["client_id"] == client_id]
        return projects

    def fetch_project(self, cur, project_id):
        return self.projects.get(project_id)

    def update_project_status(self, cur, project_id, status):
        self.projects[project_id]["status"] = status

    def fetch_quotes(self, cur):
        return list(self.quotes.values())

    def fetch_quote(self, cur, quote_id):
        return self.quotes.get(quote_id)

    def fetch_quote_by_project(self, cur, project_id):
        rows = [q for q in self.quotes.values() if q["project_id"] == project_id]
        return rows[-1] if rows else None

    def insert_quote(self, cur, quote):
        row = quote.model_dump()
        row["id"] = len(self.quotes) + 1
        row["created_at"] = datetime(2026, 1, 15, 9, 30)
        self.quotes[row["id"]] = row
        return dict(row)

    def update_quote(self, cur, quote_id, quote):
        if quote_id not in self.quotes:
            return None
        row = quote.model_dump()
        row["id"] = quote_id
        row["created_at"] = self.quotes[quote_id]["created_at"]
        self.quotes[quote_id] = row
        return dict(row)

    def update_quote_status(self, cur, quote_id, status):
        self.quotes[quote_id]["status"] = status

    def delete_quote(self, cur, quote_id):
        return self.quotes.pop(quote_id, None) is not None

    def insert_activity(self, cur, activity_type, description, project_id=None, client_id=None):
        self.activities.append({
            "type": activity_type,
            "description": description,
            "project_id": project_id,
            "client_id": client_id,
        })

    def insert_service_order(self, cur, project_id, quote_id, details, status="pending"):
        row = {
            "id": len(self.service_orders) + 1,
            "project_id": project_id,
            "quote_id": quote_id,
            "details": details,
            "status": status,
        }
        self.service_orders.append(row)
        return row


@pytest.fixture
def store(monkeypatch):
    fake = FakeStore()
    fake.install(monkeypatch)
    fake.add_project(1, "Smith House Exterior")
    fake.add_project(2, "Jones Kitchen Remodel", status="approved", client_id=2, service_type="Interior Painting")
    return fake


@pytest.fixture
def client(store):
    from fastapi.testclient import TestClient
    import api

    return TestClient(api.app)


@pytest.fixture
def siding_and_boxes():
    """Vinyl siding (100 x 2.50) plus boxes (10 x 3 x 18)."""
    quote = SimpleQuote(project_id=1, is_exterior=True)
    quote.exterior_breakdown.siding = LineModule[SidingLine](
        enabled=True, lines=[SidingLine(material="vinyl", quantity=100, price=2.50)]
    )
    quote.exterior_breakdown.boxes = BoxesModule(enabled=True, quantity=10, price=18)
    return quote


@pytest.fixture
def dormer_and_windows():
    quote = SimpleQuote(project_id=1, is_exterior=True)
    quote.exterior_breakdown.dormer = LineModule[DormerLine](
        enabled=True, lines=[DormerLine(complexity="complex", quantity=2)]
    )
    quote.exterior_breakdown.windows = LineModule[WindowLine](
        enabled=True, lines=[WindowLine(type="wood", coats="2", quantity=3)]
    )
    return quote
