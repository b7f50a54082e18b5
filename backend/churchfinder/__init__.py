"""
ChurchFinder Backend — Application Package
===========================================

What: Map-based church directory API and its async client.
How:  Layered the same way on both sides of the wire:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │      Services (Repositories/Proxy)  │  ← find-or-create, CRUD, upstream calls
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    churchfinder.client talks to the routes over HTTP and drives the map
    and info panel through a narrow capability interface.
"""

__version__ = "1.0.0"
