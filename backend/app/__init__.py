"""
Sparkz Backend: Application Package
====================================

HTTP backend for a live-streaming DJ platform: accounts, profiles, stream
sessions, follow graph, chat log and show schedules, backed by a relational
store and the Mux live-video API.

Architecture:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth dependencies
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← One class + singleton per concern
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │    Database / Mux client (I/O)      │  ← Async sessions, httpx
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
