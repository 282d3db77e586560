"""
GridSync: browser spreadsheet backed by a remote evaluation service.

Application package root. This is a modular monolith using
hexagonal architecture (ports & adapters).

Layers:
    - domain: Cell references, formula engine, ports (ABCs), errors.
    - application: The evaluation service orchestrating engine and store.
    - infrastructure: Store adapters (SQL, in-memory).
    - interfaces: FastAPI routers, Pydantic envelope schemas.
    - shared: Cross-cutting concerns (error mapping, logging).
    - client: Web-service client and the cell synchronization state machine.
"""
