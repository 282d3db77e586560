"""
Interfaces layer package.

Contains FastAPI routers, Pydantic envelope schemas and the HATEOAS
envelope builder. No business logic belongs here.
"""
