"""HTTP surface for skinvault (FastAPI application, routers, schemas)."""
