"""SIAKAD web adapter: FastAPI app, routes and server-rendered components."""
