"""Application package for the school records API.

This package exposes the models, repositories and services used by the
FastAPI application, together with the query planner that turns list
query parameters into pagination, sorting and eager-load instructions.
Individual modules contain the concrete implementations and documentation.
"""
