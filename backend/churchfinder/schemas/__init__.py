"""Pydantic schemas shared by the routes and churchfinder.client."""
