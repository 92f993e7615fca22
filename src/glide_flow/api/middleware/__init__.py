"""Middleware for the Glide API."""
