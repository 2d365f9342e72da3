"""Modelos de request de la API."""
