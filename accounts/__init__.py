"""Tamu accounts API - registration, sessions, profiles and push devices."""
