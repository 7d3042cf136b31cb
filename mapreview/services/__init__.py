"""Workflow services: tags, scoring, task status, reviews and bundles."""
