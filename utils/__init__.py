"""Helpers shared by the pipeline: error taxonomy, reply extraction and citation cleanup."""
