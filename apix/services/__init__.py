"""Pipeline services: analysis, recommendation, planning, validation and generation."""
