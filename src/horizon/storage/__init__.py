"""SQLAlchemy Core storage for jobs, supervisors, metrics and control commands."""
