"""Attendance module — daily records, holidays and the period aggregator."""
