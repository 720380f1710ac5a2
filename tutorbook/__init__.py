"""Tutorbook: students, monthly tuition billing and expenses for a tutoring business."""

__version__ = "1.0.0"
