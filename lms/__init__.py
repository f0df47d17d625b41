"""SmartLearn learning-management API app.

Holds the data model, the REST endpoints (auth, stats, ratings,
announcements, timetable documents) and a small ``requests`` client used by
dashboards and scripts.
"""
