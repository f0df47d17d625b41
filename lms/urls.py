from django.urls import path
from . import views

app_name = "lms"

urlpatterns = [
	path("api/health", views.health, name="health"),

	path("api/auth/register", views.register, name="register"),
	path("api/auth/login", views.login, name="login"),
	path("api/auth/logout", views.logout, name="logout"),
	path("api/auth/me", views.me, name="me"),
	path("api/auth/update-password", views.update_password, name="update-password"),

	path("api/users", views.users, name="users"),
	path("api/users/profile", views.update_profile, name="user-profile"),
	path("api/users/lecturers", views.lecturers, name="user-lecturers"),
	path("api/users/students/by-program", views.students_by_program, name="user-students-by-program"),
	path("api/users/<int:pk>", views.user_detail, name="user-detail"),
	path("api/users/<int:pk>/toggle-status", views.toggle_user_status, name="user-toggle-status"),

	path("api/stats/admin", views.stats_admin, name="stats-admin"),
	path("api/stats/lecturer/<str:user_id>", views.stats_lecturer, name="stats-lecturer"),
	path("api/stats/student/<str:user_id>", views.stats_student, name="stats-student"),

	path("api/ratings", views.ratings, name="ratings"),
	path("api/ratings/average", views.ratings_average, name="ratings-average"),

	path("api/announcements", views.announcements, name="announcements"),
	path("api/announcements/<int:pk>", views.announcement_detail, name="announcement-detail"),

	path("api/timetables", views.timetables, name="timetables"),
	path("api/timetables/my-timetable", views.my_timetable, name="timetable-mine"),
	path("api/timetables/<int:pk>", views.timetable_detail, name="timetable-detail"),
	path("api/timetables/<int:pk>/upload-document", views.upload_timetable_document, name="timetable-upload-document"),
	path("api/timetables/<int:pk>/download-document", views.download_timetable_document, name="timetable-download-document"),
	path("api/timetables/<int:pk>/delete-document", views.delete_timetable_document, name="timetable-delete-document"),

	path("api/notes", views.notes, name="notes"),
	path("api/notes/my-notes", views.my_notes, name="notes-mine"),
	path("api/notes/uploaded-by-me", views.notes_uploaded_by_me, name="notes-uploaded-by-me"),
	path("api/notes/stats", views.notes_stats, name="notes-stats"),
	path("api/notes/<int:pk>", views.note_detail, name="note-detail"),
	path("api/notes/<int:pk>/download", views.download_note, name="note-download"),

	path("api/voting", views.elections, name="voting"),
	path("api/voting/<int:pk>", views.election_detail, name="voting-detail"),
	path("api/voting/<int:pk>/vote", views.cast_vote, name="voting-vote"),
	path("api/voting/<int:pk>/publish-results", views.publish_results, name="voting-publish-results"),
]
