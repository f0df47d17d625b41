"""Admin registrations for the LMS models."""
from django.contrib import admin

from .models import (
	Announcement,
	Assignment,
	Candidate,
	ChatRoom,
	Election,
	Exam,
	LectureNote,
	Profile,
	Rating,
	Timetable,
	VoteRecord,
)


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
	list_display = ("user", "role", "student_id", "faculty", "program", "year_of_study")
	list_filter = ("role", "faculty", "year_of_study")
	search_fields = ("user__email", "user__first_name", "user__last_name", "student_id")


@admin.register(Rating)
class RatingAdmin(admin.ModelAdmin):
	list_display = ("student", "type", "course", "lecturer", "rating", "semester", "created_at")
	list_filter = ("type", "rating", "semester", "academic_year")
	search_fields = ("course", "course_code", "lecturer__first_name", "lecturer__last_name", "student__email")


@admin.register(Timetable)
class TimetableAdmin(admin.ModelAdmin):
	list_display = ("program_code", "year_of_study", "faculty", "semester", "academic_year", "document_name")
	list_filter = ("faculty", "semester", "is_active")


@admin.register(Announcement)
class AnnouncementAdmin(admin.ModelAdmin):
	list_display = ("title", "type", "faculty", "author", "is_pinned", "created_at")
	list_filter = ("type", "is_pinned")


admin.site.register(Assignment)
admin.site.register(Exam)
admin.site.register(ChatRoom)
admin.site.register(VoteRecord)


@admin.register(LectureNote)
class LectureNoteAdmin(admin.ModelAdmin):
	list_display = ("title", "course_code", "faculty", "program", "year_of_study", "uploaded_by", "downloads")
	list_filter = ("faculty", "year_of_study")
	search_fields = ("title", "course", "course_code")


class CandidateInline(admin.TabularInline):
	model = Candidate
	extra = 0
	readonly_fields = ("votes",)


@admin.register(Election)
class ElectionAdmin(admin.ModelAdmin):
	list_display = ("title", "type", "faculty", "start_date", "end_date", "is_active", "results_published")
	list_filter = ("type", "is_active", "results_published")
	inlines = [CandidateInline]
