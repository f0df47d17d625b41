"""Aggregate statistics behind the admin, lecturer and student dashboards."""
from django.contrib.auth import get_user_model
from django.db.models import Avg, Count

from .models import (
    Announcement,
    Assignment,
    AssignmentSubmission,
    ChatMessage,
    ChatRoom,
    Election,
    Exam,
    ExamSubmission,
    LectureNote,
    Profile,
    Rating,
    VoteRecord,
)

RECENT_LIMIT = 5

ASPECT_FIELDS = {
    "contentQuality": "content_quality",
    "teachingMethod": "teaching_method",
    "availability": "availability",
    "fairness": "fairness",
}


def _avg(qs, field="rating"):
    value = qs.aggregate(avg=Avg(field))["avg"]
    return round(float(value), 2) if value is not None else 0


def _distribution(qs, field, order_by):
    rows = qs.values(field).annotate(count=Count("id")).order_by(*order_by)
    return [{"_id": row[field], "count": int(row["count"])} for row in rows]


def _recent_users():
    User = get_user_model()
    rows = User.objects.select_related("profile").order_by("-date_joined")[:RECENT_LIMIT]
    out = []
    for u in rows:
        profile = getattr(u, "profile", None)
        out.append({
            "id": u.id,
            "firstName": u.first_name,
            "lastName": u.last_name,
            "email": u.email,
            "role": getattr(profile, "role", None),
            "createdAt": u.date_joined.isoformat(),
        })
    return out


def _recent(model, author_field):
    return [
        {
            "id": obj.id,
            "title": obj.title,
            "courseCode": obj.course_code,
            "createdBy": getattr(obj, f"{author_field}_id"),
            "createdAt": obj.created_at.isoformat(),
        }
        for obj in model.objects.order_by("-created_at")[:RECENT_LIMIT]
    ]


def admin_stats():
    """Counts, averages and distributions for the admin dashboard.

    Shape matches what the dashboard cards read::

        users, academic, community, ratings, votes, distributions, recent
    """
    User = get_user_model()
    profiles = Profile.objects.all()

    students = profiles.filter(role=Profile.STUDENT)
    faculty_members = profiles.filter(role__in=[Profile.STUDENT, Profile.LECTURER])

    return {
        "users": {
            "total": User.objects.count(),
            "students": students.count(),
            "lecturers": profiles.filter(role=Profile.LECTURER).count(),
            "admins": profiles.filter(role=Profile.ADMIN).count(),
            "active": User.objects.filter(is_active=True).count(),
        },
        "academic": {
            "notes": LectureNote.objects.count(),
            "assignments": Assignment.objects.count(),
            "exams": Exam.objects.count(),
            "announcements": Announcement.objects.count(),
        },
        "community": {
            "chatRooms": ChatRoom.objects.count(),
            "messages": ChatMessage.objects.count(),
        },
        "ratings": {
            "total": Rating.objects.count(),
            "avgCourseRating": _avg(Rating.objects.filter(type=Rating.COURSE)),
            "avgLecturerRating": _avg(Rating.objects.filter(type=Rating.LECTURER)),
        },
        "votes": {
            "total": VoteRecord.objects.count(),
            "srcVotes": VoteRecord.objects.filter(election__type=Election.SRC).count(),
            "facultyVotes": VoteRecord.objects.filter(election__type=Election.FACULTY).count(),
        },
        "distributions": {
            "faculty": _distribution(faculty_members.exclude(faculty__isnull=True), "faculty", ["-count", "faculty"]),
            "program": _distribution(students.exclude(program__isnull=True).exclude(program=""), "program", ["-count", "program"]),
            "year": _distribution(students.exclude(year_of_study__isnull=True), "year_of_study", ["year_of_study"]),
        },
        "recent": {
            "users": _recent_users(),
            "notes": _recent(LectureNote, "uploaded_by"),
            "assignments": _recent(Assignment, "created_by"),
        },
    }


def lecturer_stats(user_id: int):
    return {
        "notesCount": LectureNote.objects.filter(uploaded_by_id=user_id).count(),
        "assignmentsCount": Assignment.objects.filter(created_by_id=user_id).count(),
        "examsCount": Exam.objects.filter(created_by_id=user_id).count(),
        "avgRating": _avg(Rating.objects.filter(lecturer_id=user_id)),
    }


def student_stats(user_id: int):
    return {
        "submittedAssignments": AssignmentSubmission.objects.filter(student_id=user_id).count(),
        "completedExams": ExamSubmission.objects.filter(student_id=user_id).count(),
        "chatRoomsJoined": ChatRoom.objects.filter(members__id=user_id).count(),
    }


def rating_averages(qs):
    """Overall and per-aspect averages over a rating queryset."""
    total = qs.count()
    if total == 0:
        return {"averageRating": 0, "totalRatings": 0, "aspects": {}}

    agg = qs.aggregate(overall=Avg("rating"), **{f"avg_{name}": Avg(field) for name, field in ASPECT_FIELDS.items()})
    overall = agg.pop("overall")
    return {
        "averageRating": round(float(overall), 2),
        "totalRatings": total,
        "aspects": {
            name: (round(float(agg[f"avg_{name}"]), 2) if agg[f"avg_{name}"] is not None else 0)
            for name in ASPECT_FIELDS
        },
    }


def lecture_note_stats():
    by_program = (
        LectureNote.objects.values("faculty", "program")
        .annotate(count=Count("id"))
        .order_by("-count", "faculty", "program")
    )
    return {
        "totalNotes": LectureNote.objects.count(),
        "notesByFaculty": _distribution(LectureNote.objects.all(), "faculty", ["-count", "faculty"]),
        "notesByProgram": [
            {"_id": {"faculty": row["faculty"], "program": row["program"]}, "count": int(row["count"])}
            for row in by_program
        ],
        "topDownloadedNotes": [
            {"id": note.id, "title": note.title, "downloads": note.downloads}
            for note in LectureNote.objects.order_by("-downloads", "-created_at")[:10]
        ],
    }
