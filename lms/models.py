# lms/models.py
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.db.models import Q

from .uploads import (
    STORED_NAME_MAX_LENGTH,
    lecture_note_path,
    timetable_document_path,
    validate_document,
    validate_lecture_note,
)


FACULTIES = [
    "Engineering",
    "Business",
    "Arts",
    "Science",
    "Health Sciences",
    "Law",
    "Education",
]

SCORE_VALIDATORS = [MinValueValidator(1), MaxValueValidator(5)]


class Profile(models.Model):
    STUDENT = "student"
    LECTURER = "lecturer"
    ADMIN = "admin"
    ROLE_CHOICES = [(STUDENT, "Student"), (LECTURER, "Lecturer"), (ADMIN, "Admin")]
    FACULTY_CHOICES = [(f, f) for f in FACULTIES]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=STUDENT, db_index=True)
    student_id = models.CharField(max_length=32, unique=True, blank=True, null=True)
    faculty = models.CharField(max_length=32, choices=FACULTY_CHOICES, blank=True, null=True)
    program = models.CharField(max_length=128, blank=True, null=True)
    year_of_study = models.PositiveSmallIntegerField(blank=True, null=True, validators=SCORE_VALIDATORS)
    profile_image = models.CharField(max_length=512, blank=True, default="")
    last_login_at = models.DateTimeField(blank=True, null=True)

    def clean(self):
        if self.role in (self.STUDENT, self.LECTURER) and not self.faculty:
            raise ValidationError({"faculty": "Faculty is required for students and lecturers"})
        if self.role == self.STUDENT:
            if not self.program:
                raise ValidationError({"program": "Program is required for students"})
            if not self.year_of_study:
                raise ValidationError({"year_of_study": "Year of study is required for students"})

    def __str__(self):
        return f"{self.user.email} ({self.role})"


class LectureNote(models.Model):
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    course = models.CharField(max_length=255, blank=True, default="")
    course_code = models.CharField(max_length=32, blank=True)
    faculty = models.CharField(max_length=32, blank=True, default="")
    program = models.CharField(max_length=128, blank=True, default="")
    year_of_study = models.PositiveSmallIntegerField(blank=True, null=True, validators=SCORE_VALIDATORS)
    file = models.FileField(
        upload_to=lecture_note_path,
        validators=[validate_lecture_note],
        max_length=STORED_NAME_MAX_LENGTH,
        blank=True,
        null=True,
    )
    file_name = models.CharField(max_length=255, blank=True, default="")
    file_type = models.CharField(max_length=16, blank=True, default="")
    file_size = models.PositiveIntegerField(default=0)
    downloads = models.PositiveIntegerField(default=0)
    views = models.PositiveIntegerField(default=0)
    tags = models.JSONField(default=list, blank=True)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="lecture_notes"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["faculty", "program", "year_of_study"], name="lms_note_audience_idx"),
        ]

    def __str__(self):
        return self.title


class Assignment(models.Model):
    title = models.CharField(max_length=255)
    course_code = models.CharField(max_length=32, blank=True)
    due_date = models.DateTimeField(blank=True, null=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="assignments"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title


class AssignmentSubmission(models.Model):
    assignment = models.ForeignKey(Assignment, on_delete=models.CASCADE, related_name="submissions")
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="assignment_submissions"
    )
    submitted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["assignment", "student"], name="unique_submission_per_assignment")
        ]


class Exam(models.Model):
    title = models.CharField(max_length=255)
    course_code = models.CharField(max_length=32, blank=True)
    starts_at = models.DateTimeField(blank=True, null=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="exams"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title


class ExamSubmission(models.Model):
    exam = models.ForeignKey(Exam, on_delete=models.CASCADE, related_name="submissions")
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="exam_submissions"
    )
    submitted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["exam", "student"], name="unique_submission_per_exam")
        ]


class Announcement(models.Model):
    TYPE_CHOICES = [
        ("general", "General"),
        ("faculty", "Faculty"),
        ("academic", "Academic"),
        ("event", "Event"),
        ("urgent", "Urgent"),
    ]

    title = models.CharField(max_length=255)
    content = models.TextField()
    type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    faculty = models.CharField(max_length=32, blank=True, null=True)
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="announcements"
    )
    is_pinned = models.BooleanField(default=False)
    expiry_date = models.DateTimeField(blank=True, null=True)
    views = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-is_pinned", "-created_at"]

    def __str__(self):
        return f"[{self.type}] {self.title}"


class ChatRoom(models.Model):
    name = models.CharField(max_length=255)
    members = models.ManyToManyField(settings.AUTH_USER_MODEL, related_name="chat_rooms", blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name


class ChatMessage(models.Model):
    room = models.ForeignKey(ChatRoom, on_delete=models.CASCADE, related_name="messages")
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="chat_messages"
    )
    content = models.TextField()
    sent_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["sent_at"]


class Election(models.Model):
    SRC = "src"
    FACULTY = "faculty"
    TYPE_CHOICES = [(SRC, "SRC"), (FACULTY, "Faculty")]

    title = models.CharField(max_length=255)
    description = models.TextField()
    type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    faculty = models.CharField(max_length=32, blank=True, null=True)
    positions = models.JSONField(default=list, blank=True)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    is_active = models.BooleanField(default=True)
    results_published = models.BooleanField(default=False)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="elections"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-start_date"]

    def is_open(self, now):
        return self.is_active and self.start_date <= now <= self.end_date

    def __str__(self):
        return self.title


class Candidate(models.Model):
    election = models.ForeignKey(Election, on_delete=models.CASCADE, related_name="candidates")
    name = models.CharField(max_length=255)
    student_id = models.CharField(max_length=32)
    position = models.CharField(max_length=128)
    manifesto = models.TextField(blank=True, default="")
    image_url = models.CharField(max_length=512, blank=True, default="")
    votes = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position", "id"]

    def __str__(self):
        return f"{self.name} ({self.position})"


class VoteRecord(models.Model):
    election = models.ForeignKey(Election, on_delete=models.CASCADE, related_name="vote_records")
    voter = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="vote_records"
    )
    voted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        # one vote per user per election
        constraints = [
            models.UniqueConstraint(fields=["election", "voter"], name="unique_vote_per_election")
        ]


class Timetable(models.Model):
    program_code = models.CharField(max_length=32)
    program_name = models.CharField(max_length=255)
    year_of_study = models.PositiveSmallIntegerField(validators=SCORE_VALIDATORS)
    faculty = models.CharField(max_length=32)
    semester = models.CharField(max_length=32)
    academic_year = models.CharField(max_length=16)
    document = models.FileField(
        upload_to=timetable_document_path,
        validators=[validate_document],
        max_length=STORED_NAME_MAX_LENGTH,
        blank=True,
        null=True,
    )
    document_name = models.CharField(max_length=255, blank=True, default="")
    document_uploaded_at = models.DateTimeField(blank=True, null=True)
    is_active = models.BooleanField(default=True)
    # students only see published timetables through my-timetable
    is_published = models.BooleanField(default=False)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="timetables"
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="updated_timetables",
        blank=True,
        null=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["program_code", "year_of_study"]

    def __str__(self):
        return f"{self.program_code} · Y{self.year_of_study} · {self.semester}"


class Rating(models.Model):
    COURSE = "course"
    LECTURER = "lecturer"
    TYPE_CHOICES = [(COURSE, "Course"), (LECTURER, "Lecturer")]
    ASPECTS = ("content_quality", "teaching_method", "availability", "fairness")

    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="ratings",
    )
    type = models.CharField(max_length=16, choices=TYPE_CHOICES, db_index=True)
    course = models.CharField(max_length=255, blank=True, null=True)
    course_code = models.CharField(max_length=32, blank=True, null=True)
    lecturer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_ratings",
        blank=True,
        null=True,
    )

    # score 1..5
    rating = models.PositiveSmallIntegerField(validators=SCORE_VALIDATORS)
    comment = models.TextField(blank=True, default="")
    content_quality = models.PositiveSmallIntegerField(blank=True, null=True, validators=SCORE_VALIDATORS)
    teaching_method = models.PositiveSmallIntegerField(blank=True, null=True, validators=SCORE_VALIDATORS)
    availability = models.PositiveSmallIntegerField(blank=True, null=True, validators=SCORE_VALIDATORS)
    fairness = models.PositiveSmallIntegerField(blank=True, null=True, validators=SCORE_VALIDATORS)

    is_anonymous = models.BooleanField(default=True)
    academic_year = models.CharField(max_length=16)
    semester = models.CharField(max_length=32, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["student", "course", "semester"],
                condition=Q(type="course"),
                name="unique_course_rating_per_semester",
            ),
            models.UniqueConstraint(
                fields=["student", "lecturer", "semester"],
                condition=Q(type="lecturer"),
                name="unique_lecturer_rating_per_semester",
            ),
        ]
        indexes = [
            models.Index(fields=["type", "semester", "created_at"], name="lms_rating_type_sem_idx"),
        ]
        ordering = ["-created_at"]

    @property
    def subject_name(self):
        if self.type == self.COURSE:
            return self.course or ""
        if self.lecturer_id is None:
            return ""
        return f"{self.lecturer.first_name} {self.lecturer.last_name}".strip()

    def __str__(self):
        return f"{self.student} → {self.type}:{self.subject_name}: {self.rating}★"
