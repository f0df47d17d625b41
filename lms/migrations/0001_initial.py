from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import lms.uploads


SCORE = [django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Profile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(choices=[("student", "Student"), ("lecturer", "Lecturer"), ("admin", "Admin")], db_index=True, default="student", max_length=16)),
                ("student_id", models.CharField(blank=True, max_length=32, null=True, unique=True)),
                ("faculty", models.CharField(blank=True, choices=[("Engineering", "Engineering"), ("Business", "Business"), ("Arts", "Arts"), ("Science", "Science"), ("Health Sciences", "Health Sciences"), ("Law", "Law"), ("Education", "Education")], max_length=32, null=True)),
                ("program", models.CharField(blank=True, max_length=128, null=True)),
                ("year_of_study", models.PositiveSmallIntegerField(blank=True, null=True, validators=SCORE)),
                ("profile_image", models.CharField(blank=True, default="", max_length=512)),
                ("last_login_at", models.DateTimeField(blank=True, null=True)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="profile", to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name="LectureNote",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("course_code", models.CharField(blank=True, max_length=32)),
                ("file_url", models.CharField(blank=True, max_length=512)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("uploaded_by", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="lecture_notes", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="Assignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("course_code", models.CharField(blank=True, max_length=32)),
                ("due_date", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="assignments", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="AssignmentSubmission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("submitted_at", models.DateTimeField(auto_now_add=True)),
                ("assignment", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="submissions", to="lms.assignment")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="assignment_submissions", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("assignment", "student"), name="unique_submission_per_assignment")],
            },
        ),
        migrations.CreateModel(
            name="Exam",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("course_code", models.CharField(blank=True, max_length=32)),
                ("starts_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="exams", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="ExamSubmission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("submitted_at", models.DateTimeField(auto_now_add=True)),
                ("exam", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="submissions", to="lms.exam")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="exam_submissions", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("exam", "student"), name="unique_submission_per_exam")],
            },
        ),
        migrations.CreateModel(
            name="Announcement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("content", models.TextField()),
                ("type", models.CharField(choices=[("general", "General"), ("faculty", "Faculty"), ("academic", "Academic"), ("event", "Event"), ("urgent", "Urgent")], max_length=16)),
                ("faculty", models.CharField(blank=True, max_length=32, null=True)),
                ("is_pinned", models.BooleanField(default=False)),
                ("expiry_date", models.DateTimeField(blank=True, null=True)),
                ("views", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("author", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="announcements", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-is_pinned", "-created_at"]},
        ),
        migrations.CreateModel(
            name="ChatRoom",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("members", models.ManyToManyField(blank=True, related_name="chat_rooms", to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name="ChatMessage",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("content", models.TextField()),
                ("sent_at", models.DateTimeField(auto_now_add=True)),
                ("room", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="messages", to="lms.chatroom")),
                ("sender", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="chat_messages", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["sent_at"]},
        ),
        migrations.CreateModel(
            name="Election",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField()),
                ("type", models.CharField(choices=[("src", "SRC"), ("faculty", "Faculty")], max_length=16)),
                ("faculty", models.CharField(blank=True, max_length=32, null=True)),
                ("start_date", models.DateTimeField()),
                ("end_date", models.DateTimeField()),
                ("is_active", models.BooleanField(default=True)),
                ("results_published", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="elections", to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name="VoteRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("voted_at", models.DateTimeField(auto_now_add=True)),
                ("election", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="vote_records", to="lms.election")),
                ("voter", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="vote_records", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("election", "voter"), name="unique_vote_per_election")],
            },
        ),
        migrations.CreateModel(
            name="Timetable",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("program_code", models.CharField(max_length=32)),
                ("program_name", models.CharField(max_length=255)),
                ("year_of_study", models.PositiveSmallIntegerField(validators=SCORE)),
                ("faculty", models.CharField(max_length=32)),
                ("semester", models.CharField(max_length=32)),
                ("academic_year", models.CharField(max_length=16)),
                ("document", models.FileField(blank=True, null=True, upload_to=lms.uploads.timetable_document_path, validators=[lms.uploads.validate_document])),
                ("document_name", models.CharField(blank=True, default="", max_length=255)),
                ("document_uploaded_at", models.DateTimeField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="timetables", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["program_code", "year_of_study"]},
        ),
        migrations.CreateModel(
            name="Rating",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(choices=[("course", "Course"), ("lecturer", "Lecturer")], db_index=True, max_length=16)),
                ("course", models.CharField(blank=True, max_length=255, null=True)),
                ("course_code", models.CharField(blank=True, max_length=32, null=True)),
                ("rating", models.PositiveSmallIntegerField(validators=SCORE)),
                ("comment", models.TextField(blank=True, default="")),
                ("content_quality", models.PositiveSmallIntegerField(blank=True, null=True, validators=SCORE)),
                ("teaching_method", models.PositiveSmallIntegerField(blank=True, null=True, validators=SCORE)),
                ("availability", models.PositiveSmallIntegerField(blank=True, null=True, validators=SCORE)),
                ("fairness", models.PositiveSmallIntegerField(blank=True, null=True, validators=SCORE)),
                ("is_anonymous", models.BooleanField(default=True)),
                ("academic_year", models.CharField(max_length=16)),
                ("semester", models.CharField(db_index=True, max_length=32)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("lecturer", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="received_ratings", to=settings.AUTH_USER_MODEL)),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="ratings", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["type", "semester", "created_at"], name="lms_rating_type_sem_idx")],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("type", "course")), fields=("student", "course", "semester"), name="unique_course_rating_per_semester"),
                    models.UniqueConstraint(condition=models.Q(("type", "lecturer")), fields=("student", "lecturer", "semester"), name="unique_lecturer_rating_per_semester"),
                ],
            },
        ),
    ]
