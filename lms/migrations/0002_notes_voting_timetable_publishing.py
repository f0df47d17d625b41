from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import lms.uploads


SCORE = [django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)]


class Migration(migrations.Migration):

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("lms", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="timetable",
            name="document",
            field=models.FileField(blank=True, max_length=255, null=True, upload_to=lms.uploads.timetable_document_path, validators=[lms.uploads.validate_document]),
        ),
        migrations.AddField(
            model_name="timetable",
            name="is_published",
            field=models.BooleanField(default=False),
        ),
        migrations.AddField(
            model_name="timetable",
            name="updated_by",
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="updated_timetables", to=settings.AUTH_USER_MODEL),
        ),
        migrations.RemoveField(
            model_name="lecturenote",
            name="file_url",
        ),
        migrations.AddField(
            model_name="lecturenote",
            name="description",
            field=models.TextField(blank=True, default=""),
        ),
        migrations.AddField(
            model_name="lecturenote",
            name="course",
            field=models.CharField(blank=True, default="", max_length=255),
        ),
        migrations.AddField(
            model_name="lecturenote",
            name="faculty",
            field=models.CharField(blank=True, default="", max_length=32),
        ),
        migrations.AddField(
            model_name="lecturenote",
            name="program",
            field=models.CharField(blank=True, default="", max_length=128),
        ),
        migrations.AddField(
            model_name="lecturenote",
            name="year_of_study",
            field=models.PositiveSmallIntegerField(blank=True, null=True, validators=SCORE),
        ),
        migrations.AddField(
            model_name="lecturenote",
            name="file",
            field=models.FileField(blank=True, max_length=255, null=True, upload_to=lms.uploads.lecture_note_path, validators=[lms.uploads.validate_lecture_note]),
        ),
        migrations.AddField(
            model_name="lecturenote",
            name="file_name",
            field=models.CharField(blank=True, default="", max_length=255),
        ),
        migrations.AddField(
            model_name="lecturenote",
            name="file_type",
            field=models.CharField(blank=True, default="", max_length=16),
        ),
        migrations.AddField(
            model_name="lecturenote",
            name="file_size",
            field=models.PositiveIntegerField(default=0),
        ),
        migrations.AddField(
            model_name="lecturenote",
            name="downloads",
            field=models.PositiveIntegerField(default=0),
        ),
        migrations.AddField(
            model_name="lecturenote",
            name="views",
            field=models.PositiveIntegerField(default=0),
        ),
        migrations.AddField(
            model_name="lecturenote",
            name="tags",
            field=models.JSONField(blank=True, default=list),
        ),
        migrations.AddIndex(
            model_name="lecturenote",
            index=models.Index(fields=["faculty", "program", "year_of_study"], name="lms_note_audience_idx"),
        ),
        migrations.AddField(
            model_name="election",
            name="positions",
            field=models.JSONField(blank=True, default=list),
        ),
        migrations.AlterModelOptions(
            name="election",
            options={"ordering": ["-start_date"]},
        ),
        migrations.CreateModel(
            name="Candidate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("student_id", models.CharField(max_length=32)),
                ("position", models.CharField(max_length=128)),
                ("manifesto", models.TextField(blank=True, default="")),
                ("image_url", models.CharField(blank=True, default="", max_length=512)),
                ("votes", models.PositiveIntegerField(default=0)),
                ("election", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="candidates", to="lms.election")),
            ],
            options={"ordering": ["position", "id"]},
        ),
    ]
