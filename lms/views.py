"""REST endpoints for the SmartLearn API.

Every response uses the ``{success, ...}`` envelope the web front-end reads;
errors raised here are wrapped by ``lms.exceptions.envelope_exception_handler``.
"""
import logging
import math
import os

from django.contrib.auth import get_user_model
from django.contrib.auth.models import update_last_login
from django.db import IntegrityError, transaction
from django.db.models import F, Q
from django.http import FileResponse
from django.middleware.csrf import get_token
from django.utils import timezone

from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, parser_classes, permission_classes
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from .authentication import clear_auth_cookie, issue_token, set_auth_cookie
from .filters import filter_rating_queryset
from .models import Announcement, Candidate, Election, LectureNote, Profile, Rating, Timetable, VoteRecord
from .permissions import IsAdmin, IsLecturer, IsLecturerOrAdmin, IsStudent, has_role, user_role
from .serializers import (
    AnnouncementSerializer,
    ElectionSerializer,
    LectureNoteSerializer,
    LoginForm,
    ProfileUpdateSerializer,
    RatingSerializer,
    RegistrationForm,
    TimetableSerializer,
    UserSerializer,
)
from .stats import admin_stats, lecture_note_stats, lecturer_stats, rating_averages, student_stats
from .uploads import LECTURE_NOTES, TIMETABLE_DOCUMENTS, receive_upload

logger = logging.getLogger(__name__)

User = get_user_model()

DEFAULT_PAGE_SIZE = 20


def _int_param(request, name, default):
    try:
        return int(request.query_params.get(name) or default)
    except (TypeError, ValueError):
        return default


def paginate(request, qs, default_limit=DEFAULT_PAGE_SIZE):
    """Slice ``qs`` by ``page``/``limit`` query params; ``limit=0`` means all rows."""
    page = max(_int_param(request, "page", 1), 1)
    limit = max(_int_param(request, "limit", default_limit), 0)
    total = qs.count()
    if limit == 0:
        return list(qs), {"total": total, "page": 1, "pages": 1 if total else 0}
    offset = (page - 1) * limit
    items = list(qs[offset: offset + limit])
    return items, {"total": total, "page": page, "pages": math.ceil(total / limit)}


def _listing(request, qs, serializer_class, default_limit=DEFAULT_PAGE_SIZE):
    items, meta = paginate(request, qs, default_limit)
    data = serializer_class(items, many=True).data
    return Response({"success": True, "count": len(data), **meta, "data": data})


def _session_response(request, user, status_code, message=None):
    token = issue_token(user)
    body = {"success": True, "data": {"user": UserSerializer(user).data, "token": token}}
    if message:
        body["message"] = message
    # cookie-authenticated writes need the csrftoken cookie set alongside
    get_token(request._request)
    return set_auth_cookie(Response(body, status=status_code), token)


def _require(user, *roles, message="You do not have permission to perform this action"):
    if not has_role(user, *roles):
        raise PermissionDenied(message)


def _owner_or_admin(user, owner_id, message):
    if owner_id != user.pk and not has_role(user, Profile.ADMIN):
        raise PermissionDenied(message)


def _digits(value):
    return str(value or "").isdigit()


def _get_or_404(qs, pk, message):
    obj = qs.filter(pk=pk).first()
    if obj is None:
        raise NotFound(message)
    return obj


@api_view(["GET"])
@permission_classes([AllowAny])
def health(request):
    return Response({"status": "OK", "message": "Server is healthy"})


# --- auth ---

@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])
def register(request):
    form = RegistrationForm(data=request.data, require_confirmation="confirmPassword" in request.data)
    form.is_valid(raise_exception=True)
    data = form.validated_data
    email = data["email"].strip().lower()

    if User.objects.filter(email__iexact=email).exists():
        return Response({"success": False, "message": "User already exists"}, status=400)
    if Profile.objects.filter(student_id=data["studentId"]).exists():
        return Response({"success": False, "message": "Student ID already registered"}, status=400)

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=email,
                email=email,
                password=data["password"],
                first_name=data["firstName"].strip(),
                last_name=data["lastName"].strip(),
            )
            # self-registration only ever creates students
            Profile.objects.create(
                user=user,
                role=Profile.STUDENT,
                student_id=data["studentId"],
                faculty=data["faculty"],
                program=data["program"],
                year_of_study=data["yearOfStudy"],
            )
    except IntegrityError:
        logger.warning("registration race for %s", email)
        return Response({"success": False, "message": "User already exists"}, status=400)

    logger.info("registered student %s", email)
    return _session_response(request, user, status.HTTP_201_CREATED, "Registration successful")


@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])
def login(request):
    form = LoginForm(data=request.data)
    form.is_valid(raise_exception=True)
    email = form.validated_data["email"].strip().lower()
    password = form.validated_data["password"]

    user = User.objects.select_related("profile").filter(email__iexact=email).first()
    if user is None or not user.check_password(password):
        logger.info("failed login for %s", email)
        return Response({"success": False, "message": "Invalid credentials"}, status=401)
    if not user.is_active:
        logger.info("login refused for deactivated account %s", email)
        return Response({"success": False, "message": "Account is deactivated"}, status=403)

    update_last_login(None, user)
    Profile.objects.filter(user=user).update(last_login_at=timezone.now())
    logger.info("login %s", email)
    return _session_response(request, user, status.HTTP_200_OK)


@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])
def logout(request):
    return clear_auth_cookie(Response({"success": True, "message": "Logged out"}))


@api_view(["GET"])
def me(request):
    return Response({"success": True, "data": UserSerializer(request.user).data})


@api_view(["PUT"])
def update_password(request):
    current = request.data.get("currentPassword") or ""
    new = request.data.get("newPassword") or ""
    if len(new) < 6:
        raise ValidationError({"newPassword": "Password must be at least 6 characters"})
    if not request.user.check_password(current):
        return Response({"success": False, "message": "Current password is incorrect"}, status=401)

    request.user.set_password(new)
    request.user.save(update_fields=["password"])
    logger.info("password updated for user %s", request.user.pk)
    return _session_response(request, request.user, status.HTTP_200_OK, "Password updated successfully")


# --- users ---

def _people():
    return User.objects.select_related("profile")


@api_view(["GET"])
@permission_classes([IsAdmin])
def users(request):
    params = request.query_params
    qs = _people().order_by("-date_joined")
    if params.get("role"):
        qs = qs.filter(profile__role=params["role"])
    if params.get("faculty"):
        qs = qs.filter(profile__faculty=params["faculty"])
    if params.get("program"):
        qs = qs.filter(profile__program=params["program"])
    if params.get("search"):
        term = params["search"]
        qs = qs.filter(
            Q(first_name__icontains=term)
            | Q(last_name__icontains=term)
            | Q(email__icontains=term)
            | Q(profile__student_id__icontains=term)
        )
    return _listing(request, qs, UserSerializer, default_limit=0)


@api_view(["GET"])
def lecturers(request):
    qs = _people().filter(profile__role=Profile.LECTURER).order_by("last_name", "first_name")
    if request.query_params.get("faculty"):
        qs = qs.filter(profile__faculty=request.query_params["faculty"])
    return _listing(request, qs, UserSerializer, default_limit=0)


@api_view(["GET"])
@permission_classes([IsLecturerOrAdmin])
def students_by_program(request):
    params = request.query_params
    qs = _people().filter(profile__role=Profile.STUDENT).order_by("last_name", "first_name")
    if params.get("program"):
        qs = qs.filter(profile__program=params["program"])
    if params.get("faculty"):
        qs = qs.filter(profile__faculty=params["faculty"])
    if _digits(params.get("yearOfStudy")):
        qs = qs.filter(profile__year_of_study=int(params["yearOfStudy"]))
    return _listing(request, qs, UserSerializer, default_limit=0)


@api_view(["PUT"])
def update_profile(request):
    serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    user = serializer.save()
    logger.info("profile updated for user %s", user.pk)
    return Response({"success": True, "message": "Profile updated successfully", "data": UserSerializer(user).data})


@api_view(["GET", "DELETE"])
def user_detail(request, pk: int):
    user = _get_or_404(_people(), pk, "User not found")
    if request.method == "DELETE":
        _require(request.user, Profile.ADMIN, message="Only administrators can access this resource")
        if user.pk == request.user.pk:
            return Response({"success": False, "message": "You cannot delete your own account"}, status=400)
        user.delete()
        logger.info("user %s deleted by %s", pk, request.user.pk)
        return Response({"success": True, "message": "User deleted successfully"})

    if user.pk != request.user.pk:
        _require(request.user, Profile.LECTURER, Profile.ADMIN)
    return Response({"success": True, "data": UserSerializer(user).data})


@api_view(["PUT"])
@permission_classes([IsAdmin])
def toggle_user_status(request, pk: int):
    user = _get_or_404(_people(), pk, "User not found")
    if user.pk == request.user.pk:
        return Response({"success": False, "message": "You cannot deactivate your own account"}, status=400)
    user.is_active = not user.is_active
    user.save(update_fields=["is_active"])
    state = "activated" if user.is_active else "deactivated"
    logger.info("user %s %s by %s", pk, state, request.user.pk)
    return Response({"success": True, "message": f"User {state} successfully", "data": UserSerializer(user).data})


# --- stats ---

@api_view(["GET"])
@permission_classes([IsAdmin])
def stats_admin(request):
    try:
        data = admin_stats()
    except Exception as e:
        logger.exception("admin stats failed")
        return Response({"success": False, "message": "Error fetching stats", "error": str(e)}, status=500)
    return Response({"success": True, "data": data})


@api_view(["GET"])
@permission_classes([IsLecturer])
def stats_lecturer(request, user_id: str):
    if not str(user_id).isdigit():
        return Response({"success": False, "message": "Invalid user ID format"}, status=400)
    try:
        data = lecturer_stats(int(user_id))
    except Exception as e:
        logger.exception("lecturer stats failed for %s", user_id)
        return Response({"success": False, "message": "Error fetching lecturer stats", "error": str(e)}, status=500)
    return Response({"success": True, "data": data})


@api_view(["GET"])
@permission_classes([IsStudent])
def stats_student(request, user_id: str):
    if not str(user_id).isdigit():
        return Response({"success": False, "message": "Invalid user ID format"}, status=400)
    try:
        data = student_stats(int(user_id))
    except Exception as e:
        logger.exception("student stats failed for %s", user_id)
        return Response({"success": False, "message": "Error fetching student stats", "error": str(e)}, status=500)
    return Response({"success": True, "data": data})


# --- ratings ---

def _rating_queryset(request):
    qs = Rating.objects.select_related("student", "lecturer").order_by("-created_at")
    params = request.query_params
    if params.get("course"):
        qs = qs.filter(course=params["course"])
    if params.get("lecturer"):
        qs = qs.filter(lecturer_id=params["lecturer"]) if str(params["lecturer"]).isdigit() else qs.none()
    if params.get("academicYear"):
        qs = qs.filter(academic_year=params["academicYear"])
    return filter_rating_queryset(
        qs,
        search=params.get("search"),
        type=params.get("type"),
        semester=params.get("semester"),
    )


@api_view(["GET", "POST"])
def ratings(request):
    if request.method == "POST":
        if user_role(request.user) != Profile.STUDENT:
            return Response({"success": False, "message": "Only students can submit ratings"}, status=403)

        serializer = RatingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        vd = serializer.validated_data
        dup = Rating.objects.filter(student=request.user, type=vd["type"], semester=vd["semester"])
        if vd["type"] == Rating.COURSE:
            dup = dup.filter(course=vd.get("course"))
        else:
            dup = dup.filter(lecturer=vd.get("lecturer"))
        duplicate_message = "You have already rated this course/lecturer for this semester"
        if dup.exists():
            return Response({"success": False, "message": duplicate_message}, status=400)
        try:
            with transaction.atomic():
                rating = serializer.save(student=request.user)
        except IntegrityError:
            return Response({"success": False, "message": duplicate_message}, status=400)

        logger.info("rating %s submitted by user %s", rating.pk, request.user.pk)
        return Response(
            {"success": True, "message": "Rating submitted successfully", "data": RatingSerializer(rating).data},
            status=201,
        )

    return _listing(request, _rating_queryset(request), RatingSerializer)


@api_view(["GET"])
def ratings_average(request):
    params = request.query_params
    qs = Rating.objects.all()
    if params.get("type"):
        qs = qs.filter(type=params["type"])
    if params.get("course"):
        qs = qs.filter(course=params["course"])
    if params.get("lecturer"):
        qs = qs.filter(lecturer_id=params["lecturer"]) if str(params["lecturer"]).isdigit() else qs.none()
    return Response({"success": True, "data": rating_averages(qs)})


# --- announcements ---

@api_view(["GET", "POST"])
def announcements(request):
    if request.method == "POST":
        _require(request.user, Profile.LECTURER, Profile.ADMIN,
                 message="Only lecturers and administrators can post announcements")
        serializer = AnnouncementSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        announcement = serializer.save(author=request.user)
        logger.info("announcement %s created by user %s", announcement.pk, request.user.pk)
        return Response(
            {"success": True, "message": "Announcement created successfully", "data": AnnouncementSerializer(announcement).data},
            status=201,
        )

    # expired announcements drop out of the feed
    qs = Announcement.objects.select_related("author", "author__profile").filter(
        Q(expiry_date__isnull=True) | Q(expiry_date__gte=timezone.now())
    )
    if request.query_params.get("type"):
        qs = qs.filter(type=request.query_params["type"])
    if request.query_params.get("faculty"):
        qs = qs.filter(faculty=request.query_params["faculty"])
    return _listing(request, qs, AnnouncementSerializer)


@api_view(["GET", "PUT", "DELETE"])
def announcement_detail(request, pk: int):
    announcement = _get_or_404(Announcement.objects.select_related("author", "author__profile"), pk, "Announcement not found")

    if request.method == "GET":
        Announcement.objects.filter(pk=pk).update(views=F("views") + 1)
        announcement.refresh_from_db(fields=["views"])
        return Response({"success": True, "data": AnnouncementSerializer(announcement).data})

    _require(request.user, Profile.LECTURER, Profile.ADMIN,
             message="Only lecturers and administrators can manage announcements")
    if request.method == "DELETE":
        _owner_or_admin(request.user, announcement.author_id, "Not authorized to delete this announcement")
        announcement.delete()
        logger.info("announcement %s deleted by user %s", pk, request.user.pk)
        return Response({"success": True, "message": "Announcement deleted successfully"})

    _owner_or_admin(request.user, announcement.author_id, "Not authorized to update this announcement")
    serializer = AnnouncementSerializer(announcement, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    announcement = serializer.save()
    return Response({
        "success": True,
        "message": "Announcement updated successfully",
        "data": AnnouncementSerializer(announcement).data,
    })


# --- timetables ---

@api_view(["GET", "POST"])
def timetables(request):
    if request.method == "POST":
        _require(request.user, Profile.ADMIN, message="Only administrators can access this resource")
        serializer = TimetableSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        timetable = serializer.save(created_by=request.user)
        return Response(
            {"success": True, "message": "Timetable created successfully", "data": TimetableSerializer(timetable).data},
            status=201,
        )

    params = request.query_params
    qs = Timetable.objects.filter(is_active=True)
    for param, field in (
        ("faculty", "faculty"),
        ("programCode", "program_code"),
        ("semester", "semester"),
        ("academicYear", "academic_year"),
    ):
        if params.get(param):
            qs = qs.filter(**{field: params[param]})
    if _digits(params.get("yearOfStudy")):
        qs = qs.filter(year_of_study=int(params["yearOfStudy"]))
    return _listing(request, qs, TimetableSerializer)


@api_view(["GET"])
def my_timetable(request):
    if user_role(request.user) != Profile.STUDENT:
        raise PermissionDenied("This endpoint is only for students")

    profile = request.user.profile
    qs = Timetable.objects.filter(
        faculty=profile.faculty,
        year_of_study=profile.year_of_study,
        is_active=True,
        is_published=True,
    )
    if request.query_params.get("semester"):
        qs = qs.filter(semester=request.query_params["semester"])
    if request.query_params.get("academicYear"):
        qs = qs.filter(academic_year=request.query_params["academicYear"])

    # prefer the student's own programme when a faculty runs several
    timetable = qs.filter(program_name__iexact=profile.program or "").first() or qs.first()
    if timetable is None:
        raise NotFound("No timetable found for your program and year")
    return Response({"success": True, "data": TimetableSerializer(timetable).data})


@api_view(["GET", "PUT", "DELETE"])
def timetable_detail(request, pk: int):
    timetable = _get_or_404(Timetable.objects.all(), pk, "Timetable not found")
    if request.method == "GET":
        return Response({"success": True, "data": TimetableSerializer(timetable).data})

    _require(request.user, Profile.ADMIN, message="Only administrators can access this resource")
    if request.method == "DELETE":
        if timetable.document:
            timetable.document.delete(save=False)
        timetable.delete()
        logger.info("timetable %s deleted by user %s", pk, request.user.pk)
        return Response({"success": True, "message": "Timetable deleted successfully"})

    serializer = TimetableSerializer(timetable, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    timetable = serializer.save(updated_by=request.user)
    return Response({
        "success": True,
        "message": "Timetable updated successfully",
        "data": TimetableSerializer(timetable).data,
    })


@api_view(["POST"])
@permission_classes([IsAuthenticated, IsAdmin])
@parser_classes([MultiPartParser, FormParser])
def upload_timetable_document(request, pk: int):
    timetable = _get_or_404(Timetable.objects.all(), pk, "Timetable not found")
    uploaded = receive_upload(request, "timetableDocument", TIMETABLE_DOCUMENTS)

    if timetable.document:
        timetable.document.delete(save=False)
    timetable.document.save(uploaded.name, uploaded, save=False)
    timetable.document_name = uploaded.name
    timetable.document_uploaded_at = timezone.now()
    timetable.save()
    logger.info("timetable %s document stored as %s", timetable.pk, timetable.document.name)

    return Response({
        "success": True,
        "message": "Document uploaded successfully",
        "data": TimetableSerializer(timetable).data,
    })


@api_view(["GET"])
def download_timetable_document(request, pk: int):
    timetable = _get_or_404(Timetable.objects.all(), pk, "Timetable not found")
    if not timetable.document:
        raise NotFound("No document uploaded for this timetable")
    return FileResponse(
        timetable.document.open("rb"),
        as_attachment=True,
        filename=timetable.document_name or timetable.document.name.rsplit("/", 1)[-1],
    )


@api_view(["DELETE"])
@permission_classes([IsAuthenticated, IsAdmin])
def delete_timetable_document(request, pk: int):
    timetable = _get_or_404(Timetable.objects.all(), pk, "Timetable not found")
    if not timetable.document:
        raise NotFound("No document uploaded for this timetable")
    timetable.document.delete(save=False)
    timetable.document_name = ""
    timetable.document_uploaded_at = None
    timetable.save()
    return Response({"success": True, "message": "Document deleted successfully"})


# --- lecture notes ---

def _notes():
    return LectureNote.objects.select_related("uploaded_by")


def _search_notes(qs, term):
    return qs.filter(
        Q(title__icontains=term)
        | Q(description__icontains=term)
        | Q(course__icontains=term)
        | Q(course_code__icontains=term)
        | Q(tags__icontains=term)
    )


@api_view(["GET", "POST"])
@parser_classes([MultiPartParser, FormParser])
def notes(request):
    if request.method == "POST":
        _require(request.user, Profile.LECTURER, Profile.ADMIN,
                 message="Only lecturers and administrators can upload lecture notes")
        uploaded = receive_upload(request, "file", LECTURE_NOTES, missing_message="Please upload a file")
        serializer = LectureNoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        note = serializer.save(
            uploaded_by=request.user,
            file=uploaded,
            file_name=uploaded.name,
            file_type=os.path.splitext(uploaded.name)[1].lstrip(".").lower(),
            file_size=uploaded.size or 0,
        )
        logger.info("lecture note %s stored as %s", note.pk, note.file.name)
        return Response(
            {"success": True, "message": "Lecture note uploaded successfully", "data": LectureNoteSerializer(note).data},
            status=201,
        )

    params = request.query_params
    qs = _notes()
    if params.get("faculty"):
        qs = qs.filter(faculty=params["faculty"])
    if params.get("program"):
        qs = qs.filter(program=params["program"])
    if _digits(params.get("yearOfStudy")):
        qs = qs.filter(year_of_study=int(params["yearOfStudy"]))
    if params.get("course"):
        qs = qs.filter(course__icontains=params["course"])
    if params.get("search"):
        qs = _search_notes(qs, params["search"])
    return _listing(request, qs, LectureNoteSerializer)


@api_view(["GET"])
def my_notes(request):
    if user_role(request.user) != Profile.STUDENT:
        raise PermissionDenied("This endpoint is only for students")
    profile = request.user.profile
    qs = _notes().filter(faculty=profile.faculty, program=profile.program, year_of_study=profile.year_of_study)
    if request.query_params.get("course"):
        qs = qs.filter(course__icontains=request.query_params["course"])
    if request.query_params.get("search"):
        qs = _search_notes(qs, request.query_params["search"])
    return _listing(request, qs, LectureNoteSerializer)


@api_view(["GET"])
@permission_classes([IsLecturerOrAdmin])
def notes_uploaded_by_me(request):
    return _listing(request, _notes().filter(uploaded_by=request.user), LectureNoteSerializer)


@api_view(["GET"])
@permission_classes([IsAdmin])
def notes_stats(request):
    return Response({"success": True, "data": lecture_note_stats()})


@api_view(["GET", "PUT", "DELETE"])
def note_detail(request, pk: int):
    note = _get_or_404(_notes(), pk, "Lecture note not found")

    if request.method == "GET":
        LectureNote.objects.filter(pk=pk).update(views=F("views") + 1)
        note.refresh_from_db(fields=["views"])
        return Response({"success": True, "data": LectureNoteSerializer(note).data})

    _require(request.user, Profile.LECTURER, Profile.ADMIN,
             message="Only lecturers and administrators can manage lecture notes")
    if request.method == "DELETE":
        _owner_or_admin(request.user, note.uploaded_by_id, "Not authorized to delete this lecture note")
        if note.file:
            note.file.delete(save=False)
        note.delete()
        logger.info("lecture note %s deleted by user %s", pk, request.user.pk)
        return Response({"success": True, "message": "Lecture note deleted successfully"})

    _owner_or_admin(request.user, note.uploaded_by_id, "Not authorized to update this lecture note")
    serializer = LectureNoteSerializer(note, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    note = serializer.save()
    return Response({
        "success": True,
        "message": "Lecture note updated successfully",
        "data": LectureNoteSerializer(note).data,
    })


@api_view(["GET"])
def download_note(request, pk: int):
    note = _get_or_404(LectureNote.objects.all(), pk, "Lecture note not found")
    if not note.file:
        raise NotFound("No file uploaded for this lecture note")
    LectureNote.objects.filter(pk=pk).update(downloads=F("downloads") + 1)
    filename = f"{note.title}.{note.file_type}" if note.file_type else note.file_name
    return FileResponse(note.file.open("rb"), as_attachment=True, filename=filename)


# --- voting ---

def _elections():
    return Election.objects.select_related("created_by").prefetch_related("candidates")


@api_view(["GET", "POST"])
def elections(request):
    if request.method == "POST":
        _require(request.user, Profile.ADMIN, message="Only administrators can access this resource")
        serializer = ElectionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        election = serializer.save(created_by=request.user)
        logger.info("election %s created by user %s", election.pk, request.user.pk)
        return Response(
            {"success": True, "message": "Voting created successfully", "data": ElectionSerializer(election).data},
            status=201,
        )

    params = request.query_params
    qs = _elections()
    if params.get("type"):
        qs = qs.filter(type=params["type"])
    if params.get("faculty"):
        qs = qs.filter(faculty=params["faculty"])

    now = timezone.now()
    state = params.get("status")
    if state == "active":
        qs = qs.filter(start_date__lte=now, end_date__gte=now, is_active=True)
    elif state == "upcoming":
        qs = qs.filter(start_date__gt=now, is_active=True)
    elif state == "completed":
        qs = qs.filter(end_date__lt=now)
    return _listing(request, qs, ElectionSerializer)


@api_view(["GET", "PUT", "DELETE"])
def election_detail(request, pk: int):
    election = _get_or_404(_elections(), pk, "Voting not found")

    if request.method == "GET":
        data = ElectionSerializer(election).data
        data["hasVoted"] = election.vote_records.filter(voter=request.user).exists()
        return Response({"success": True, "data": data})

    _require(request.user, Profile.ADMIN, message="Only administrators can access this resource")
    if request.method == "DELETE":
        election.delete()
        logger.info("election %s deleted by user %s", pk, request.user.pk)
        return Response({"success": True, "message": "Voting deleted successfully"})

    serializer = ElectionSerializer(election, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    # candidates may have been replaced under the prefetch cache
    election = _elections().get(pk=pk)
    return Response({"success": True, "message": "Voting updated successfully", "data": ElectionSerializer(election).data})


@api_view(["POST"])
def cast_vote(request, pk: int):
    candidate_id = request.data.get("candidateId")
    if not candidate_id:
        return Response({"success": False, "message": "Please provide candidate ID"}, status=400)
    if user_role(request.user) != Profile.STUDENT:
        raise PermissionDenied("Only students can vote")

    with transaction.atomic():
        election = _get_or_404(Election.objects.select_for_update(), pk, "Voting not found")
        if election.vote_records.filter(voter=request.user).exists():
            return Response({"success": False, "message": "You have already voted"}, status=400)
        if not election.is_open(timezone.now()):
            return Response({"success": False, "message": "Voting is not active"}, status=400)
        if election.type == Election.FACULTY and request.user.profile.faculty != election.faculty:
            raise PermissionDenied("You are not eligible to vote in this election")

        candidate = election.candidates.filter(pk=candidate_id).first() if _digits(candidate_id) else None
        if candidate is None:
            return Response({"success": False, "message": "Candidate not found"}, status=404)

        try:
            with transaction.atomic():
                VoteRecord.objects.create(election=election, voter=request.user)
        except IntegrityError:
            return Response({"success": False, "message": "You have already voted"}, status=400)
        Candidate.objects.filter(pk=candidate.pk).update(votes=F("votes") + 1)

    logger.info("vote recorded in election %s", pk)
    return Response({"success": True, "message": "Vote cast successfully"})


@api_view(["PUT"])
@permission_classes([IsAdmin])
def publish_results(request, pk: int):
    election = _get_or_404(_elections(), pk, "Voting not found")
    election.results_published = True
    election.save(update_fields=["results_published"])
    logger.info("results published for election %s", pk)
    return Response({"success": True, "message": "Results published successfully", "data": ElectionSerializer(election).data})
