import json

from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.db import transaction

from .models import FACULTIES, Announcement, Candidate, Election, LectureNote, Profile, Rating, Timetable

User = get_user_model()


class LoginForm(serializers.Serializer):
	"""Login payload, validated on the client before any request is made."""

	email = serializers.EmailField(error_messages={
		"invalid": "Invalid email address",
		"required": "Invalid email address",
		"blank": "Invalid email address",
	})
	password = serializers.CharField(min_length=6, trim_whitespace=False, error_messages={
		"min_length": "Password must be at least 6 characters",
		"required": "Password must be at least 6 characters",
		"blank": "Password must be at least 6 characters",
	})


class RegistrationForm(serializers.Serializer):
	firstName = serializers.CharField(min_length=2, error_messages={
		"min_length": "First name must be at least 2 characters",
		"blank": "First name must be at least 2 characters",
	})
	lastName = serializers.CharField(min_length=2, error_messages={
		"min_length": "Last name must be at least 2 characters",
		"blank": "Last name must be at least 2 characters",
	})
	email = serializers.EmailField(error_messages={"invalid": "Invalid email address"})
	password = serializers.CharField(min_length=6, trim_whitespace=False, error_messages={
		"min_length": "Password must be at least 6 characters",
	})
	confirmPassword = serializers.CharField(trim_whitespace=False, required=False, allow_blank=True)
	studentId = serializers.CharField(min_length=13, error_messages={
		"min_length": "Student ID must be at least 13 characters",
		"blank": "Student ID must be at least 13 characters",
	})
	faculty = serializers.ChoiceField(choices=FACULTIES, error_messages={
		"invalid_choice": "Please select a faculty",
		"blank": "Please select a faculty",
	})
	program = serializers.CharField(min_length=2, error_messages={
		"min_length": "Program is required",
		"blank": "Program is required",
	})
	yearOfStudy = serializers.IntegerField(min_value=1, max_value=5)

	def __init__(self, *args, require_confirmation=True, **kwargs):
		super().__init__(*args, **kwargs)
		self.require_confirmation = require_confirmation

	def validate(self, attrs):
		if self.require_confirmation and attrs.get("password") != attrs.get("confirmPassword"):
			raise serializers.ValidationError({"confirmPassword": "Passwords don't match"})
		return attrs


class UserSerializer(serializers.ModelSerializer):
	firstName = serializers.CharField(source="first_name", read_only=True)
	lastName = serializers.CharField(source="last_name", read_only=True)
	role = serializers.SerializerMethodField()
	studentId = serializers.SerializerMethodField()
	faculty = serializers.SerializerMethodField()
	program = serializers.SerializerMethodField()
	yearOfStudy = serializers.SerializerMethodField()
	isActive = serializers.BooleanField(source="is_active", read_only=True)
	createdAt = serializers.DateTimeField(source="date_joined", read_only=True)

	class Meta:
		model = User
		fields = [
			"id", "firstName", "lastName", "email", "role", "studentId", "faculty",
			"program", "yearOfStudy", "isActive", "createdAt",
		]

	def _profile(self, obj):
		return getattr(obj, "profile", None)

	def get_role(self, obj):
		profile = self._profile(obj)
		if profile is not None:
			return profile.role
		return Profile.ADMIN if obj.is_superuser else None

	def get_studentId(self, obj):
		return getattr(self._profile(obj), "student_id", None)

	def get_faculty(self, obj):
		return getattr(self._profile(obj), "faculty", None)

	def get_program(self, obj):
		return getattr(self._profile(obj), "program", None)

	def get_yearOfStudy(self, obj):
		return getattr(self._profile(obj), "year_of_study", None)


class PersonSerializer(serializers.ModelSerializer):
	firstName = serializers.CharField(source="first_name", read_only=True)
	lastName = serializers.CharField(source="last_name", read_only=True)

	class Meta:
		model = User
		fields = ["id", "firstName", "lastName", "email"]


class RatingAspectsSerializer(serializers.Serializer):
	contentQuality = serializers.IntegerField(source="content_quality", min_value=1, max_value=5, required=False, allow_null=True)
	teachingMethod = serializers.IntegerField(source="teaching_method", min_value=1, max_value=5, required=False, allow_null=True)
	availability = serializers.IntegerField(min_value=1, max_value=5, required=False, allow_null=True)
	fairness = serializers.IntegerField(min_value=1, max_value=5, required=False, allow_null=True)


REQUIRED = {"required": "Please provide all required fields", "blank": "Please provide all required fields", "null": "Please provide all required fields"}


class RatingSerializer(serializers.ModelSerializer):
	type = serializers.ChoiceField(choices=Rating.TYPE_CHOICES, error_messages=REQUIRED)
	courseCode = serializers.CharField(source="course_code", required=False, allow_blank=True, allow_null=True)
	lecturer = serializers.PrimaryKeyRelatedField(
		queryset=User.objects.filter(profile__role=Profile.LECTURER),
		required=False,
		allow_null=True,
	)
	rating = serializers.IntegerField(min_value=1, max_value=5, error_messages=REQUIRED)
	aspects = RatingAspectsSerializer(source="*", required=False)
	isAnonymous = serializers.BooleanField(source="is_anonymous", required=False, default=True)
	academicYear = serializers.CharField(source="academic_year", error_messages=REQUIRED)
	semester = serializers.CharField(error_messages=REQUIRED)
	createdAt = serializers.DateTimeField(source="created_at", read_only=True)

	class Meta:
		model = Rating
		fields = [
			"id", "type", "course", "courseCode", "lecturer", "rating", "comment",
			"aspects", "isAnonymous", "academicYear", "semester", "createdAt",
		]
		read_only_fields = ["id", "createdAt"]
		extra_kwargs = {
			"course": {"required": False, "allow_blank": True, "allow_null": True},
			"comment": {"required": False, "allow_blank": True},
		}

	def validate(self, attrs):
		kind = attrs.get("type")
		if kind == Rating.COURSE:
			if not attrs.get("course") or not attrs.get("course_code"):
				raise serializers.ValidationError("Course and course code are required for course ratings")
			attrs["lecturer"] = None
		elif kind == Rating.LECTURER:
			if not attrs.get("lecturer"):
				raise serializers.ValidationError("Lecturer is required for lecturer ratings")
			attrs["course"] = None
			attrs["course_code"] = None
		return attrs

	def to_representation(self, instance):
		data = super().to_representation(instance)
		data["lecturer"] = PersonSerializer(instance.lecturer).data if instance.lecturer_id else None
		# hide the reviewer on anonymous ratings
		if not instance.is_anonymous:
			data["student"] = PersonSerializer(instance.student).data
		return data


class AnnouncementSerializer(serializers.ModelSerializer):
	isPinned = serializers.BooleanField(source="is_pinned", required=False, default=False)
	expiryDate = serializers.DateTimeField(source="expiry_date", required=False, allow_null=True)
	createdAt = serializers.DateTimeField(source="created_at", read_only=True)
	author = serializers.SerializerMethodField()

	class Meta:
		model = Announcement
		fields = ["id", "title", "content", "type", "faculty", "author", "isPinned", "expiryDate", "views", "createdAt"]
		read_only_fields = ["id", "views", "createdAt"]
		extra_kwargs = {
			"title": {"error_messages": {"required": "Please provide title, content, and type"}},
			"content": {"error_messages": {"required": "Please provide title, content, and type"}},
			"type": {"error_messages": {"required": "Please provide title, content, and type"}},
			"faculty": {"required": False, "allow_blank": True, "allow_null": True},
		}

	def get_author(self, obj):
		return UserSerializer(obj.author).data

	def validate(self, attrs):
		instance = self.instance
		kind = attrs.get("type", getattr(instance, "type", None))
		faculty = attrs.get("faculty", getattr(instance, "faculty", None))
		if kind == "faculty" and not faculty:
			raise serializers.ValidationError("Faculty is required for faculty-type announcements")
		return attrs


class TimetableSerializer(serializers.ModelSerializer):
	programCode = serializers.CharField(source="program_code")
	programName = serializers.CharField(source="program_name")
	yearOfStudy = serializers.IntegerField(source="year_of_study", min_value=1, max_value=5)
	academicYear = serializers.CharField(source="academic_year")
	document = serializers.SerializerMethodField()
	isActive = serializers.BooleanField(source="is_active", required=False, default=True)
	isPublished = serializers.BooleanField(source="is_published", required=False, default=False)
	createdAt = serializers.DateTimeField(source="created_at", read_only=True)

	class Meta:
		model = Timetable
		fields = [
			"id", "programCode", "programName", "yearOfStudy", "faculty", "semester",
			"academicYear", "document", "isActive", "isPublished", "createdAt",
		]
		read_only_fields = ["id", "document", "createdAt"]

	def get_document(self, obj):
		if not obj.document:
			return None
		return {
			"name": obj.document_name,
			"storedAs": obj.document.name,
			"uploadedAt": obj.document_uploaded_at.isoformat() if obj.document_uploaded_at else None,
		}


class ProfileUpdateSerializer(serializers.Serializer):
	"""Fields a signed-in user may change on their own account."""

	firstName = serializers.CharField(min_length=2, required=False, error_messages={
		"min_length": "First name must be at least 2 characters",
	})
	lastName = serializers.CharField(min_length=2, required=False, error_messages={
		"min_length": "Last name must be at least 2 characters",
	})
	faculty = serializers.ChoiceField(choices=FACULTIES, required=False, error_messages={
		"invalid_choice": "Please select a faculty",
	})
	program = serializers.CharField(min_length=2, required=False)
	yearOfStudy = serializers.IntegerField(min_value=1, max_value=5, required=False)

	def update(self, user, validated_data):
		if "firstName" in validated_data:
			user.first_name = validated_data["firstName"].strip()
		if "lastName" in validated_data:
			user.last_name = validated_data["lastName"].strip()
		user.save(update_fields=["first_name", "last_name"])

		profile, _ = Profile.objects.get_or_create(
			user=user,
			defaults={"role": Profile.ADMIN if user.is_superuser else Profile.STUDENT},
		)
		for field, attr in (("faculty", "faculty"), ("program", "program"), ("yearOfStudy", "year_of_study")):
			if field in validated_data:
				setattr(profile, attr, validated_data[field])
		profile.save()
		user.profile = profile
		return user


class TagsField(serializers.ListField):
	"""Tag list; multipart forms send it as one JSON-encoded string."""

	child = serializers.CharField()

	def to_internal_value(self, data):
		if isinstance(data, (list, tuple)) and len(data) == 1 and isinstance(data[0], str) and data[0].lstrip().startswith("["):
			data = data[0]
		if isinstance(data, str):
			try:
				data = json.loads(data)
			except ValueError:
				self.fail("not_a_list", input_type="str")
		return super().to_internal_value(data)


class LectureNoteSerializer(serializers.ModelSerializer):
	courseCode = serializers.CharField(source="course_code", error_messages=REQUIRED)
	faculty = serializers.ChoiceField(choices=FACULTIES, error_messages={**REQUIRED, "invalid_choice": "Please select a faculty"})
	yearOfStudy = serializers.IntegerField(source="year_of_study", min_value=1, max_value=5, error_messages=REQUIRED)
	tags = TagsField(required=False)
	file = serializers.SerializerMethodField()
	uploadedBy = PersonSerializer(source="uploaded_by", read_only=True)
	createdAt = serializers.DateTimeField(source="created_at", read_only=True)

	class Meta:
		model = LectureNote
		fields = [
			"id", "title", "description", "course", "courseCode", "faculty", "program", "yearOfStudy",
			"tags", "file", "downloads", "views", "uploadedBy", "createdAt",
		]
		read_only_fields = ["id", "downloads", "views", "createdAt"]
		extra_kwargs = {
			"title": {"error_messages": REQUIRED},
			"description": {"required": False, "allow_blank": True},
			"course": {"required": True, "allow_blank": False, "error_messages": REQUIRED},
			"program": {"required": True, "allow_blank": False, "error_messages": REQUIRED},
		}

	def get_file(self, obj):
		if not obj.file:
			return None
		return {
			"name": obj.file_name,
			"storedAs": obj.file.name,
			"type": obj.file_type,
			"size": obj.file_size,
		}


class CandidateSerializer(serializers.ModelSerializer):
	studentId = serializers.CharField(source="student_id")
	imageUrl = serializers.CharField(source="image_url", required=False, allow_blank=True)

	class Meta:
		model = Candidate
		fields = ["id", "name", "studentId", "position", "manifesto", "imageUrl", "votes"]
		read_only_fields = ["id", "votes"]
		extra_kwargs = {"manifesto": {"required": False, "allow_blank": True}}


class ElectionSerializer(serializers.ModelSerializer):
	type = serializers.ChoiceField(choices=Election.TYPE_CHOICES, error_messages=REQUIRED)
	positions = serializers.ListField(
		child=serializers.CharField(),
		allow_empty=False,
		error_messages={**REQUIRED, "empty": "Please provide all required fields"},
	)
	candidates = CandidateSerializer(many=True, required=False)
	startDate = serializers.DateTimeField(source="start_date", error_messages=REQUIRED)
	endDate = serializers.DateTimeField(source="end_date", error_messages=REQUIRED)
	isActive = serializers.BooleanField(source="is_active", required=False, default=True)
	resultsPublished = serializers.BooleanField(source="results_published", read_only=True)
	createdBy = PersonSerializer(source="created_by", read_only=True)
	createdAt = serializers.DateTimeField(source="created_at", read_only=True)

	class Meta:
		model = Election
		fields = [
			"id", "title", "description", "type", "faculty", "positions", "candidates",
			"startDate", "endDate", "isActive", "resultsPublished", "createdBy", "createdAt",
		]
		extra_kwargs = {
			"title": {"error_messages": REQUIRED},
			"description": {"error_messages": REQUIRED},
			"faculty": {"required": False, "allow_blank": True, "allow_null": True},
		}

	def validate(self, attrs):
		instance = self.instance
		kind = attrs.get("type", getattr(instance, "type", None))
		if kind == Election.FACULTY and not attrs.get("faculty", getattr(instance, "faculty", None)):
			raise serializers.ValidationError("Faculty is required for faculty-type voting")

		start = attrs.get("start_date", getattr(instance, "start_date", None))
		end = attrs.get("end_date", getattr(instance, "end_date", None))
		if start and end and end <= start:
			raise serializers.ValidationError({"endDate": "End date must be after start date"})

		positions = attrs.get("positions", getattr(instance, "positions", None)) or []
		for candidate in attrs.get("candidates") or []:
			if candidate["position"] not in positions:
				raise serializers.ValidationError({"candidates": f"Unknown position: {candidate['position']}"})
		if instance is not None and "candidates" in attrs and instance.vote_records.exists():
			raise serializers.ValidationError({"candidates": "Candidates cannot be changed once voting has started"})
		return attrs

	def _set_candidates(self, election, candidates):
		election.candidates.all().delete()
		Candidate.objects.bulk_create([Candidate(election=election, **c) for c in candidates])

	def create(self, validated_data):
		candidates = validated_data.pop("candidates", [])
		with transaction.atomic():
			election = Election.objects.create(**validated_data)
			self._set_candidates(election, candidates)
		return election

	def update(self, instance, validated_data):
		candidates = validated_data.pop("candidates", None)
		with transaction.atomic():
			instance = super().update(instance, validated_data)
			if candidates is not None:
				self._set_candidates(instance, candidates)
		return instance

	def to_representation(self, instance):
		data = super().to_representation(instance)
		# tallies stay hidden while the election runs unpublished
		if instance.is_active and not instance.results_published:
			for candidate in data["candidates"]:
				candidate.pop("votes", None)
		return data
