import os
import shutil
import tempfile
from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.files.uploadhandler import StopUpload
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework.test import APIClient

from lms.models import Profile, Timetable
from lms.uploads import (
	ALLOWED_DOCUMENT_EXTENSIONS,
	ALLOWED_DOCUMENT_MIMES,
	INVALID_DOCUMENT_MESSAGE,
	DocumentSizeLimitUploadHandler,
	DocumentTooLargeError,
	InvalidDocumentError,
	check_document,
	is_allowed_document,
	unique_filename,
)

from .helpers import bearer, make_user


class UploadGateTest(SimpleTestCase):
	def test_allowed_extension_passes_with_any_mime(self):
		for ext in ALLOWED_DOCUMENT_EXTENSIONS:
			for mime in ("text/plain", "application/octet-stream", None, ""):
				self.assertTrue(is_allowed_document(f"timetable{ext}", mime), (ext, mime))

	def test_extension_is_case_insensitive(self):
		self.assertTrue(is_allowed_document("TIMETABLE.PDF", "image/png"))
		self.assertTrue(is_allowed_document("grades.XlSx", None))

	def test_allowed_mime_passes_with_any_extension(self):
		for mime in ALLOWED_DOCUMENT_MIMES:
			for name in ("notes.txt", "binary.exe", "no-extension"):
				self.assertTrue(is_allowed_document(name, mime), (name, mime))

	def test_mime_parameters_are_ignored(self):
		self.assertTrue(is_allowed_document("x.bin", "application/pdf; charset=binary"))

	def test_rejects_when_neither_matches(self):
		self.assertFalse(is_allowed_document("photo.png", "image/png"))
		self.assertFalse(is_allowed_document("archive.pdf.zip", "application/zip"))

	def test_unique_filename_layout(self):
		name = unique_filename("Level 100 Timetable.pdf", now_ms=1700000000123, suffix=42)
		self.assertEqual(name, "Level 100 Timetable-1700000000123-000000042.pdf")

	def test_unique_filename_keeps_last_extension_only(self):
		name = unique_filename("backup.tar.xlsx", now_ms=1, suffix=1)
		self.assertEqual(name, "backup.tar-1-000000001.xlsx")

	def test_unique_filename_strips_directories(self):
		name = unique_filename("../../etc/passwd.pdf", now_ms=1, suffix=1)
		self.assertEqual(name, "passwd-1-000000001.pdf")

	def test_unique_filename_shortens_stem_to_fit(self):
		name = unique_filename("a" * 300 + ".xlsx", now_ms=1700000000123, suffix=7, max_length=60)
		self.assertEqual(len(name), 60)
		self.assertTrue(name.endswith("-1700000000123-000000007.xlsx"))

	def test_unique_filename_counts_utf8_bytes(self):
		name = unique_filename("\u00e9" * 40 + ".pdf", now_ms=1, suffix=1, max_length=30)
		self.assertLessEqual(len(name.encode("utf-8")), 30)
		self.assertTrue(name.endswith("-1-000000001.pdf"))

	def test_unique_filenames_do_not_collide(self):
		names = {unique_filename("same.pdf") for _ in range(200)}
		self.assertEqual(len(names), 200)

	@override_settings(SMARTLEARN_DOCUMENT_MAX_BYTES=10)
	def test_oversized_file_rejected_before_reading(self):
		uploaded = mock.Mock()
		uploaded.name = "big.pdf"
		uploaded.size = 11
		uploaded.content_type = "application/pdf"
		with self.assertRaises(DocumentTooLargeError):
			check_document(uploaded)
		uploaded.read.assert_not_called()
		uploaded.chunks.assert_not_called()

	def test_disallowed_type_raises_fixed_message(self):
		uploaded = SimpleUploadedFile("x.png", b"png", content_type="image/png")
		with self.assertRaises(InvalidDocumentError) as ctx:
			check_document(uploaded)
		self.assertEqual(str(ctx.exception.detail[0]), INVALID_DOCUMENT_MESSAGE)

	def test_size_handler_stops_stream(self):
		handler = DocumentSizeLimitUploadHandler(max_bytes=8)
		handler.new_file("timetableDocument", "a.pdf", "application/pdf", None)
		self.assertEqual(handler.receive_data_chunk(b"12345", 0), b"12345")
		with self.assertRaises(StopUpload):
			handler.receive_data_chunk(b"6789", 5)
		self.assertTrue(handler.exceeded)


class TimetableDocumentEndpointTest(TestCase):
	def setUp(self):
		self.media = tempfile.mkdtemp()
		self.override = override_settings(MEDIA_ROOT=self.media)
		self.override.enable()
		self.admin = make_user("admin@cug.edu.gh", role=Profile.ADMIN)
		self.student = make_user("kofi@cug.edu.gh")
		self.timetable = Timetable.objects.create(
			program_code="BSC-CS",
			program_name="Computer Science",
			year_of_study=1,
			faculty="Engineering",
			semester="First",
			academic_year="2025/2026",
			created_by=self.admin,
		)
		self.url = f"/api/timetables/{self.timetable.pk}/upload-document"
		self.client = bearer(APIClient(), self.admin)

	def tearDown(self):
		self.override.disable()
		shutil.rmtree(self.media, ignore_errors=True)

	def _upload(self, name, content=b"%PDF-1.4 test", content_type="application/pdf"):
		doc = SimpleUploadedFile(name, content, content_type=content_type)
		return self.client.post(self.url, {"timetableDocument": doc}, format="multipart")

	def test_upload_stores_renamed_file(self):
		resp = self._upload("timetable.pdf")
		self.assertEqual(resp.status_code, 200, resp.content)
		self.assertTrue(resp.json()["success"])
		self.timetable.refresh_from_db()
		self.assertEqual(self.timetable.document_name, "timetable.pdf")
		stored = os.path.basename(self.timetable.document.name)
		self.assertRegex(stored, r"^timetable-\d+-\d{9}\.pdf$")
		self.assertTrue(os.path.exists(self.timetable.document.path))

	def test_long_filename_keeps_timestamp_and_suffix(self):
		long_name = "Faculty of Engineering Level 100 First Semester Timetable 2025-2026 Final Revised.pdf"
		resp = self._upload(long_name)
		self.assertEqual(resp.status_code, 200, resp.content)
		self.timetable.refresh_from_db()
		self.assertEqual(self.timetable.document_name, long_name)
		self.assertRegex(self.timetable.document.name, r"^timetables/.+-\d{13}-\d{9}\.pdf$")
		self.assertLessEqual(len(self.timetable.document.name), 255)
		self.assertTrue(os.path.exists(self.timetable.document.path))

	def test_very_long_filename_is_shortened_not_cut(self):
		resp = self._upload("x" * 400 + ".pdf")
		self.assertEqual(resp.status_code, 200, resp.content)
		self.timetable.refresh_from_db()
		self.assertLessEqual(len(self.timetable.document.name), 255)
		self.assertRegex(self.timetable.document.name, r"-\d{13}-\d{9}\.pdf$")

	def test_extension_wins_over_wrong_mime(self):
		resp = self._upload("grades.xlsx", content_type="text/plain")
		self.assertEqual(resp.status_code, 200, resp.content)

	def test_mime_wins_over_wrong_extension(self):
		resp = self._upload("grades.txt", content_type="application/vnd.ms-excel")
		self.assertEqual(resp.status_code, 200, resp.content)

	def test_disallowed_file_rejected(self):
		resp = self._upload("setup.exe", content=b"MZ", content_type="application/octet-stream")
		self.assertEqual(resp.status_code, 400)
		body = resp.json()
		self.assertFalse(body["success"])
		self.assertEqual(body["message"], INVALID_DOCUMENT_MESSAGE)
		self.timetable.refresh_from_db()
		self.assertFalse(self.timetable.document)

	@override_settings(SMARTLEARN_DOCUMENT_MAX_BYTES=1024)
	def test_oversized_file_rejected(self):
		resp = self._upload("huge.pdf", content=b"x" * 4096)
		self.assertEqual(resp.status_code, 413)
		self.assertFalse(resp.json()["success"])
		self.assertEqual(os.listdir(self.media), [])

	def test_missing_file(self):
		resp = self.client.post(self.url, {}, format="multipart")
		self.assertEqual(resp.status_code, 400)
		self.assertEqual(resp.json()["message"], "Please upload a document")

	def test_students_cannot_upload(self):
		bearer(self.client, self.student)
		resp = self._upload("timetable.pdf")
		self.assertEqual(resp.status_code, 403)

	def test_create_and_list_timetables(self):
		resp = self.client.post("/api/timetables", {
			"programCode": "BSC-IT",
			"programName": "Information Technology",
			"yearOfStudy": 2,
			"faculty": "Engineering",
			"semester": "First",
			"academicYear": "2025/2026",
		}, format="json")
		self.assertEqual(resp.status_code, 201, resp.content)
		self.assertIsNone(resp.json()["data"]["document"])

		bearer(self.client, self.student)
		body = self.client.get("/api/timetables", {"yearOfStudy": 2}).json()
		self.assertEqual([t["programCode"] for t in body["data"]], ["BSC-IT"])

	def test_download_and_delete(self):
		self._upload("timetable.pdf", content=b"%PDF-1.4 hello")
		bearer(self.client, self.student)
		resp = self.client.get(f"/api/timetables/{self.timetable.pk}/download-document")
		self.assertEqual(resp.status_code, 200)
		self.assertEqual(b"".join(resp.streaming_content), b"%PDF-1.4 hello")
		self.assertIn("timetable.pdf", resp["Content-Disposition"])
		resp.close()

		bearer(self.client, self.admin)
		resp = self.client.delete(f"/api/timetables/{self.timetable.pk}/delete-document")
		self.assertEqual(resp.status_code, 200)
		self.timetable.refresh_from_db()
		self.assertFalse(self.timetable.document)

		resp = self.client.get(f"/api/timetables/{self.timetable.pk}/download-document")
		self.assertEqual(resp.status_code, 404)
