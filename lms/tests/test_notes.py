import json
import os
import shutil
import tempfile

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from lms.models import LectureNote, Profile

from .helpers import bearer, make_user


def note_form(**extra):
	data = {
		"title": "Linked Lists",
		"description": "Week 3 slides",
		"course": "Data Structures",
		"courseCode": "CSC201",
		"faculty": "Engineering",
		"program": "Computer Science",
		"yearOfStudy": 1,
		"tags": json.dumps(["lists", "pointers"]),
	}
	data.update(extra)
	return data


class LectureNoteTest(TestCase):
	def setUp(self):
		self.media = tempfile.mkdtemp()
		self.override = override_settings(MEDIA_ROOT=self.media)
		self.override.enable()
		self.lecturer = make_user("lect@cug.edu.gh", role=Profile.LECTURER)
		self.other = make_user("other@cug.edu.gh", role=Profile.LECTURER)
		self.admin = make_user("admin@cug.edu.gh", role=Profile.ADMIN)
		self.student = make_user("kofi@cug.edu.gh")
		self.client = bearer(APIClient(), self.lecturer)

	def tearDown(self):
		self.override.disable()
		shutil.rmtree(self.media, ignore_errors=True)

	def _upload(self, name="linked-lists.pdf", content=b"%PDF-1.4 notes", content_type="application/pdf", **extra):
		data = note_form(**extra)
		data["file"] = SimpleUploadedFile(name, content, content_type=content_type)
		return self.client.post("/api/notes", data, format="multipart")

	def test_lecturer_uploads_note(self):
		resp = self._upload()
		self.assertEqual(resp.status_code, 201, resp.content)
		data = resp.json()["data"]
		self.assertEqual(data["tags"], ["lists", "pointers"])
		self.assertEqual(data["file"]["name"], "linked-lists.pdf")
		self.assertEqual(data["file"]["type"], "pdf")
		self.assertEqual(data["uploadedBy"]["email"], "lect@cug.edu.gh")
		self.assertRegex(data["file"]["storedAs"], r"^notes/linked-lists-\d{13}-\d{9}\.pdf$")

		note = LectureNote.objects.get(pk=data["id"])
		self.assertEqual(note.file_size, len(b"%PDF-1.4 notes"))
		self.assertTrue(os.path.exists(note.file.path))

	def test_students_cannot_upload(self):
		bearer(self.client, self.student)
		resp = self._upload()
		self.assertEqual(resp.status_code, 403)
		self.assertFalse(LectureNote.objects.exists())

	def test_file_required(self):
		resp = self.client.post("/api/notes", note_form(), format="multipart")
		self.assertEqual(resp.status_code, 400)
		self.assertEqual(resp.json()["message"], "Please upload a file")

	def test_unsupported_type(self):
		resp = self._upload(name="notes.exe", content=b"MZ", content_type="application/octet-stream")
		self.assertEqual(resp.status_code, 400)
		self.assertEqual(resp.json()["message"], "Unsupported file type")
		self.assertFalse(LectureNote.objects.exists())

	def test_slides_accepted_by_extension(self):
		resp = self._upload(name="week3.pptx", content_type="application/octet-stream")
		self.assertEqual(resp.status_code, 201, resp.content)
		self.assertEqual(resp.json()["data"]["file"]["type"], "pptx")

	@override_settings(SMARTLEARN_NOTE_MAX_BYTES=1024)
	def test_oversized_note_rejected(self):
		resp = self._upload(content=b"x" * 4096)
		self.assertEqual(resp.status_code, 413)
		self.assertFalse(LectureNote.objects.exists())

	def test_missing_metadata(self):
		resp = self._upload(courseCode="")
		self.assertEqual(resp.status_code, 400)
		self.assertEqual(resp.json()["message"], "Please provide all required fields")

	def test_list_filters(self):
		self._upload(title="Linked Lists")
		self._upload(title="Ledgers", course="Accounting I", courseCode="ACC101", faculty="Business", program="Accounting")
		bearer(self.client, self.student)
		titles = lambda **params: [n["title"] for n in self.client.get("/api/notes", params).json()["data"]]
		self.assertEqual(titles(faculty="Business"), ["Ledgers"])
		self.assertEqual(titles(course="data struct"), ["Linked Lists"])
		self.assertEqual(titles(search="pointers"), ["Ledgers", "Linked Lists"])
		self.assertEqual(titles(search="ACC101"), ["Ledgers"])

	def test_my_notes_matches_student_audience(self):
		self._upload(title="Mine")
		self._upload(title="Seniors", yearOfStudy=3)
		bearer(self.client, self.student)
		resp = self.client.get("/api/notes/my-notes")
		self.assertEqual(resp.status_code, 200)
		self.assertEqual([n["title"] for n in resp.json()["data"]], ["Mine"])

		bearer(self.client, self.lecturer)
		self.assertEqual(self.client.get("/api/notes/my-notes").status_code, 403)

	def test_uploaded_by_me(self):
		self._upload(title="Mine")
		bearer(self.client, self.other)
		self._upload(title="Theirs")
		resp = self.client.get("/api/notes/uploaded-by-me")
		self.assertEqual([n["title"] for n in resp.json()["data"]], ["Theirs"])

	def test_detail_update_and_delete(self):
		note_id = self._upload().json()["data"]["id"]
		bearer(self.client, self.student)
		resp = self.client.get(f"/api/notes/{note_id}")
		self.assertEqual(resp.json()["data"]["views"], 1)
		self.assertEqual(self.client.put(f"/api/notes/{note_id}", {"title": "x"}, format="json").status_code, 403)

		bearer(self.client, self.other)
		resp = self.client.put(f"/api/notes/{note_id}", {"title": "x"}, format="json")
		self.assertEqual(resp.status_code, 403)
		self.assertEqual(resp.json()["message"], "Not authorized to update this lecture note")

		bearer(self.client, self.lecturer)
		resp = self.client.put(f"/api/notes/{note_id}", {"title": "Linked Lists (revised)", "tags": ["lists"]}, format="json")
		self.assertEqual(resp.status_code, 200, resp.content)
		self.assertEqual(resp.json()["data"]["tags"], ["lists"])

		path = LectureNote.objects.get(pk=note_id).file.path
		resp = self.client.delete(f"/api/notes/{note_id}")
		self.assertEqual(resp.status_code, 200)
		self.assertFalse(os.path.exists(path))
		resp = self.client.get(f"/api/notes/{note_id}")
		self.assertEqual(resp.status_code, 404)
		self.assertEqual(resp.json()["message"], "Lecture note not found")

	def test_download_counts(self):
		note_id = self._upload(content=b"%PDF-1.4 week three").json()["data"]["id"]
		bearer(self.client, self.student)
		resp = self.client.get(f"/api/notes/{note_id}/download")
		self.assertEqual(resp.status_code, 200)
		self.assertEqual(b"".join(resp.streaming_content), b"%PDF-1.4 week three")
		self.assertIn("Linked Lists.pdf", resp["Content-Disposition"])
		resp.close()
		self.assertEqual(LectureNote.objects.get(pk=note_id).downloads, 1)

	def test_download_without_file(self):
		note = LectureNote.objects.create(
			title="Empty", course="Data Structures", course_code="CSC201", faculty="Engineering",
			program="Computer Science", year_of_study=1, uploaded_by=self.lecturer,
		)
		resp = self.client.get(f"/api/notes/{note.pk}/download")
		self.assertEqual(resp.status_code, 404)
		self.assertEqual(resp.json()["message"], "No file uploaded for this lecture note")

	def test_stats(self):
		self._upload(title="One")
		self._upload(title="Two")
		bearer(self.client, self.admin)
		resp = self.client.get("/api/notes/stats")
		self.assertEqual(resp.status_code, 200)
		data = resp.json()["data"]
		self.assertEqual(data["totalNotes"], 2)
		self.assertEqual(data["notesByFaculty"], [{"_id": "Engineering", "count": 2}])

		bearer(self.client, self.lecturer)
		self.assertEqual(self.client.get("/api/notes/stats").status_code, 403)
