from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from lms.models import Profile

from .helpers import bearer, make_user


class UserManagementTest(TestCase):
	def setUp(self):
		self.admin = make_user("admin@cug.edu.gh", role=Profile.ADMIN)
		self.lecturer = make_user("lect@cug.edu.gh", role=Profile.LECTURER, last_name="Boateng")
		self.law_lecturer = make_user("law@cug.edu.gh", role=Profile.LECTURER, last_name="Adjei", faculty="Law")
		self.student = make_user("kofi@cug.edu.gh", first_name="Kofi", student_id="CUG2025000001")
		self.senior = make_user("yaa@cug.edu.gh", first_name="Yaa", year_of_study=3, student_id="CUG2025000002")
		self.business = make_user(
			"esi@cug.edu.gh", first_name="Esi", faculty="Business", program="Accounting", student_id="CUG2025000003"
		)
		self.client = APIClient()

	def _emails(self, resp):
		return [u["email"] for u in resp.json()["data"]]

	def test_admin_lists_everyone(self):
		bearer(self.client, self.admin)
		resp = self.client.get("/api/users")
		self.assertEqual(resp.status_code, 200)
		self.assertEqual(resp.json()["total"], 6)
		self.assertEqual(len(resp.json()["data"]), 6)

	def test_user_filters(self):
		bearer(self.client, self.admin)
		resp = self.client.get("/api/users", {"role": "lecturer"})
		self.assertEqual(sorted(self._emails(resp)), ["law@cug.edu.gh", "lect@cug.edu.gh"])
		resp = self.client.get("/api/users", {"faculty": "Business"})
		self.assertEqual(self._emails(resp), ["esi@cug.edu.gh"])
		resp = self.client.get("/api/users", {"search": "CUG2025000002"})
		self.assertEqual(self._emails(resp), ["yaa@cug.edu.gh"])
		resp = self.client.get("/api/users", {"search": "kofi"})
		self.assertEqual(self._emails(resp), ["kofi@cug.edu.gh"])

	def test_only_admins_list_users(self):
		bearer(self.client, self.lecturer)
		self.assertEqual(self.client.get("/api/users").status_code, 403)

	def test_lecturers_listing(self):
		bearer(self.client, self.student)
		resp = self.client.get("/api/users/lecturers")
		self.assertEqual(resp.status_code, 200)
		self.assertEqual(self._emails(resp), ["law@cug.edu.gh", "lect@cug.edu.gh"])
		resp = self.client.get("/api/users/lecturers", {"faculty": "Law"})
		self.assertEqual(self._emails(resp), ["law@cug.edu.gh"])

	def test_students_by_program(self):
		bearer(self.client, self.lecturer)
		resp = self.client.get("/api/users/students/by-program", {"program": "Computer Science", "yearOfStudy": 1})
		self.assertEqual(resp.status_code, 200)
		self.assertEqual(self._emails(resp), ["kofi@cug.edu.gh"])
		resp = self.client.get("/api/users/students/by-program", {"faculty": "Business"})
		self.assertEqual(self._emails(resp), ["esi@cug.edu.gh"])

		bearer(self.client, self.student)
		self.assertEqual(self.client.get("/api/users/students/by-program").status_code, 403)

	def test_user_detail_visibility(self):
		bearer(self.client, self.student)
		resp = self.client.get(f"/api/users/{self.student.pk}")
		self.assertEqual(resp.status_code, 200)
		self.assertEqual(resp.json()["data"]["studentId"], "CUG2025000001")
		self.assertEqual(self.client.get(f"/api/users/{self.senior.pk}").status_code, 403)

		bearer(self.client, self.lecturer)
		self.assertEqual(self.client.get(f"/api/users/{self.senior.pk}").status_code, 200)
		resp = self.client.get("/api/users/9999")
		self.assertEqual(resp.status_code, 404)
		self.assertEqual(resp.json()["message"], "User not found")

	def test_toggle_status(self):
		bearer(self.client, self.admin)
		resp = self.client.put(f"/api/users/{self.student.pk}/toggle-status")
		self.assertEqual(resp.status_code, 200)
		self.assertEqual(resp.json()["message"], "User deactivated successfully")
		self.assertFalse(resp.json()["data"]["isActive"])

		resp = self.client.put(f"/api/users/{self.student.pk}/toggle-status")
		self.assertEqual(resp.json()["message"], "User activated successfully")
		self.student.refresh_from_db()
		self.assertTrue(self.student.is_active)

	def test_deactivated_user_cannot_log_in(self):
		bearer(self.client, self.admin)
		self.client.put(f"/api/users/{self.student.pk}/toggle-status")
		self.client.credentials()
		resp = self.client.post("/api/auth/login", {"email": "kofi@cug.edu.gh", "password": "secret123"}, format="json")
		self.assertEqual(resp.status_code, 403)

	def test_admin_cannot_deactivate_or_delete_self(self):
		bearer(self.client, self.admin)
		resp = self.client.put(f"/api/users/{self.admin.pk}/toggle-status")
		self.assertEqual(resp.status_code, 400)
		self.assertEqual(resp.json()["message"], "You cannot deactivate your own account")
		resp = self.client.delete(f"/api/users/{self.admin.pk}")
		self.assertEqual(resp.status_code, 400)
		self.assertEqual(resp.json()["message"], "You cannot delete your own account")

	def test_delete_user(self):
		bearer(self.client, self.admin)
		resp = self.client.delete(f"/api/users/{self.student.pk}")
		self.assertEqual(resp.status_code, 200)
		self.assertEqual(resp.json()["message"], "User deleted successfully")
		self.assertFalse(get_user_model().objects.filter(pk=self.student.pk).exists())
		self.assertFalse(Profile.objects.filter(user_id=self.student.pk).exists())

	def test_non_admin_cannot_delete_or_toggle(self):
		bearer(self.client, self.lecturer)
		self.assertEqual(self.client.delete(f"/api/users/{self.student.pk}").status_code, 403)
		self.assertEqual(self.client.put(f"/api/users/{self.student.pk}/toggle-status").status_code, 403)
		self.assertTrue(get_user_model().objects.get(pk=self.student.pk).is_active)


class ProfileUpdateTest(TestCase):
	def setUp(self):
		self.student = make_user("kofi@cug.edu.gh", first_name="Kofi")
		self.client = bearer(APIClient(), self.student)

	def test_update_own_profile(self):
		resp = self.client.put("/api/users/profile", {"lastName": "Owusu", "yearOfStudy": 2}, format="json")
		self.assertEqual(resp.status_code, 200, resp.content)
		data = resp.json()["data"]
		self.assertEqual((data["firstName"], data["lastName"], data["yearOfStudy"]), ("Kofi", "Owusu", 2))
		self.assertEqual(Profile.objects.get(user=self.student).year_of_study, 2)

	def test_profile_validation(self):
		resp = self.client.put("/api/users/profile", {"faculty": "Astrology"}, format="json")
		self.assertEqual(resp.status_code, 400)
		self.assertEqual(resp.json()["errors"]["faculty"], "Please select a faculty")

	def test_role_cannot_be_changed(self):
		self.client.put("/api/users/profile", {"role": "admin"}, format="json")
		self.assertEqual(Profile.objects.get(user=self.student).role, Profile.STUDENT)
