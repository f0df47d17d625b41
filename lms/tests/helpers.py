from django.contrib.auth import get_user_model

from lms.authentication import issue_token
from lms.models import Profile


def make_user(email, role=Profile.STUDENT, password="secret123", first_name="Ama", last_name="Mensah", **profile):
	User = get_user_model()
	user = User.objects.create_user(
		username=email, email=email, password=password, first_name=first_name, last_name=last_name
	)
	defaults = {}
	if role in (Profile.STUDENT, Profile.LECTURER):
		defaults["faculty"] = "Engineering"
	if role == Profile.STUDENT:
		defaults.update(program="Computer Science", year_of_study=1)
	defaults.update(profile)
	Profile.objects.create(user=user, role=role, **defaults)
	return user


def bearer(client, user):
	client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_token(user)}")
	return client
