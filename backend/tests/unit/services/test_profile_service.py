"""Tests for ProfileService backed by the transactional session."""

from __future__ import annotations

import uuid

import pytest

from profilehub.infra.storage import LocalPictureStorage
from profilehub.models.user import User
from profilehub.services._shared.errors import ConflictError, NotFoundError, ValidationError
from profilehub.services.profile import (
    PictureUpload,
    ProfileService,
    ProfileUpdateIn,
    VideoLinkIn,
)
from tests.factories.user import UserFactory

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
YOUTUBE = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


@pytest.fixture()
def storage(tmp_path):
    return LocalPictureStorage(tmp_path, max_bytes=1024, default_picture="default.png")


@pytest.fixture()
def service(storage):
    return ProfileService(storage=storage)


def _picture(name="me.png", data=PNG, content_type="image/png"):
    return PictureUpload(filename=name, content_type=content_type, data=data)


class TestListing:
    def test_list_users_paginates(self, service, session):
        UserFactory.create_batch(5)

        first = service.list_users(page=1, limit=2)
        last = service.list_users(page=3, limit=2)

        assert first.meta.total == 5
        assert len(first.items) == 2
        assert first.meta.total_pages == 3
        assert first.meta.has_next and not first.meta.has_prev
        assert len(last.items) == 1
        assert not last.meta.has_next

    def test_list_users_clamps_limit(self, service, session):
        UserFactory.create_batch(2)
        assert service.list_users(page=1, limit=1000).meta.limit == 100

    def test_list_content_flattens_links_newest_first(self, service, session):
        alice = UserFactory(name="Alice")
        bob = UserFactory(name="Bob")
        service.add_video_link(alice.id, VideoLinkIn(url=YOUTUBE, title="first"))
        service.add_video_link(bob.id, VideoLinkIn(url="https://youtu.be/abc", title="second"))
        service.add_video_link(alice.id, VideoLinkIn(url=YOUTUBE, title="third"))

        result = service.list_content(page=1, limit=10)

        assert [item.link.title for item in result.items] == ["third", "second", "first"]
        assert result.items[1].user_name == "Bob"
        assert result.items[1].user_id == bob.id
        assert result.meta.total == 3

    def test_get_user_unknown_or_malformed(self, service, session):
        with pytest.raises(NotFoundError):
            service.get_user(uuid.uuid4())
        with pytest.raises(NotFoundError):
            service.get_user("not-a-uuid")


class TestUpdateProfile:
    def test_updates_fields(self, service, session):
        user = UserFactory(name="Before")

        out = service.update_profile(
            user.id, ProfileUpdateIn(name="After", bio="Hello", location="Lisbon")
        )

        assert (out.name, out.bio, out.location) == ("After", "Hello", "Lisbon")
        assert session.get(User, user.id).bio == "Hello"

    def test_empty_strings_clear_bio_and_location(self, service, session):
        user = UserFactory(bio="x", location="y")
        out = service.update_profile(user.id, ProfileUpdateIn(bio="", location=""))
        assert out.bio == "" and out.location == ""

    def test_email_taken_conflicts(self, service, session):
        UserFactory(email="taken@example.com")
        user = UserFactory()

        with pytest.raises(ConflictError, match="Email already in use"):
            service.update_profile(user.id, ProfileUpdateIn(email="taken@example.com"))

    def test_same_email_is_not_a_conflict(self, service, session):
        user = UserFactory(email="me@example.com")
        assert service.update_profile(user.id, ProfileUpdateIn(email="me@example.com"))

    @pytest.mark.parametrize(
        "dto",
        [
            ProfileUpdateIn(name="ab"),
            ProfileUpdateIn(email="nope"),
            ProfileUpdateIn(location="x" * 101),
        ],
    )
    def test_invalid_fields(self, service, session, dto):
        user = UserFactory()
        with pytest.raises(ValidationError):
            service.update_profile(user.id, dto)

    def test_picture_replaces_previous_file(self, service, storage, session):
        user = UserFactory()

        first = service.update_profile(user.id, ProfileUpdateIn(picture=_picture()))
        first_path = storage.root / first.profile_picture
        assert first_path.is_file()

        second = service.update_profile(user.id, ProfileUpdateIn(picture=_picture("b.jpg")))
        assert second.profile_picture.endswith(".jpg")
        assert (storage.root / second.profile_picture).is_file()
        assert not first_path.exists()

    def test_rejected_update_removes_new_picture(self, service, storage, session):
        UserFactory(email="taken@example.com")
        user = UserFactory()

        with pytest.raises(ConflictError):
            service.update_profile(
                user.id, ProfileUpdateIn(email="taken@example.com", picture=_picture())
            )

        assert list(storage.pictures_dir.glob("*")) == []

    def test_non_image_rejected(self, service, session):
        user = UserFactory()
        with pytest.raises(ValidationError, match="Only image files"):
            service.update_profile(
                user.id, ProfileUpdateIn(picture=_picture("a.txt", b"hi", "text/plain"))
            )

    def test_profile_picture_path_falls_back_to_default(self, service, storage, session):
        user = UserFactory()
        with pytest.raises(NotFoundError):
            service.profile_picture_path(user.id)

        storage.pictures_dir.mkdir(parents=True, exist_ok=True)
        (storage.pictures_dir / "default.png").write_bytes(PNG)
        assert service.profile_picture_path(user.id).name == "default.png"


class TestVideoLinks:
    def test_add_and_remove(self, service, session):
        user = UserFactory()

        added = service.add_video_link(user.id, VideoLinkIn(url=YOUTUBE, title="  Talk  "))
        assert added.link.title == "Talk"
        assert len(added.link.id) == 32
        assert [v.id for v in added.user.video_links] == [added.link.id]

        out = service.remove_video_link(user.id, added.link.id)
        assert out.video_links == ()
        assert session.get(User, user.id).video_links == []

    def test_remove_unknown_link(self, service, session):
        user = UserFactory()
        with pytest.raises(NotFoundError, match="YouTube link not found"):
            service.remove_video_link(user.id, "missing")

    @pytest.mark.parametrize(
        "url,title,message",
        [
            ("", "t", "required"),
            ("https://vimeo.com/123", "t", "Invalid YouTube URL"),
            (YOUTUBE, "", "Title is required"),
            (YOUTUBE, "x" * 101, "less than 100"),
        ],
    )
    def test_invalid_links(self, service, session, url, title, message):
        user = UserFactory()
        with pytest.raises(ValidationError, match=message):
            service.add_video_link(user.id, VideoLinkIn(url=url, title=title))
