import pytest
from fastapi.testclient import TestClient

from blog_service.application.services import CommentService, PostService, UserService
from blog_service.domain.repositories import COMMENTS, POSTS, USERS
from blog_service.infrastructure.auth import get_auth_provider
from blog_service.infrastructure.storage import InMemoryRecordStore, JsonFileRecordStore, get_record_store
from blog_service.main import app

from factories import FakeAuthProvider, make_post, make_user


@pytest.fixture
def users():
    return [
        make_user("u1", bio="I write things"),
        make_user("u2"),
        make_user("admin", role="admin"),
    ]


@pytest.fixture
def store(users):
    return InMemoryRecordStore({
        USERS: [user.to_record() for user in users],
        POSTS: [
            make_post("p1", 10, title="Hello World", category="Tech").to_record(),
            make_post("p2", 20, title="Second", author_id="u2", category="Life").to_record(),
        ],
        COMMENTS: [],
    })


@pytest.fixture
def json_store(tmp_path):
    return JsonFileRecordStore(str(tmp_path / "data"), retry_attempts=3, retry_delay=0)


@pytest.fixture
def auth_provider():
    return FakeAuthProvider()


@pytest.fixture
def post_service(store):
    return PostService(store)


@pytest.fixture
def comment_service(store):
    return CommentService(store)


@pytest.fixture
def user_service(store, auth_provider):
    return UserService(store, auth_provider)


@pytest.fixture
def client(store, auth_provider):
    app.dependency_overrides[get_record_store] = lambda: store
    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    yield TestClient(app)
    app.dependency_overrides.clear()
