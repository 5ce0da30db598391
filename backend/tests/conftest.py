"""
Test configuration and fixtures for the journal portal backend.

Services run against an in-memory MongoDB (mongomock-motor) and the S3
storage service is replaced by a mock, so the suite needs no external
services.
"""
from typing import AsyncGenerator, Callable, Dict, List
from unittest.mock import MagicMock

import fitz  # PyMuPDF
import pytest
import pytest_asyncio
from faker import Faker
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from journal_portal.core.database import get_database
from journal_portal.core.security import create_access_token
from journal_portal.main import app
from journal_portal.models import (
    AuthorList,
    IssueCreate,
    ManuscriptCreate,
    ManuscriptFile,
    ManuscriptInDB,
    ManuscriptStatus,
    UserCreate,
    UserInDB,
    UserStatus,
)
from journal_portal.services.manuscript_service import ManuscriptService
from journal_portal.services.storage_service import S3StorageService, get_storage_service
from journal_portal.services.user_service import UserService

fake = Faker()

TEST_DATABASE_NAME = "journal_portal_test"
TEST_PASSWORD = "testpassword123"


@pytest.fixture
def db():
    """Fresh in-memory database for each test."""
    client = AsyncMongoMockClient()
    return client[TEST_DATABASE_NAME]


@pytest.fixture
def mock_storage():
    """S3 storage double that returns predictable URLs."""
    storage = MagicMock(spec=S3StorageService)
    storage.build_key.side_effect = S3StorageService.build_key
    storage.upload_bytes.side_effect = (
        lambda data, key, content_type=None: f"https://test-bucket.s3.amazonaws.com/{key}"
    )
    return storage


@pytest_asyncio.fixture
async def async_client(db, mock_storage) -> AsyncGenerator[AsyncClient, None]:
    """Async test client wired to the test database and storage."""
    app.dependency_overrides[get_database] = lambda: db
    app.dependency_overrides[get_storage_service] = lambda: mock_storage
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def user_factory(db) -> Callable:
    """Create users with the given roles, approved unless told otherwise."""
    user_service = UserService(db)

    async def _create(roles: List[str] = None, status: UserStatus = UserStatus.APPROVED,
                      email: str = None, name: str = None) -> UserInDB:
        user = await user_service.create_user(
            UserCreate(
                email=email or fake.unique.email(),
                name=name or fake.name(),
                password=TEST_PASSWORD,
                roles=roles or ["author"],
            ),
            allow_admin=True
        )
        if status != UserStatus.PENDING:
            user = await user_service.set_status(user.id, status)
        return user

    return _create


@pytest_asyncio.fixture
async def author(user_factory) -> UserInDB:
    return await user_factory(["author"], name="Ada Mary Lovelace")


@pytest_asyncio.fixture
async def reviewer(user_factory) -> UserInDB:
    return await user_factory(["reviewer"])


@pytest_asyncio.fixture
async def editor(user_factory) -> UserInDB:
    return await user_factory(["editor"])


@pytest_asyncio.fixture
async def admin(user_factory) -> UserInDB:
    return await user_factory(["admin"])


def make_auth_headers(user: UserInDB) -> Dict[str, str]:
    access_token = create_access_token(
        data={"sub": str(user.id), "email": user.email, "name": user.name, "roles": list(user.roles)}
    )
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
def author_headers(author) -> Dict[str, str]:
    return make_auth_headers(author)


@pytest.fixture
def reviewer_headers(reviewer) -> Dict[str, str]:
    return make_auth_headers(reviewer)


@pytest.fixture
def editor_headers(editor) -> Dict[str, str]:
    return make_auth_headers(editor)


@pytest.fixture
def admin_headers(admin) -> Dict[str, str]:
    return make_auth_headers(admin)


def build_pdf(pages: int) -> bytes:
    """A minimal PDF document with the given number of blank pages."""
    doc = fitz.open()
    for _ in range(pages):
        doc.new_page()
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def pdf_bytes() -> Callable[[int], bytes]:
    return build_pdf


def manuscript_files(page_counts=(2, 3, 0)) -> List[ManuscriptFile]:
    return [
        ManuscriptFile(
            item_title=f"Item {idx}",
            item_description="",
            file_name=f"file_{idx}.pdf",
            file_url=f"https://test-bucket.s3.amazonaws.com/manuscripts/file_{idx}.pdf",
            page_count=pages,
        )
        for idx, pages in enumerate(page_counts)
    ]


@pytest.fixture
def manuscript_factory(db, author) -> Callable:
    """Create manuscripts directly through the service, optionally forcing a status."""
    manuscript_service = ManuscriptService(db)

    async def _create(status: ManuscriptStatus = ManuscriptStatus.DRAFT, page_counts=(2, 3, 0),
                      title: str = None, manuscript_type: str = "Research Article",
                      author_user: UserInDB = None) -> ManuscriptInDB:
        owner = author_user or author
        manuscript = await manuscript_service.create_manuscript(ManuscriptCreate(
            title=title or fake.sentence(nb_words=6),
            abstract=fake.paragraph(),
            type=manuscript_type,
            keywords="ecology, soil",
            author_id=owner.id,
            files=manuscript_files(page_counts),
            author_list=AuthorList(
                fname="Ada", lname="Lovelace", email=owner.email,
                institution="Analytical Society", contributor_role="Author"
            ),
        ))
        if status != ManuscriptStatus.DRAFT:
            # Fixtures may place manuscripts anywhere in the workflow
            await db["manuscripts"].update_one(
                {"_id": manuscript.id}, {"$set": {"status": ManuscriptStatus(status).value}}
            )
            manuscript = await manuscript_service.get_manuscript_by_id(manuscript.id)
        return manuscript

    return _create


@pytest.fixture
def issue_data() -> Callable[..., IssueCreate]:
    def _build(volume: int = 1, issue_number: int = 1, title: str = "Spring Issue 2024") -> IssueCreate:
        return IssueCreate(volume=volume, issue_number=issue_number, title=title,
                           description="Seasonal issue")
    return _build


@pytest.fixture
def password() -> str:
    """Password every factory-created user is registered with."""
    return TEST_PASSWORD


@pytest.fixture
def auth_headers_for() -> Callable[[UserInDB], Dict[str, str]]:
    return make_auth_headers
