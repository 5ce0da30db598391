"""Data models."""

# Common models
from .common import (
    PyObjectId,
    to_object_id,
    ErrorResponse,
    PaginationMeta,
    TokenResponse
)

# User models
from .user import (
    UserRole,
    UserStatus,
    STAFF_ROLES,
    ADMIN_ROLES,
    UnavailableDates,
    UserCreate,
    UserUpdate,
    UserStatusUpdate,
    UserRolesUpdate,
    UserInDB,
    UserResponse,
    UserSummary,
    UserLogin
)

# Manuscript models
from .manuscript import (
    ManuscriptStatus,
    MANUSCRIPT_TRANSITIONS,
    MIN_MANUSCRIPT_FILES,
    MAX_MANUSCRIPT_FILES,
    can_transition,
    ManuscriptFile,
    AuthorList,
    ManuscriptCreate,
    ManuscriptUpdate,
    ManuscriptStatusUpdate,
    ManuscriptInDB,
    ManuscriptWithAuthor,
    FeaturedManuscript,
    ManuscriptSummary
)

# Review models
from .review import (
    ReviewDecision,
    ReviewAssign,
    ReviewSubmit,
    ReviewInDB,
    ReviewWithManuscript,
    ReviewWithReviewer,
    ManuscriptDetail
)

# Issue models
from .issue import (
    IssueStatus,
    IssueCreate,
    IssueUpdate,
    IssueManuscriptChange,
    IssueInDB,
    IssueWithManuscripts,
    LOCKED_ISSUE_STATUSES
)

# Site content models
from .editorial_board import (
    EditorialBoardCreate,
    EditorialBoardUpdate,
    EditorialBoardInDB
)
from .blog import BlogCreate, BlogUpdate, BlogInDB
from .contact_message import ContactMessageCreate, ContactMessageInDB

__all__ = [
    # Common models
    "PyObjectId",
    "to_object_id",
    "ErrorResponse",
    "PaginationMeta",
    "TokenResponse",

    # User models
    "UserRole",
    "UserStatus",
    "STAFF_ROLES",
    "ADMIN_ROLES",
    "UnavailableDates",
    "UserCreate",
    "UserUpdate",
    "UserStatusUpdate",
    "UserRolesUpdate",
    "UserInDB",
    "UserResponse",
    "UserSummary",
    "UserLogin",

    # Manuscript models
    "ManuscriptStatus",
    "MANUSCRIPT_TRANSITIONS",
    "MIN_MANUSCRIPT_FILES",
    "MAX_MANUSCRIPT_FILES",
    "can_transition",
    "ManuscriptFile",
    "AuthorList",
    "ManuscriptCreate",
    "ManuscriptUpdate",
    "ManuscriptStatusUpdate",
    "ManuscriptInDB",
    "ManuscriptWithAuthor",
    "FeaturedManuscript",
    "ManuscriptSummary",

    # Review models
    "ReviewDecision",
    "ReviewAssign",
    "ReviewSubmit",
    "ReviewInDB",
    "ReviewWithManuscript",
    "ReviewWithReviewer",
    "ManuscriptDetail",

    # Issue models
    "IssueStatus",
    "IssueCreate",
    "IssueUpdate",
    "IssueManuscriptChange",
    "IssueInDB",
    "IssueWithManuscripts",
    "LOCKED_ISSUE_STATUSES",

    # Site content models
    "EditorialBoardCreate",
    "EditorialBoardUpdate",
    "EditorialBoardInDB",
    "BlogCreate",
    "BlogUpdate",
    "BlogInDB",
    "ContactMessageCreate",
    "ContactMessageInDB"
]
