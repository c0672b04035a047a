"""
Principal models.

A principal is anything that can hold a session: a super admin, a school
admin or a teacher. Each kind lives in its own collection and is unified
only by the ``role`` discriminant.
"""

from typing import Annotated, Optional, Union, Literal

from pydantic import BaseModel, Field, TypeAdapter

from schoolflow.models.roles import Role, PrincipalStatus, parse_status


# Collection holding each principal kind
SUPER_ADMINS_COLLECTION = "super_admins"
SCHOOL_ADMINS_COLLECTION = "school_admins"
TEACHERS_COLLECTION = "teachers"


class _PrincipalBase(BaseModel):
    id: str
    email: str
    status: PrincipalStatus = PrincipalStatus.ACTIVE


class SuperAdmin(_PrincipalBase):
    """Platform operator. Not attached to any school."""
    role: Literal["super_admin"] = "super_admin"
    name: Optional[str] = None
    adminRole: Optional[str] = Field(None, description="owner | admin | moderator")

    @property
    def schoolId(self) -> None:
        return None


class SchoolAdmin(_PrincipalBase):
    """Administrator of a single school (tenant)."""
    role: Literal["school_admin"] = "school_admin"
    name: Optional[str] = None
    schoolId: Optional[str] = None


class Teacher(_PrincipalBase):
    """Teacher belonging to a school."""
    role: Literal["teacher"] = "teacher"
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    schoolId: Optional[str] = None
    teacherId: Optional[str] = None
    photoUrl: Optional[str] = None


Principal = Annotated[
    Union[SuperAdmin, SchoolAdmin, Teacher],
    Field(discriminator="role"),
]

_principal_adapter = TypeAdapter(Principal)


def collection_for_role(role: Role) -> str:
    """Name of the collection that stores principals of ``role``."""
    if role == Role.SUPER_ADMIN:
        return SUPER_ADMINS_COLLECTION
    if role == Role.SCHOOL_ADMIN:
        return SCHOOL_ADMINS_COLLECTION
    if role == Role.TEACHER:
        return TEACHERS_COLLECTION
    raise ValueError(f"Unknown role: {role!r}")


def principal_from_document(role: Role, doc: dict) -> Principal:
    """
    Build the principal variant for ``role`` from a stored document.

    Password fields are never copied onto the model. A status outside the
    known set reads as deleted.

    Args:
        role: Which collection the document came from
        doc: Raw MongoDB document

    Returns:
        SuperAdmin, SchoolAdmin or Teacher
    """
    data = {
        key: value
        for key, value in doc.items()
        if key not in ("_id", "password", "tempPassword")
    }
    data["id"] = str(doc["_id"])
    data["role"] = Role(role).value
    status = parse_status(doc.get("status", PrincipalStatus.ACTIVE.value))
    data["status"] = (status or PrincipalStatus.DELETED).value
    return _principal_adapter.validate_python(data)


def display_name(principal: Principal) -> str:
    """Human-readable name for any principal kind."""
    if isinstance(principal, Teacher):
        parts = [principal.firstName or "", principal.lastName or ""]
        name = " ".join(p for p in parts if p)
        return name or principal.email
    return principal.name or principal.email
