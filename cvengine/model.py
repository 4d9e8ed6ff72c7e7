"""DocumentModel: the normalized, validated input of the layout engine.

Raw talent records and request payloads arrive as loosely-typed dicts (camelCase
keys, optional fields, blank strings). build_document_model() turns them into
frozen dataclasses once per render:

- entries missing a required field are dropped here, never in the renderer
- skills are the ordered, de-duplicated union of existing + additional skills
- every text field is a stripped str ("" when absent)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# (request key, label) pairs turned into header links, in display order
CONTACT_LINK_KEYS = (
    ("linkedin", "LinkedIn"),
    ("github", "GitHub"),
    ("portfolio", "Portfolio"),
)


def _text(value) -> str:
    """Stripped string for a scalar field; '' for None, lists, dicts."""
    if value is None or isinstance(value, (list, tuple, dict, bool)):
        return ""
    return str(value).strip()


def _text_list(values) -> tuple:
    """Non-blank stripped strings from a list-ish field, order preserved."""
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, (list, tuple)):
        return ()
    return tuple(t for t in (_text(v) for v in values) if t)


@dataclass(frozen=True)
class ContactInfo:
    phone: str = ""
    links: tuple = ()  # ((label, url), ...)


@dataclass(frozen=True)
class CandidateProfile:
    full_name: str
    email: str = ""
    career_stage: str = ""
    interests: tuple = ()
    target_path: str = ""


@dataclass(frozen=True)
class EducationEntry:
    degree: str
    institution: str
    field: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""

    REQUIRED = ("degree", "institution")


@dataclass(frozen=True)
class ExperienceEntry:
    company: str
    position: str
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""
    achievements: tuple = ()

    REQUIRED = ("company", "position")


@dataclass(frozen=True)
class ProjectEntry:
    title: str
    description: str
    technologies: str = ""
    link: str = ""
    details: tuple = ()

    REQUIRED = ("title", "description")


@dataclass(frozen=True)
class CertificationEntry:
    title: str
    issuer: str
    date: str = ""
    link: str = ""

    REQUIRED = ("title", "issuer")


@dataclass(frozen=True)
class DocumentModel:
    profile: CandidateProfile
    contact: ContactInfo = field(default_factory=ContactInfo)
    summary: str = ""
    education: tuple = ()
    experience: tuple = ()
    projects: tuple = ()
    certifications: tuple = ()
    skills: tuple = ()

    def __post_init__(self):
        if not _text(self.profile.full_name):
            raise ValueError("DocumentModel requires a non-empty candidate name")

    @property
    def interests(self) -> tuple:
        return self.profile.interests


def union_skills(existing, additional) -> tuple:
    """Ordered union: each distinct skill once, first occurrence wins.

    union_skills(["Go", "SQL"], ["SQL", "Rust"]) -> ("Go", "SQL", "Rust")
    """
    combined = list(_text_list(existing)) + list(_text_list(additional))
    return tuple(dict.fromkeys(combined))


def _has_required(raw: dict, entry_cls) -> bool:
    for attr in entry_cls.REQUIRED:
        if not _text(raw.get(attr)):
            return False
    return True


def _join_technologies(value) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(_text_list(value))
    return _text(value)


def parse_education(raw) -> EducationEntry | None:
    if not isinstance(raw, dict) or not _has_required(raw, EducationEntry):
        return None
    return EducationEntry(
        degree=_text(raw.get("degree")),
        institution=_text(raw.get("institution")),
        field=_text(raw.get("field") or raw.get("fieldOfStudy")),
        location=_text(raw.get("location")),
        start_date=_text(raw.get("startDate")),
        end_date=_text(raw.get("endDate")),
    )


def parse_experience(raw) -> ExperienceEntry | None:
    if not isinstance(raw, dict) or not _has_required(raw, ExperienceEntry):
        return None
    return ExperienceEntry(
        company=_text(raw.get("company")),
        position=_text(raw.get("position")),
        location=_text(raw.get("location")),
        start_date=_text(raw.get("startDate")),
        end_date=_text(raw.get("endDate")),
        description=_text(raw.get("description")),
        achievements=_text_list(raw.get("achievements")),
    )


def parse_project(raw) -> ProjectEntry | None:
    if not isinstance(raw, dict) or not _has_required(raw, ProjectEntry):
        return None
    return ProjectEntry(
        title=_text(raw.get("title")),
        description=_text(raw.get("description")),
        technologies=_join_technologies(raw.get("technologies")),
        link=_text(raw.get("link")),
        details=_text_list(raw.get("details")),
    )


def parse_certification(raw) -> CertificationEntry | None:
    if not isinstance(raw, dict) or not _has_required(raw, CertificationEntry):
        return None
    return CertificationEntry(
        title=_text(raw.get("title")),
        issuer=_text(raw.get("issuer")),
        date=_text(raw.get("date")),
        link=_text(raw.get("link")),
    )


def _valid_entries(raw_entries, parser, kind: str) -> tuple:
    if not isinstance(raw_entries, (list, tuple)):
        return ()
    entries = []
    for i, raw in enumerate(raw_entries):
        entry = parser(raw)
        if entry is None:
            logger.debug("Dropping %s entry %d: required field missing", kind, i)
            continue
        entries.append(entry)
    return tuple(entries)


def parse_contact(raw) -> ContactInfo:
    """Phone plus ordered links: LinkedIn, GitHub, Portfolio, then any extra `links`."""
    raw = raw if isinstance(raw, dict) else {}
    links = []
    for key, label in CONTACT_LINK_KEYS:
        url = _text(raw.get(key))
        if url:
            links.append((label, url))
    for item in raw.get("links") or []:
        if not isinstance(item, dict):
            continue
        label, url = _text(item.get("label")), _text(item.get("url"))
        if label and url:
            links.append((label, url))
    return ContactInfo(phone=_text(raw.get("phone")), links=tuple(links))


def build_document_model(
    talent: dict,
    request: dict,
    summary: str = "",
    career_path_title: str | None = None,
) -> DocumentModel:
    """Normalize a talent record + CV request into a DocumentModel.

    Args:
        talent: Talent record (fullname, email, careerStage, skills, interests, selectedPath)
        request: CV request body (additionalSkills, educationDetails, workExperiences,
            projects, certifications, contactInfo)
        summary: Narrative summary text (opaque to the layout engine)
        career_path_title: Resolved title of talent["selectedPath"], if the store knows it

    Raises:
        ValueError: if the talent has no name
    """
    talent = talent or {}
    request = request or {}

    target_path = _text(career_path_title) or _text(talent.get("selectedPath"))
    profile = CandidateProfile(
        full_name=_text(talent.get("fullname")),
        email=_text(talent.get("email")),
        career_stage=_text(talent.get("careerStage")),
        interests=_text_list(talent.get("interests")),
        target_path=target_path,
    )
    return DocumentModel(
        profile=profile,
        contact=parse_contact(request.get("contactInfo")),
        summary=_text(summary),
        education=_valid_entries(request.get("educationDetails"), parse_education, "education"),
        experience=_valid_entries(request.get("workExperiences"), parse_experience, "experience"),
        projects=_valid_entries(request.get("projects"), parse_project, "project"),
        certifications=_valid_entries(
            request.get("certifications"), parse_certification, "certification"
        ),
        skills=union_skills(talent.get("skills"), request.get("additionalSkills")),
    )
