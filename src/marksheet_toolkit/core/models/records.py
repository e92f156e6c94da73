"""
Module: records

Purpose:
    Immutable academic records consumed by the marksheet pipeline:
    exam/subject/class configuration, students with their marks and
    co-scholastic grades, and school information. Each record reads
    and writes the camelCase JSON layout of the persisted app state.

Key Classes:
    - ExamConfig, SubjectConfig, ClassConfig: Class configuration
    - StudentMark, CoScholasticGrade, Student: Student records
    - SchoolInfo: School header information
    - ExamColumn: One MM/obtained column pair of the marks table

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - core.models.state.AppState
    - builder.results.aggregator
    - builder.layout.composer
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional


class SubjectKind(str, Enum):
    """How a subject is assessed."""

    SCHOLASTIC = "Scholastic"
    CO_SCHOLASTIC = "Co-Scholastic"

    @classmethod
    def parse(cls, value: Any) -> SubjectKind:
        """Parse persisted values ("Scholastic", "Co-Scholastic", "CoScholastic")."""
        text = str(value or "").replace("-", "").replace("_", "").replace(" ", "").lower()
        if text == "coscholastic":
            return cls.CO_SCHOLASTIC
        return cls.SCHOLASTIC


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"

    @classmethod
    def parse(cls, value: Any) -> Gender:
        text = str(value or "").strip().lower()
        if text in ("female", "f"):
            return cls.FEMALE
        return cls.MALE


def as_number(value: Any) -> float:
    """
    Coerce a persisted numeric value, treating blanks and junk as zero.

    Partially filled records are a normal operating state, so this never raises.
    """
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return 0.0


def format_number(value: float) -> str:
    """Render a mark without a trailing ``.0`` for whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


# ─────────────────────────────────────────────────────────────────────────────
# Class configuration
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ExamConfig:
    """
    One exam of a scholastic subject (immutable).

    Attributes:
        id: Exam identifier, unique within its subject
        name: Display name like "Term 1"
        max_marks: Maximum marks, must be positive
        weightage: Percentage weight (stored, not used by the totals)
    """

    id: str
    name: str
    max_marks: float
    weightage: float = 0.0

    def __post_init__(self) -> None:
        if self.max_marks <= 0:
            raise ValueError(f"max_marks must be positive: {self.max_marks}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "maxMarks": self.max_marks,
            "weightage": self.weightage,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ExamConfig:
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            max_marks=as_number(data.get("maxMarks")),
            weightage=as_number(data.get("weightage", 0)),
        )


@dataclass(frozen=True)
class SubjectConfig:
    """
    A subject taught in a class (immutable).

    Scholastic subjects carry an ordered tuple of exams; co-scholastic
    subjects are graded by letter only and have no exams.
    """

    id: str
    name: str
    kind: SubjectKind = SubjectKind.SCHOLASTIC
    exams: tuple[ExamConfig, ...] = ()

    def __post_init__(self) -> None:
        ids = [exam.id for exam in self.exams]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate exam ids in subject {self.id!r}: {ids}")

    @property
    def is_scholastic(self) -> bool:
        return self.kind is SubjectKind.SCHOLASTIC

    @property
    def max_marks(self) -> float:
        """Sum of exam maximums."""
        return sum(exam.max_marks for exam in self.exams)

    def get_exam(self, exam_id: str) -> Optional[ExamConfig]:
        return next((exam for exam in self.exams if exam.id == exam_id), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.kind.value,
            "exams": [exam.to_dict() for exam in self.exams],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SubjectConfig:
        kind = SubjectKind.parse(data.get("type", data.get("kind")))
        exams: tuple[ExamConfig, ...] = ()
        if kind is SubjectKind.SCHOLASTIC:
            exams = tuple(ExamConfig.from_dict(e) for e in data.get("exams") or [])
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            kind=kind,
            exams=exams,
        )


@dataclass(frozen=True)
class ExamColumn:
    """One exam column pair (MM, obtained) in the scholastic table."""

    exam_id: str
    name: str


@dataclass(frozen=True)
class ClassConfig:
    """
    Configuration of one class (immutable).

    Attributes:
        id: Class identifier
        class_name: Display name, also the legacy link key for students
        subjects: Scholastic and co-scholastic subjects
        extra_info_fields: Ordered names of free-text student fields
        pass_percentage: Pass threshold in [0, 100], inclusive
        enable_photo: Whether the student photo is printed

    Invariants:
        - subject ids unique within the class
        - exam ids unique within each subject
    """

    id: str
    class_name: str
    subjects: tuple[SubjectConfig, ...] = ()
    extra_info_fields: tuple[str, ...] = ()
    pass_percentage: float = 33.0
    enable_photo: bool = False

    def __post_init__(self) -> None:
        ids = [subject.id for subject in self.subjects]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate subject ids in class {self.class_name!r}: {ids}")
        if not (0 <= self.pass_percentage <= 100):
            raise ValueError(f"pass_percentage must be 0-100: {self.pass_percentage}")

    @property
    def scholastic_subjects(self) -> tuple[SubjectConfig, ...]:
        return tuple(s for s in self.subjects if s.is_scholastic)

    @property
    def co_scholastic_subjects(self) -> tuple[SubjectConfig, ...]:
        return tuple(s for s in self.subjects if not s.is_scholastic)

    @property
    def exam_columns(self) -> tuple[ExamColumn, ...]:
        """
        Ordered union of exam ids across scholastic subjects.

        Columns appear in first-seen order; the name comes from the first
        subject that declares the exam. Subjects lacking an exam get a
        blank cell in that column.
        """
        columns: list[ExamColumn] = []
        seen: set[str] = set()
        for subject in self.scholastic_subjects:
            for exam in subject.exams:
                if exam.id not in seen:
                    seen.add(exam.id)
                    columns.append(ExamColumn(exam_id=exam.id, name=exam.name))
        return tuple(columns)

    def get_subject(self, subject_id: str) -> Optional[SubjectConfig]:
        return next((s for s in self.subjects if s.id == subject_id), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "className": self.class_name,
            "subjects": [s.to_dict() for s in self.subjects],
            "extraInfoFields": list(self.extra_info_fields),
            "passPercentage": self.pass_percentage,
            "enableStudentPhoto": self.enable_photo,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ClassConfig:
        return cls(
            id=str(data["id"]),
            class_name=str(data.get("className", "")),
            subjects=tuple(SubjectConfig.from_dict(s) for s in data.get("subjects") or []),
            extra_info_fields=tuple(str(f) for f in data.get("extraInfoFields") or []),
            pass_percentage=as_number(data.get("passPercentage", 33)),
            enable_photo=bool(data.get("enableStudentPhoto", False)),
        )


# ─────────────────────────────────────────────────────────────────────────────
# Students
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class StudentMark:
    """Marks obtained in one exam. Not clamped to the exam maximum."""

    subject_id: str
    exam_id: str
    obtained: float

    def to_dict(self) -> dict[str, Any]:
        return {"subjectId": self.subject_id, "examId": self.exam_id, "obtained": self.obtained}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StudentMark:
        return cls(
            subject_id=str(data.get("subjectId", "")),
            exam_id=str(data.get("examId", "")),
            obtained=as_number(data.get("obtained")),
        )


@dataclass(frozen=True)
class CoScholasticGrade:
    subject_id: str
    grade: str

    def to_dict(self) -> dict[str, Any]:
        return {"subjectId": self.subject_id, "grade": self.grade}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CoScholasticGrade:
        return cls(subject_id=str(data.get("subjectId", "")), grade=str(data.get("grade") or ""))


@dataclass(frozen=True)
class Student:
    """
    A student record (immutable).

    Attributes:
        id: Student identifier
        roll_no: Roll number, unique within a class
        name: Full name
        gender: Gender
        class_name: Name of the owning class (legacy link)
        info: Values of the class's extra info fields
        marks: Scholastic marks
        co_scholastic_grades: Letter grades for co-scholastic subjects
        photo: Optional data URI, base64 payload or file path
        class_id: Optional explicit link to ClassConfig.id; preferred over class_name

    Example:
        >>> s = Student(id="st1", roll_no="12", name="Asha", class_name="Class 10")
        >>> s.info_value("Father Name")
        ''
    """

    id: str
    roll_no: str
    name: str
    gender: Gender = Gender.MALE
    class_name: str = ""
    info: Mapping[str, str] = field(default_factory=dict)
    marks: tuple[StudentMark, ...] = ()
    co_scholastic_grades: tuple[CoScholasticGrade, ...] = ()
    photo: Optional[str] = None
    class_id: Optional[str] = None

    def info_value(self, field_name: str) -> str:
        """Value of an extra info field, blank when missing."""
        value = self.info.get(field_name)
        return "" if value is None else str(value)

    def grade_for(self, subject_id: str) -> Optional[str]:
        grade = next((g.grade for g in self.co_scholastic_grades if g.subject_id == subject_id), None)
        return grade or None

    def belongs_to(self, class_config: ClassConfig) -> bool:
        """Id link when present, class name otherwise."""
        if self.class_id:
            return self.class_id == class_config.id
        return self.class_name == class_config.class_name

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "rollNo": self.roll_no,
            "name": self.name,
            "gender": self.gender.value,
            "className": self.class_name,
            "info": dict(self.info),
            "marks": [m.to_dict() for m in self.marks],
            "coScholasticGrades": [g.to_dict() for g in self.co_scholastic_grades],
        }
        if self.photo:
            data["photo"] = self.photo
        if self.class_id:
            data["classId"] = self.class_id
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Student:
        info = data.get("info") or {}
        return cls(
            id=str(data["id"]),
            roll_no=str(data.get("rollNo", "")),
            name=str(data.get("name", "")),
            gender=Gender.parse(data.get("gender")),
            class_name=str(data.get("className", "")),
            info={str(k): "" if v is None else str(v) for k, v in info.items()},
            marks=tuple(StudentMark.from_dict(m) for m in data.get("marks") or []),
            co_scholastic_grades=tuple(
                CoScholasticGrade.from_dict(g) for g in data.get("coScholasticGrades") or []
            ),
            photo=data.get("photo") or None,
            class_id=data.get("classId") or None,
        )


@dataclass(frozen=True)
class SchoolInfo:
    """School header information printed on every marksheet."""

    name: str = ""
    address: str = ""
    affiliation: str = ""
    logo: Optional[str] = None
    session: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "address": self.address,
            "affiliation": self.affiliation,
            "logo": self.logo,
            "session": self.session,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SchoolInfo:
        return cls(
            name=str(data.get("name", "")),
            address=str(data.get("address", "")),
            affiliation=str(data.get("affiliation", "")),
            logo=data.get("logo") or None,
            session=str(data.get("session", "")),
        )
