import base64
import copy
import io
import json
import os
import sys
from pathlib import Path
from typing import Mapping

# Run Qt headless when no display is available.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PIL import Image

# Add src to sys.path so we can import marksheet_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from marksheet_toolkit.builder.rendering import Renderer  # noqa: E402
from marksheet_toolkit.core.models import (  # noqa: E402
    ClassConfig,
    SchoolInfo,
    Student,
    normalize_theme,
)


CLASS_DATA = {
    "id": "c10",
    "className": "Class 10",
    "passPercentage": 33,
    "enableStudentPhoto": False,
    "extraInfoFields": ["Father Name", "Date of Birth"],
    "subjects": [
        {
            "id": "math",
            "name": "Mathematics",
            "type": "Scholastic",
            "exams": [
                {"id": "t1", "name": "Term 1", "maxMarks": 50},
                {"id": "t2", "name": "Term 2", "maxMarks": 50},
            ],
        },
        {
            "id": "sci",
            "name": "Science",
            "type": "Scholastic",
            "exams": [
                {"id": "t1", "name": "Term 1", "maxMarks": 50},
                {"id": "t2", "name": "Term 2", "maxMarks": 50},
            ],
        },
        {"id": "art", "name": "Art & Craft", "type": "Co-Scholastic", "exams": []},
    ],
}

ASHA_DATA = {
    "id": "s1",
    "rollNo": "1",
    "name": "Asha Rao",
    "gender": "Female",
    "className": "Class 10",
    "info": {"Father Name": "Vikram Rao", "Date of Birth": "2010-04-02"},
    "marks": [
        {"subjectId": "math", "examId": "t1", "obtained": 45},
        {"subjectId": "math", "examId": "t2", "obtained": 40},
        {"subjectId": "sci", "examId": "t1", "obtained": 35},
        {"subjectId": "sci", "examId": "t2", "obtained": 30},
    ],
    "coScholasticGrades": [{"subjectId": "art", "grade": "A"}],
}

RAVI_DATA = {
    "id": "s2",
    "rollNo": "2",
    "name": "Ravi Kumar",
    "gender": "Male",
    "className": "Class 10",
    "info": {},
    "marks": [
        {"subjectId": "math", "examId": "t1", "obtained": 10},
        {"subjectId": "sci", "examId": "t1", "obtained": 5},
    ],
    "coScholasticGrades": [],
}

SCHOOL_DATA = {
    "name": "Adarsh Uchchtar Madhyamik Vidyalaya",
    "address": "Station Road, Jaipur",
    "affiliation": "Affiliated to CBSE, New Delhi",
    "logo": None,
    "session": "2024-25",
}


def png_bytes(color: str = "red", size=(8, 8)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def png_data_uri(color: str = "red", size=(8, 8)) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes(color, size)).decode("ascii")


def make_students(count: int, class_name: str = "Class 10"):
    return [
        Student(id=f"s{i}", roll_no=str(i), name=f"Student {i}", class_name=class_name)
        for i in range(1, count + 1)
    ]


class TinyRenderer(Renderer):
    """Renderer double that paints a small blank raster in A4 proportion."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.painted = []

    def paint(self, description, resources: Mapping[str, Image.Image]) -> Image.Image:
        self.painted.append(description)
        width = 21
        height = max(1, round(21 * description.height_mm / description.width_mm))
        return Image.new("RGB", (width, height), "white")


# Common test fixtures
@pytest.fixture
def state_data():
    """A complete persisted state payload (camelCase keys)."""
    return {
        "schoolInfo": dict(SCHOOL_DATA),
        "orientation": "portrait",
        "theme": {"schoolNameColor": "#123456", "margins": {"top": 12}},
        "classes": [copy.deepcopy(CLASS_DATA)],
        "students": [copy.deepcopy(ASHA_DATA), copy.deepcopy(RAVI_DATA)],
    }


@pytest.fixture
def state_file(tmp_path: Path, state_data):
    path = tmp_path / "backup.json"
    path.write_text(json.dumps(state_data), encoding="utf-8")
    return path


@pytest.fixture
def class_config() -> ClassConfig:
    return ClassConfig.from_dict(CLASS_DATA)


@pytest.fixture
def asha() -> Student:
    return Student.from_dict(ASHA_DATA)


@pytest.fixture
def ravi() -> Student:
    return Student.from_dict(RAVI_DATA)


@pytest.fixture
def school() -> SchoolInfo:
    return SchoolInfo.from_dict(SCHOOL_DATA)


@pytest.fixture
def theme():
    return normalize_theme({})


@pytest.fixture
def tiny_renderer() -> TinyRenderer:
    return TinyRenderer()


@pytest.fixture
def sample_image(tmp_path: Path):
    """Create a simple test image on disk."""
    img = Image.new("RGB", (200, 100), color="white")
    img_path = tmp_path / "sample.png"
    img.save(img_path)
    return img_path
