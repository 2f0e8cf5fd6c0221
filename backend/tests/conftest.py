import copy
import json
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure backend package is importable
backend_root = Path(__file__).resolve().parents[1]
if str(backend_root) not in sys.path:
    sys.path.insert(0, str(backend_root))


RESUME = {
    "name": "John Doe",
    "email": "john.doe@example.com",
    "phone": "+1-555-1234",
    "linkedin": "linkedin.com/in/johndoe",
    "summary": "Computer Science student with hands-on experience in web development.",
    "skills": ["JavaScript", "Python", "Java", "React", "Node.js", "Git", "Express"],
    "experience": [
        {
            "company": "XYZ Solutions",
            "role": "Software Development Intern",
            "period": "Jun 2024 - Aug 2024",
            "description": [
                "Developed a full-stack web application using React and Node.js.",
                "Collaborated with a team of 5 engineers to ship new features.",
            ],
        },
        {
            "company": "Campus Lab",
            "role": "Research Assistant",
            "period": "Jan 2024 - May 2024",
            "description": ["Built data pipelines in Python."],
        },
        {
            "company": "Freelance",
            "role": "Web Developer",
            "period": "2022 - 2023",
            "description": [],
        },
    ],
    "education": {
        "degree": "B.Tech in Computer Science",
        "university": "IIT Bhubaneswar",
        "period": "2021 - 2025",
    },
}

PLAN = {
    "extractedSkills": ["JavaScript", "Python", "Java", "Git", "Data Structures"],
    "skillGap": ["Data Structures", "Code Reviews"],
    "rewritePlan": "Lead with problem solving; surface Git and code review work in every role.",
}

SECTIONS = {
    "tailoredSummary": "Problem-solving CS student shipping clean JavaScript and Python code.",
    "tailoredExperience": [
        {
            "company": "XYZ Solutions",
            "role": "Software Development Intern",
            "period": "Jun 2024 - Aug 2024",
            "description": [
                "Wrote clean, efficient React and Node.js code for a metrics tracker.",
                "Took part in daily code reviews with a team of 5 engineers.",
            ],
        },
        {
            "company": "Campus Lab",
            "role": "Research Assistant",
            "period": "Jan 2024 - May 2024",
            "description": ["Designed Python data pipelines using core data structures."],
        },
        {
            "company": "Freelance",
            "role": "Web Developer",
            "period": "2022 - 2023",
            "description": [],
        },
    ],
}


class ScriptedAIService:
    """Stands in for AIService: answers prompts from a fixed script, in order."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.prompts = []

    @property
    def calls(self):
        return len(self.prompts)

    async def generate(self, prompt):
        self.prompts.append(prompt)
        if not self.responses:
            raise AssertionError("unexpected model call")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeJobSearch:
    def __init__(self, jobs=None, error=None):
        self.jobs = jobs if jobs is not None else []
        self.error = error
        self.calls = []

    async def search(self, query, page=1):
        self.calls.append((query, page))
        if self.error is not None:
            raise self.error
        return list(self.jobs)

    async def search_or_empty(self, query, page=1):
        try:
            return await self.search(query, page)
        except Exception:
            return []


def fenced(data) -> str:
    return "```json\n" + json.dumps(data, indent=2) + "\n```"


@pytest.fixture
def resume_data():
    return copy.deepcopy(RESUME)


@pytest.fixture
def plan_data():
    return copy.deepcopy(PLAN)


@pytest.fixture
def sections_data():
    return copy.deepcopy(SECTIONS)


@pytest.fixture
def happy_responses(resume_data, plan_data, sections_data):
    """Model answers for a full successful run, with the usual fence noise."""
    return [fenced(resume_data), json.dumps(plan_data), "\n" + fenced(sections_data) + "\n"]


@pytest.fixture
def scripted_ai():
    return ScriptedAIService


@pytest.fixture
def fake_job_search():
    return FakeJobSearch


@pytest.fixture
def client(monkeypatch):
    """Provide a FastAPI TestClient with no real API keys configured."""
    monkeypatch.setenv("CORS_ORIGINS", "*")

    # Avoid accidental usage of real API keys during tests
    monkeypatch.setenv("GEMINI_API_KEY", "")
    monkeypatch.setenv("DEEPSEEK_API_KEY", "")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("SEARCH_API_KEY", "")
    monkeypatch.delenv("STRICT_EXPERIENCE_ALIGNMENT", raising=False)

    from resume_tailor.main import app  # type: ignore

    return TestClient(app)
