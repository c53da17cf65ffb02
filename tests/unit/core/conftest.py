"""Shared fixtures for core unit tests"""

import pytest

from contentidx.core.engine import ContentEngine
from contentidx.core.schemas import load_registry


def post(title="Intro to Python", id_line="", difficulty="beginner", tags="[python, basics]",
         order_line="", extra=""):
    """Build a raw blog post with a YAML front matter header."""
    return (
        "---\n"
        f"{id_line}"
        f"title: {title}\n"
        "description: A gentle start\n"
        "date: 2024-03-01\n"
        "author: Ada\n"
        f"tags: {tags}\n"
        f"difficulty: {difficulty}\n"
        f"{order_line}"
        f"{extra}"
        "---\n"
        "\n"
        "# Heading\n"
        "\n"
        "Body text.\n"
    )


TEAM = [
    {"id": "ada", "order": 1, "name": "Ada", "role": "Founder", "github": "https://github.com/ada"},
    {"id": "grace", "order": 2, "name": "Grace", "role": "Engineer", "skills": ["python", "cobol"]},
    {"id": "linus", "name": "Linus", "role": "Advisor"},
]

PRODUCTS = [
    {"id": "algo-viz", "order": 2, "name": "AlgoViz", "description": "Visualize algorithms",
     "status": "active", "url": "https://example.com/algo-viz", "tags": ["education", "visual"]},
    {"id": "quiz", "order": 1, "name": "Quiz", "description": "Practice questions",
     "status": "beta", "tags": ["education"]},
    {"id": "tutor", "order": 3, "name": "Tutor", "description": "AI tutor",
     "status": "coming-soon"},
]


@pytest.fixture(name="registry")
def registry_fixture():
    return load_registry()


@pytest.fixture(name="engine")
def engine_fixture(registry):
    return ContentEngine(registry)


@pytest.fixture(name="content")
def content_fixture():
    """A complete raw content set covering every kind."""
    return {
        "team-member": [dict(r) for r in TEAM],
        "product": [dict(r) for r in PRODUCTS],
        "document": [
            post(),
            post(title="Graph Search", difficulty="intermediate", tags="[python, graphs]"),
            post(title="Dynamic Programming", difficulty="advanced", tags="[dp]", order_line="order: 1\n"),
        ],
    }


@pytest.fixture(name="make_post")
def make_post_fixture():
    return post


@pytest.fixture(name="team")
def team_fixture():
    return [dict(r) for r in TEAM]


@pytest.fixture(name="products")
def products_fixture():
    return [dict(r) for r in PRODUCTS]
