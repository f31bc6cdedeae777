"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.db.models import Base  # noqa: E402
from src.flows.models import (  # noqa: E402
    GotoBlock,
    GotoBlockConfig,
    InformationBlock,
    InformationBlockConfig,
    QuestionBlock,
    QuestionBlockConfig,
    QuestionType,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (in-memory database)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across connections, with all tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    """A session bound to the in-memory engine."""
    factory = sessionmaker(bind=engine, autoflush=False)
    session = factory()
    yield session
    session.close()


@pytest.fixture
def sample_steps():
    """A small, fully valid flow: one information block and three safety questions."""
    return [
        InformationBlock(
            id="info-1",
            order=0,
            config=InformationBlockConfig(content="Wear hearing protection in the press hall at all times."),
        ),
        QuestionBlock(
            id="q-1",
            order=1,
            config=QuestionBlockConfig(
                question_text="Which safety equipment is required in the press hall?",
                question_type=QuestionType.MULTIPLE_CHOICE,
                options=["Hearing protection", "Sunglasses", "Nothing"],
                correct_option=0,
                hint="The press hall is loud.",
                points=5,
            ),
        ),
        QuestionBlock(
            id="q-2",
            order=2,
            config=QuestionBlockConfig(
                question_text="Name the hazard created by the hydraulic press.",
                question_type=QuestionType.TEXT_INPUT,
                ideal_answer="Crushing",
                hint="Think about moving parts.",
                points=10,
            ),
        ),
        QuestionBlock(
            id="q-3",
            order=3,
            config=QuestionBlockConfig(
                question_text="What is the emergency stop distance in metres?",
                question_type=QuestionType.NUMERICAL_INPUT,
                ideal_answer="2",
                hint="It is marked on the floor.",
                points=15,
            ),
        ),
    ]


@pytest.fixture
def goto_block():
    return GotoBlock(id="goto-1", order=0, config=GotoBlockConfig(instructions="Walk to checkpoint B."))
