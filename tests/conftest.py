# Shared pytest fixtures
from __future__ import annotations

import logging
import tempfile
from pathlib import Path

import pytest

from bulk_upload.db.memory import InMemoryGateway
from bulk_upload.logging.init import LOGGER_NAME, reset_logging
from bulk_upload.models.actor import Actor, Owner
from bulk_upload.models.config_models import PipelineConfig
from bulk_upload.services.credentials import CredentialHasher
from tests.helpers import three_row_students


@pytest.fixture(autouse=True)
def _clean_logging():
    """Each test starts without a configured application logger.

    setup_logging() binds its handler to whatever sys.stdout is at the time,
    which differs per test under capsys.
    """
    def _clear() -> None:
        reset_logging()
        logger = logging.getLogger(LOGGER_NAME)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.propagate = True

    _clear()
    yield
    _clear()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """max_upload_bytes: 1048576
bcrypt_rounds: 4
error_log_dir: ./logs
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "bulk_upload.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def pipeline_config() -> PipelineConfig:
    return PipelineConfig(bcrypt_rounds=4)


@pytest.fixture()
def gateway() -> InMemoryGateway:
    return InMemoryGateway()


@pytest.fixture()
def department_id() -> str:
    return "0b8f6f0e-2a51-4c55-9d0c-9a0a8c3c1d10"


@pytest.fixture()
def faculty_id(gateway: InMemoryGateway, department_id: str) -> str:
    return gateway.add_faculty(department_id=department_id, name="Dr. Rao")


@pytest.fixture()
def faculty_actor(faculty_id: str) -> Actor:
    return Actor(id=faculty_id, role="faculty")


@pytest.fixture()
def owner(faculty_id: str, department_id: str) -> Owner:
    return Owner(coordinator_id=faculty_id, department_id=department_id, name="Dr. Rao")


@pytest.fixture()
def institute_actor() -> Actor:
    return Actor(id="6d1f5a8e-8f0c-4d8b-a7f5-2b1c0e9d4a33", role="institute")


@pytest.fixture()
def hasher() -> CredentialHasher:
    # Lowest bcrypt cost keeps the suite fast
    return CredentialHasher(rounds=4)


@pytest.fixture()
def three_row_student_file() -> bytes:
    return three_row_students()
