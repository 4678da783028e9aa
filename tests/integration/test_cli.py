"""
Functional tests for the maintenance commands of the ``taskhub`` CLI.
"""

import pytest
from click.testing import CliRunner
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text

from taskhub.cli import cli
from taskhub.server.main import create_app


@pytest.fixture
def database_url(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'taskhub.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    return url


def _stored_progress(url):
    engine = create_engine(url)
    try:
        with engine.connect() as conn:
            return dict(conn.execute(text("SELECT id, progress FROM projects")).all())
    finally:
        engine.dispose()


def _reset_progress(url):
    engine = create_engine(url)
    try:
        with engine.begin() as conn:
            conn.execute(text("UPDATE projects SET progress = 0"))
    finally:
        engine.dispose()


class TestRecomputeProgress:
    def test_recomputes_every_project(self, database_url, config_factory):
        with TestClient(create_app(config_factory(DATABASE_URL=database_url))) as client:
            token = client.post(
                "/api/auth/register",
                json={"username": "cli", "email": "cli@example.com", "password": "secret123"},
            ).json()["data"]["token"]
            headers = {"Authorization": f"Bearer {token}"}
            half = client.post("/api/projects", json={"name": "Half"}, headers=headers).json()["data"]
            empty = client.post("/api/projects", json={"name": "Empty"}, headers=headers).json()["data"]
            for status in ("completed", "todo"):
                client.post(
                    f"/api/projects/{half['id']}/tasks",
                    json={"title": status, "status": status},
                    headers=headers,
                )
        _reset_progress(database_url)

        result = CliRunner().invoke(cli, ["recompute-progress", "--system-env"])

        assert result.exit_code == 0, result.output
        assert "Recomputed progress for 2 projects." in result.output
        assert _stored_progress(database_url) == {half["id"]: 50.0, empty["id"]: 0.0}

    def test_empty_database(self, database_url):
        runner = CliRunner()

        assert runner.invoke(cli, ["init-db", "--system-env"]).exit_code == 0
        result = runner.invoke(cli, ["recompute-progress", "--system-env"])

        assert result.exit_code == 0, result.output
        assert "Recomputed progress for 0 projects." in result.output
