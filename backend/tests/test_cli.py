"""
CLI command tests using Flask's CliRunner.
"""

from datetime import timedelta

from stockroom.services import news_service
from stockroom.time_utils import utcnow


def test_users_create(app, store):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["users", "create", "--username", "MARIA", "--password", "CLAVE2024"])

    assert result.exit_code == 0, result.output
    assert "username=MARIA" in result.output
    assert store.get_user_by_username("MARIA") is not None


def test_users_create_rejects_bad_password(app, store):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["users", "create", "--username", "MARIA", "--password", "short"])

    assert result.exit_code == 1
    assert store.get_user_by_username("MARIA") is None


def test_users_create_duplicate(app):
    runner = app.test_cli_runner()
    args = ["users", "create", "--username", "MARIA", "--password", "CLAVE2024"]
    assert runner.invoke(args=args).exit_code == 0
    assert runner.invoke(args=args).exit_code == 1


def test_news_sweep(app, store):
    news_service.create_news(
        data={"title": "VIEJO", "content": "Vencido", "is_permanent": False},
        now=utcnow() - timedelta(days=5),
    )
    news_service.create_news(data={"title": "FIJO", "content": "Siempre", "is_permanent": True})

    result = app.test_cli_runner().invoke(args=["news", "sweep"])

    assert result.exit_code == 0, result.output
    assert "Removed 1" in result.output
    assert store.counts()["business_news"] == 1


def test_sessions_cleanup(app):
    result = app.test_cli_runner().invoke(args=["sessions", "cleanup"])
    assert result.exit_code == 0, result.output
    assert "Removed 0" in result.output


def test_init_db(app, backend):
    result = app.test_cli_runner().invoke(args=["system", "init-db"])
    assert result.exit_code == 0, result.output
    if backend == "sql":
        assert "created" in result.output
    else:
        assert "nothing to do" in result.output
