from src.core.config import DEFAULT_CLOSED_WEEKDAYS, Settings, parse_closed_weekdays


def test_closed_weekdays_default_when_unset():
    assert parse_closed_weekdays(None) == DEFAULT_CLOSED_WEEKDAYS
    assert parse_closed_weekdays("  ") == DEFAULT_CLOSED_WEEKDAYS


def test_closed_weekdays_skips_garbage_and_duplicates():
    assert parse_closed_weekdays("0, 6,x,6,9") == (0, 6)


def test_public_base_url_defaults_to_localhost_port():
    config = Settings(PORT=8080, PUBLIC_BASE_URL=None, _env_file=None)
    assert config.public_base_url == "http://localhost:8080"


def test_public_base_url_strips_trailing_slash():
    config = Settings(PUBLIC_BASE_URL="https://book.example.com/", _env_file=None)
    assert config.public_base_url == "https://book.example.com"


def test_smtp_requires_every_credential():
    partial = Settings(SMTP_HOST="smtp.example.com", SMTP_PORT=587, SMTP_USER="bot", _env_file=None)
    assert partial.smtp_configured is False

    complete = Settings(
        SMTP_HOST="smtp.example.com",
        SMTP_PORT=587,
        SMTP_USER="bot",
        SMTP_PASS="secret",
        _env_file=None,
    )
    assert complete.smtp_configured is True
