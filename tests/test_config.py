from crmsync.config import DEFAULT_LOCKED_FEATURES, Settings, normalize_database_url


def test_defaults():
    s = Settings.from_env({})

    assert s.database_url == "sqlite:///crmsync.db"
    assert s.service_role_key is None
    assert s.expose_error_details is False
    assert s.trial_days == 15
    assert s.leads_batch_size == 100
    assert s.locked_features == DEFAULT_LOCKED_FEATURES
    assert s.celery_broker_url == "memory://"


def test_from_env():
    s = Settings.from_env(
        {
            "DATABASE_URL": "postgres://u:p@db/crm",
            "SERVICE_ROLE_KEY": " svc ",
            "EXPOSE_ERROR_DETAILS": "true",
            "TRIAL_CHECK_PROCEDURE": "daily_trial_status_check",
            "TRIAL_DAYS": "30",
            "LEADS_BATCH_SIZE": "0",
            "LOCKED_FEATURES": "Campaigns, /reports/ ,",
            "SYNC_BASE_URL": "https://crm.example.com/",
            "LOG_LEVEL": "debug",
        }
    )

    assert s.database_url == "postgresql://u:p@db/crm"
    assert s.service_role_key == "svc"
    assert s.expose_error_details is True
    assert s.trial_check_procedure == "daily_trial_status_check"
    assert s.trial_days == 30
    assert s.leads_batch_size == 1
    assert s.locked_features == ("campaigns", "reports")
    assert s.sync_base_url == "https://crm.example.com"
    assert s.log_level == "DEBUG"


def test_normalize_database_url():
    assert normalize_database_url("postgres://x/y") == "postgresql://x/y"
    assert normalize_database_url("sqlite:///a.db") == "sqlite:///a.db"


def test_flask_config():
    cfg = Settings(database_url="sqlite://", secret_key="k").flask_config()

    assert cfg["SQLALCHEMY_DATABASE_URI"] == "sqlite://"
    assert cfg["SECRET_KEY"] == "k"
    assert cfg["SQLALCHEMY_TRACK_MODIFICATIONS"] is False


def test_mail_and_otp_settings():
    s = Settings.from_env(
        {
            "OTP_TTL_MINUTES": "5",
            "ADMIN_OTP_RECIPIENT": " info@crm.test ",
            "SMTP_HOST": "smtp.test",
            "SMTP_PORT": "2525",
            "SMTP_USER": "mailer",
            "SMTP_PASS": "pw",
        }
    )

    assert s.otp_ttl_minutes == 5
    assert s.admin_otp_recipient == "info@crm.test"
    assert s.smtp_host == "smtp.test"
    assert s.smtp_port == 2525
    assert s.mail_from is None
    assert s.mail_from_name == "CRM Sync"
    assert Settings.from_env({}).otp_ttl_minutes == 10
