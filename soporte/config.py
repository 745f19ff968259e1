import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = BASE_DIR.parent

MB = 1024 * 1024


def _bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _engine_options(uri: str) -> dict[str, object]:
    options: dict[str, object] = {"pool_pre_ping": True}
    if uri.startswith("sqlite:"):
        options["connect_args"] = {"check_same_thread": False}
    return options


class Config:
    APP_NAME = "soporte-computadores"
    TESTING = False
    DEBUG = False

    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
        default_sqlite_path = PROJECT_ROOT / "instance" / "soporte_computadores.db"
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{default_sqlite_path}")
        self.SQLALCHEMY_DATABASE_URI = self.DATABASE_URL
        self.SQLALCHEMY_TRACK_MODIFICATIONS = False
        self.SQLALCHEMY_ENGINE_OPTIONS = _engine_options(self.SQLALCHEMY_DATABASE_URI)
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
        self.LOG_FORMAT = os.getenv("LOG_FORMAT", "text")
        self.DATA_DIR = os.getenv("DATA_DIR", str(PROJECT_ROOT / "data"))
        self.UPLOAD_DIR = os.getenv("UPLOAD_DIR", str(Path(self.DATA_DIR) / "uploads"))
        # Límite por foto; el límite de la petición cubre las tres fotos más el formulario.
        self.MAX_PHOTO_BYTES = _int_env("MAX_PHOTO_BYTES", 15 * MB)
        self.MAX_CONTENT_LENGTH = _int_env("MAX_CONTENT_LENGTH", 50 * MB)
        self.IMAGE_CACHE_SECONDS = _int_env("IMAGE_CACHE_SECONDS", 86400)
        self.APP_TZ = os.getenv("APP_TZ", "UTC")
        self.AUTO_CREATE_TABLES = _bool_env("AUTO_CREATE_TABLES", True)
        self.FATAL_ON_UNCAUGHT = _bool_env("FATAL_ON_UNCAUGHT", True)
        self.DEBUG = _bool_env("DEBUG", self.DEBUG)


class DevelopmentConfig(Config):
    DEBUG = True

    def __init__(self) -> None:
        super().__init__()
        self.DEBUG = True


class ProductionConfig(Config):
    DEBUG = False

    def __init__(self) -> None:
        super().__init__()
        self.DEBUG = False


class TestingConfig(Config):
    TESTING = True
    DEBUG = False

    def __init__(self) -> None:
        super().__init__()
        self.DEBUG = False
        self.DATABASE_URL = "sqlite:///:memory:"
        self.SQLALCHEMY_DATABASE_URI = self.DATABASE_URL
        self.SQLALCHEMY_ENGINE_OPTIONS = _engine_options(self.SQLALCHEMY_DATABASE_URI)
        self.FATAL_ON_UNCAUGHT = False


def load_config(env: str | None = None) -> Config:
    env_name = (env or os.getenv("APP_ENV") or os.getenv("FLASK_ENV") or "development").lower()

    if env_name in {"test", "testing"}:
        cfg: Config = TestingConfig()
    elif env_name in {"prod", "production"}:
        cfg = ProductionConfig()
    elif env_name in {"dev", "development"}:
        cfg = DevelopmentConfig()
    else:
        cfg = Config()

    cfg.SQLALCHEMY_ENGINE_OPTIONS = _engine_options(cfg.SQLALCHEMY_DATABASE_URI)
    return cfg
