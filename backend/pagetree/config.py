import os
from dotenv import load_dotenv

load_dotenv()

class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # -------------------------------------------------
    # Page tree
    # -------------------------------------------------
    # Top-level routes owned by the router itself
    RESERVED_ROUTES = [
        route.strip()
        for route in os.getenv(
            "RESERVED_ROUTES",
            "admin,ajax,api,css,js,images,feeds,files,sitemap.xml,_preview,_preview-pending",
        ).split(",")
        if route.strip()
    ]
    # Directories under SITE_ROOT shadow top-level page routes
    SITE_ROOT = os.getenv("SITE_ROOT", os.path.join(os.getcwd(), "site"))
    CACHE_DIR = os.getenv("CACHE_DIR", os.path.join(os.getcwd(), "cache"))

    ROUTE_MAX_LENGTH = 250
    ROUTE_SUFFIX_LIMIT = int(os.getenv("ROUTE_SUFFIX_LIMIT", 1000))

    REVISION_KEEP = 10
    REVISION_MAX_AGE_MONTHS = 1

    WWW_ROOT = os.getenv("WWW_ROOT", "http://localhost/")
    ADMIN_ROOT = os.getenv("ADMIN_ROOT", "http://localhost/admin/")

class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
    SQLALCHEMY_DATABASE_URI = os.getenv("DEV_DATABASE_URI", "sqlite:///pagetree-dev.db")

class ProductionConfig(BaseConfig):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URI")

class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "testing-jwt-secret-with-enough-length-for-hs256"
    ROUTE_SUFFIX_LIMIT = 50

config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
