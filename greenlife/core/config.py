import os

from dotenv import load_dotenv

load_dotenv()


# =========================
# BANCO DE DADOS
# =========================

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./greenlife.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"


# =========================
# JWT / SESSÃO
# =========================

SECRET_KEY = os.getenv("SECRET_KEY", "greenlife-dev-secret")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

ACCESS_COOKIE_NAME = "access_token"
REMEMBER_COOKIE_NAME = "remember_token"
REMEMBER_TOKEN_DAYS = int(os.getenv("REMEMBER_TOKEN_DAYS", "30"))
RESET_TOKEN_MINUTES = int(os.getenv("RESET_TOKEN_MINUTES", "60"))


# =========================
# DIVERSOS
# =========================

SITE_URL = os.getenv("SITE_URL", "http://localhost:8000")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
