# freightmatch/config.py
import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
ENV_PATH = os.path.join(PROJECT_ROOT, ".env")
load_dotenv(dotenv_path=ENV_PATH)

DEFAULT_DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")


class Settings(BaseSettings):
    DATA_DIR: str = DEFAULT_DATA_DIR
    FRONTEND_ORIGIN: str = "*"
    COMMISSION_RATE: float = 0.05  # XBOW supported loads only

    BACKEND_API_URL: str = "http://localhost:5000/api"
    BACKEND_TIMEOUT: float = 30

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ENV_PATH
        env_file_encoding = 'utf-8'
        extra = 'ignore'

settings = Settings()
