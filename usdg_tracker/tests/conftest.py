from dotenv import load_dotenv
import pathlib
import pytest

# Automatically load .env from project root
load_dotenv(dotenv_path=pathlib.Path(__file__).parent.parent.parent / ".env")


@pytest.fixture
def history_path(tmp_path):
    return tmp_path / "logs" / "weekly-metrics.jsonl"
