import pytest

from config import Settings


@pytest.fixture
def test_settings() -> Settings:
    """Settings with small scroll budgets and no .env lookup."""
    return Settings(
        _env_file=None,
        openai_api_key="sk-test",
        scroll_max_steps=3,
        fallback_scroll_max_steps=2,
        tile_max_height=100,
    )
