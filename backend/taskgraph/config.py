"""Dashboard configuration read from the environment."""

import os

from pydantic import BaseModel


class DashboardConfig(BaseModel):
    """Settings for one dashboard session."""

    tasks_base_url: str = "http://localhost:3000"
    reconnect_delay_seconds: float = 5.0
    stabilizer_warmup_ticks: int = 10
    viewport_width: float = 800.0
    viewport_height: float = 400.0
    notification_ttl_seconds: float = 3.0
    fetch_timeout_seconds: float = 10.0
    layout_seed: int = 0

    @property
    def tasks_url(self) -> str:
        return f"{self.tasks_base_url.rstrip('/')}/api/tasks"

    @property
    def stream_url(self) -> str:
        return f"{self.tasks_base_url.rstrip('/')}/api/tasks/stream"

    @classmethod
    def from_env(cls) -> "DashboardConfig":
        """Build a config from environment variables, falling back to defaults."""
        defaults = cls()
        return cls(
            tasks_base_url=os.getenv("TASKS_BASE_URL", defaults.tasks_base_url),
            reconnect_delay_seconds=float(
                os.getenv("RECONNECT_DELAY_SECONDS", defaults.reconnect_delay_seconds)
            ),
            stabilizer_warmup_ticks=int(
                os.getenv("STABILIZER_WARMUP_TICKS", defaults.stabilizer_warmup_ticks)
            ),
            viewport_width=float(os.getenv("VIEWPORT_WIDTH", defaults.viewport_width)),
            viewport_height=float(os.getenv("VIEWPORT_HEIGHT", defaults.viewport_height)),
            notification_ttl_seconds=float(
                os.getenv("NOTIFICATION_TTL_SECONDS", defaults.notification_ttl_seconds)
            ),
            fetch_timeout_seconds=float(
                os.getenv("FETCH_TIMEOUT_SECONDS", defaults.fetch_timeout_seconds)
            ),
            layout_seed=int(os.getenv("LAYOUT_SEED", defaults.layout_seed)),
        )
