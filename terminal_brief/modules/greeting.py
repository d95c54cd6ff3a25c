"""
Greeting module for terminal-brief.
Displays a personalized, time-of-day greeting with optional emoji.
"""

from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from terminal_brief.core.color import color_bold_text, color_text
from terminal_brief.core.config import BriefConfig
from .base import BriefModule


class TimePeriod(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


TIME_EMOJIS = {
    TimePeriod.MORNING: "☀️",
    TimePeriod.AFTERNOON: "🌤️",
    TimePeriod.EVENING: "🌇",
    TimePeriod.NIGHT: "✨",
}


def get_time_period(now: datetime) -> TimePeriod:
    """
    Map the hour of day to a greeting period.

    Morning 05-11, afternoon 12-17, evening 18-21, night otherwise.
    """
    hour = now.hour
    if 5 <= hour < 12:
        return TimePeriod.MORNING
    elif 12 <= hour < 18:
        return TimePeriod.AFTERNOON
    elif 18 <= hour < 22:
        return TimePeriod.EVENING
    else:
        return TimePeriod.NIGHT


class GreetingModule(BriefModule):
    """Says hello."""

    name = "greeting"

    def __init__(self, clock: Optional[Callable[[], datetime]] = None, **kwargs):
        super().__init__(**kwargs)
        self.clock = clock or datetime.now

    async def setup(self, config: BriefConfig) -> None:
        if not config.user.user_name:
            self.logger.warning("No user name set in configuration")

    async def display(self, config: BriefConfig) -> str:
        period = get_time_period(self.clock())
        user_name = config.user.user_name or "User"

        if not config.display.use_emojis:
            return color_bold_text("magenta", f"Hey {user_name}!")

        greeting = f"👋 {color_bold_text('magenta', f'Hey {user_name}!')}"
        greeting += f" {color_text('blue', f'Good {period.value}')} {TIME_EMOJIS[period]}"
        return greeting
