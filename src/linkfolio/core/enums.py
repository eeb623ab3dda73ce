"""Enums for the LinkFolio application."""

from enum import Enum


class Plan(str, Enum):
    """Subscription plans."""

    FREE = "free"
    PRO = "pro"


class Theme(str, Enum):
    """Profile page themes."""

    DEFAULT = "default"
    DARK = "dark"
    OCEAN = "ocean"
    SUNSET = "sunset"
    FOREST = "forest"
    MIDNIGHT = "midnight"
    NEON = "neon"
    MINIMAL = "minimal"
    PASTEL = "pastel"


class ButtonStyle(str, Enum):
    """Link button shapes."""

    ROUNDED = "rounded"
    SQUARE = "square"
    PILL = "pill"
    OUTLINE = "outline"


class SocialPlatform(str, Enum):
    """Supported social icon platforms."""

    TWITTER = "twitter"
    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"
    TIKTOK = "tiktok"
    LINKEDIN = "linkedin"
    GITHUB = "github"
    TWITCH = "twitch"
    DISCORD = "discord"
    EMAIL = "email"


class DeviceType(str, Enum):
    """Device classes derived from the user agent."""

    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"
