"""Theme, button style and social platform lookup tables for profile pages."""

from typing import Dict, List, Optional

from .enums import ButtonStyle, SocialPlatform, Theme

THEMES: Dict[Theme, Dict[str, str]] = {
    Theme.DEFAULT: {
        "name": "Default",
        "background": "bg-gradient-to-br from-gray-50 to-gray-100",
        "card": "bg-white",
        "text": "text-gray-900",
        "button": "bg-gray-900 hover:bg-gray-800 text-white",
    },
    Theme.DARK: {
        "name": "Dark",
        "background": "bg-gradient-to-br from-gray-900 to-black",
        "card": "bg-gray-800",
        "text": "text-white",
        "button": "bg-white hover:bg-gray-100 text-gray-900",
    },
    Theme.OCEAN: {
        "name": "Ocean",
        "background": "bg-gradient-to-br from-blue-400 to-cyan-500",
        "card": "bg-white/90 backdrop-blur",
        "text": "text-gray-900",
        "button": "bg-blue-600 hover:bg-blue-700 text-white",
    },
    Theme.SUNSET: {
        "name": "Sunset",
        "background": "bg-gradient-to-br from-orange-400 via-pink-500 to-purple-600",
        "card": "bg-white/90 backdrop-blur",
        "text": "text-gray-900",
        "button": "bg-purple-600 hover:bg-purple-700 text-white",
    },
    Theme.FOREST: {
        "name": "Forest",
        "background": "bg-gradient-to-br from-green-400 to-emerald-600",
        "card": "bg-white/90 backdrop-blur",
        "text": "text-gray-900",
        "button": "bg-emerald-600 hover:bg-emerald-700 text-white",
    },
    Theme.MIDNIGHT: {
        "name": "Midnight",
        "background": "bg-gradient-to-br from-indigo-900 via-purple-900 to-pink-800",
        "card": "bg-white/10 backdrop-blur border border-white/20",
        "text": "text-white",
        "button": "bg-white/20 hover:bg-white/30 text-white border border-white/30",
    },
    Theme.NEON: {
        "name": "Neon",
        "background": "bg-gradient-to-br from-gray-900 via-black to-gray-900",
        "card": "bg-black/40 backdrop-blur border border-cyan-500/30",
        "text": "text-white",
        "button": (
            "bg-gradient-to-r from-cyan-500 to-pink-500 hover:from-cyan-400 "
            "hover:to-pink-400 text-white shadow-lg shadow-cyan-500/50"
        ),
    },
    Theme.MINIMAL: {
        "name": "Minimal",
        "background": "bg-white",
        "card": "bg-white",
        "text": "text-black",
        "button": "bg-black hover:bg-gray-800 text-white",
    },
    Theme.PASTEL: {
        "name": "Pastel",
        "background": "bg-gradient-to-br from-pink-200 via-purple-200 to-blue-200",
        "card": "bg-white/80 backdrop-blur",
        "text": "text-gray-800",
        "button": (
            "bg-gradient-to-r from-pink-300 to-purple-300 hover:from-pink-400 "
            "hover:to-purple-400 text-gray-800"
        ),
    },
}

BUTTON_STYLES: Dict[ButtonStyle, Dict[str, str]] = {
    ButtonStyle.ROUNDED: {"name": "Rounded", "className": "rounded-xl"},
    ButtonStyle.SQUARE: {"name": "Square", "className": "rounded-none"},
    ButtonStyle.PILL: {"name": "Pill", "className": "rounded-full"},
    ButtonStyle.OUTLINE: {"name": "Outline", "className": "rounded-xl border-2"},
}

SOCIAL_PLATFORMS: List[Dict[str, str]] = [
    {"id": SocialPlatform.TWITTER.value, "name": "Twitter/X", "icon": "twitter",
     "placeholder": "https://twitter.com/username"},
    {"id": SocialPlatform.INSTAGRAM.value, "name": "Instagram", "icon": "instagram",
     "placeholder": "https://instagram.com/username"},
    {"id": SocialPlatform.YOUTUBE.value, "name": "YouTube", "icon": "youtube",
     "placeholder": "https://youtube.com/@channel"},
    {"id": SocialPlatform.TIKTOK.value, "name": "TikTok", "icon": "music",
     "placeholder": "https://tiktok.com/@username"},
    {"id": SocialPlatform.LINKEDIN.value, "name": "LinkedIn", "icon": "linkedin",
     "placeholder": "https://linkedin.com/in/username"},
    {"id": SocialPlatform.GITHUB.value, "name": "GitHub", "icon": "github",
     "placeholder": "https://github.com/username"},
    {"id": SocialPlatform.TWITCH.value, "name": "Twitch", "icon": "twitch",
     "placeholder": "https://twitch.tv/username"},
    {"id": SocialPlatform.DISCORD.value, "name": "Discord", "icon": "message-circle",
     "placeholder": "https://discord.gg/invite"},
    {"id": SocialPlatform.EMAIL.value, "name": "Email", "icon": "mail",
     "placeholder": "mailto:you@example.com"},
]


def resolve_theme(name: Optional[str]) -> Theme:
    """Return the stored theme, falling back to the default for unknown values."""
    try:
        return Theme(name)
    except ValueError:
        return Theme.DEFAULT


def resolve_button_style(name: Optional[str]) -> ButtonStyle:
    """Return the stored button style, falling back to rounded."""
    try:
        return ButtonStyle(name)
    except ValueError:
        return ButtonStyle.ROUNDED


def get_platform(platform_id: str) -> Optional[Dict[str, str]]:
    """Look up a social platform entry by id."""
    for platform in SOCIAL_PLATFORMS:
        if platform["id"] == platform_id:
            return platform
    return None
