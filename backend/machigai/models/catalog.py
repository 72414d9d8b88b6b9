"""
Static game catalogs: puzzle themes and difficulty configuration.

Both tables are read-only. Selecting a difficulty only changes which entry
the next generation request uses.
"""

from types import MappingProxyType

from pydantic import BaseModel, ConfigDict

from machigai.models.game import Difficulty, SessionStatus


class Theme(BaseModel):
    """A puzzle setting offered to the player."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    icon: str


class DifficultyConfig(BaseModel):
    """Generation parameters for one difficulty.

    Attributes:
        label: Display name
        count: Number of differences a level must contain
        guidance: Instruction about change magnitude, passed to the level designer
    """

    model_config = ConfigDict(frozen=True)

    label: str
    count: int
    guidance: str


GAME_THEMES: tuple[Theme, ...] = (
    Theme(id="kitchen", name="Busy Kitchen", icon="🍳"),
    Theme(id="forest", name="Enchanted Forest", icon="🌲"),
    Theme(id="city", name="Future City", icon="🏙️"),
    Theme(id="ocean", name="Undersea City", icon="🌊"),
    Theme(id="space", name="Space Station", icon="🚀"),
    Theme(id="toy_store", name="Toy Shop", icon="🧸"),
)

DIFFICULTY_CONFIG = MappingProxyType(
    {
        Difficulty.EASY: DifficultyConfig(
            label="Easy",
            count=3,
            guidance="Make the changes very obvious, large, and high-contrast.",
        ),
        Difficulty.MEDIUM: DifficultyConfig(
            label="Medium",
            count=5,
            guidance="Make the changes clear but requiring some observation.",
        ),
        Difficulty.HARD: DifficultyConfig(
            label="Hard",
            count=7,
            guidance="Make the changes extremely subtle, tiny, and well-integrated into the scene.",
        ),
    }
)

DEFAULT_DIFFICULTY = Difficulty.MEDIUM

# Loading feedback shown by the client for each status
STAGE_MESSAGES = MappingProxyType(
    {
        SessionStatus.IDLE: "Pick a theme to start.",
        SessionStatus.GENERATING_METADATA: "Designing the puzzle...",
        SessionStatus.GENERATING_BASE_IMAGE: "Painting the first picture...",
        SessionStatus.GENERATING_MODIFIED_IMAGE: "Painting the second picture (hiding the differences)...",
        SessionStatus.PLAYING: "Find the differences!",
        SessionStatus.COMPLETED: "All differences found!",
        SessionStatus.FAILED: "Something went wrong while generating the puzzle.",
    }
)


def get_difficulty_config(difficulty: Difficulty) -> DifficultyConfig:
    return DIFFICULTY_CONFIG[difficulty]


def get_theme(theme_id: str) -> Theme | None:
    """Look up a catalog theme by id."""
    for theme in GAME_THEMES:
        if theme.id == theme_id:
            return theme
    return None


def resolve_theme_name(value: str) -> str:
    """Map a catalog id to its display name; free-form themes pass through."""
    theme = get_theme(value.strip())
    return theme.name if theme else value.strip()
