"""OAuth scopes understood by WakaTime."""

from collections.abc import Iterable
from enum import Enum


class Scope(str, Enum):
    """WakaTime OAuth scope."""

    READ_SUMMARIES = "read_summaries"
    READ_SUMMARIES_CATEGORIES = "read_summaries.categories"
    READ_SUMMARIES_DEPENDENCIES = "read_summaries.dependencies"
    READ_SUMMARIES_EDITORS = "read_summaries.editors"
    READ_SUMMARIES_LANGUAGES = "read_summaries.languages"
    READ_SUMMARIES_MACHINES = "read_summaries.machines"
    READ_SUMMARIES_OPERATING_SYSTEMS = "read_summaries.operating_systems"
    READ_SUMMARIES_PROJECTS = "read_summaries.projects"

    READ_STATS = "read_stats"
    READ_STATS_BEST_DAY = "read_stats.best_day"
    READ_STATS_CATEGORIES = "read_stats.categories"
    READ_STATS_DEPENDENCIES = "read_stats.dependencies"
    READ_STATS_EDITORS = "read_stats.editors"
    READ_STATS_LANGUAGES = "read_stats.languages"
    READ_STATS_MACHINES = "read_stats.machines"
    READ_STATS_OPERATING_SYSTEMS = "read_stats.operating_systems"
    READ_STATS_PROJECTS = "read_stats.projects"

    READ_GOALS = "read_goals"
    READ_ORGS = "read_orgs"
    WRITE_ORGS = "write_orgs"
    READ_PRIVATE_LEADERBOARDS = "read_private_leaderboards"
    WRITE_PRIVATE_LEADERBOARDS = "write_private_leaderboards"
    READ_HEARTBEATS = "read_heartbeats"
    WRITE_HEARTBEATS = "write_heartbeats"
    EMAIL = "email"


def scopes_to_string(scopes: Iterable[Scope | str]) -> str:
    """Join scopes into the comma separated form used in query strings.

    Order is preserved and repeated scopes are kept only once.

    Args:
        scopes: Scope members or raw scope names.

    Returns:
        Comma joined scope list without spaces.
    """
    names = (scope.value if isinstance(scope, Scope) else str(scope).strip() for scope in scopes)
    return ",".join(dict.fromkeys(name for name in names if name))


def parse_scopes(value: str) -> list[str]:
    """Split a comma joined scope string back into scope names."""
    return [name.strip() for name in value.split(",") if name.strip()]
