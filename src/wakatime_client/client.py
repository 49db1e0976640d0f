"""WakaTime API client."""

import logging
from datetime import date
from typing import Any
from urllib.parse import quote

import httpx

from wakatime_client.auth.base import BaseAuth
from wakatime_client.dispatcher import RequestDispatcher
from wakatime_client.exceptions import WakaTimeError
from wakatime_client.utils.parser import JSONObject, parse_json

logger = logging.getLogger(__name__)

CURRENT_USER = "current"

DateLike = date | str


def _segment(value: Any) -> str:
    """Percent-escape a caller supplied path segment."""
    return quote(str(value), safe="")


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _drop_none(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


class WakaTimeClient:
    """Client for the WakaTime REST API.

    Every method returns the decoded JSON body. ``user`` defaults to the
    authenticated user.
    """

    DEFAULT_BASE_URL = "https://wakatime.com"

    def __init__(
        self,
        auth: BaseAuth,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize WakaTime client.

        Args:
            auth: Credential used for every request.
            base_url: Provider root URL; the API lives under /api/v1.
            timeout: Request timeout in seconds.
            http_client: Pre-configured client, mainly for tests.
        """
        self.auth = auth
        self.api_url = f"{base_url.rstrip('/')}/api/v1"
        self._owns_client = http_client is None
        self.client = http_client or httpx.Client(
            headers={"Accept": "application/json"},
            timeout=timeout,
        )
        self.dispatcher = RequestDispatcher(auth, self.client)

    def _call(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> JSONObject:
        query = {key: _query_value(value) for key, value in _drop_none(params or {}).items()}
        request = self.client.build_request(
            method,
            f"{self.api_url}{path}",
            params=query or None,
            json=json,
        )
        response = self.dispatcher.execute(request)

        data = parse_json(response.text)
        if not isinstance(data, dict):
            raise WakaTimeError(f"Expected a JSON object from {path}, got {type(data).__name__}")
        return data

    def _get(self, path: str, **params: Any) -> JSONObject:
        return self._call("GET", path, params=params)

    def _post(self, path: str, body: Any) -> JSONObject:
        return self._call("POST", path, json=body)

    @staticmethod
    def _user_path(user: str, *segments: Any) -> str:
        return "/".join(["/users", _segment(user), *(_segment(s) for s in segments)])

    def get_all_time_since_today(
        self, project: str | None = None, user: str = CURRENT_USER
    ) -> JSONObject:
        """Total time logged since the account (or the given project) was created."""
        return self._get(self._user_path(user, "all_time_since_today"), project=project)

    def get_commit(
        self,
        project: str,
        hash: str,
        branch: str | None = None,
        user: str = CURRENT_USER,
    ) -> JSONObject:
        """Single commit from a project's linked repository."""
        return self._get(
            self._user_path(user, "projects", project, "commits", hash),
            branch=branch,
        )

    def get_commits(
        self,
        project: str,
        author: str | None = None,
        branch: str | None = None,
        page: int | None = None,
        user: str = CURRENT_USER,
    ) -> JSONObject:
        """Commits for a project, with time spent coding in each."""
        return self._get(
            self._user_path(user, "projects", project, "commits"),
            author=author,
            branch=branch,
            page=page,
        )

    def get_data_dumps(self, user: str = CURRENT_USER) -> JSONObject:
        return self._get(self._user_path(user, "data_dumps"))

    def create_data_dump(
        self,
        type: str,
        email_when_finished: bool | None = None,
        user: str = CURRENT_USER,
    ) -> JSONObject:
        """Start a data export.

        Args:
            type: "daily" or "heartbeats".
            email_when_finished: Notify by email once the export is ready.
            user: User name or "current".
        """
        body = _drop_none({"type": type, "email_when_finished": email_when_finished})
        return self._post(self._user_path(user, "data_dumps"), body)

    def get_durations(
        self,
        date: DateLike,
        project: str | None = None,
        branches: str | None = None,
        timeout: int | None = None,
        writes_only: bool | None = None,
        timezone: str | None = None,
        slice_by: str | None = None,
        user: str = CURRENT_USER,
    ) -> JSONObject:
        """Coding activity for one day as durations.

        Args:
            date: Requested day (YYYY-MM-DD).
            project: Only durations for this project.
            branches: Comma separated branch names.
            timeout: Keystroke timeout used to join heartbeats.
            writes_only: Only durations with write activity.
            timezone: Timezone for ``date``.
            slice_by: entity, language, dependencies, os, editor, category or machine.
            user: User name or "current".
        """
        return self._get(
            self._user_path(user, "durations"),
            date=date,
            project=project,
            branches=branches,
            timeout=timeout,
            writes_only=writes_only,
            timezone=timezone,
            slice_by=slice_by,
        )

    def get_editors(self, unreleased: bool | None = None) -> JSONObject:
        """WakaTime IDE plugins with their versions and colors."""
        return self._get("/editors", unreleased=unreleased)

    def get_external_durations(
        self,
        date: DateLike,
        project: str | None = None,
        branches: str | None = None,
        timezone: str | None = None,
        user: str = CURRENT_USER,
    ) -> JSONObject:
        return self._get(
            self._user_path(user, "external_durations"),
            date=date,
            project=project,
            branches=branches,
            timezone=timezone,
        )

    def create_external_duration(
        self,
        external_id: str,
        entity: str,
        type: str,
        start_time: float,
        end_time: float,
        category: str | None = None,
        project: str | None = None,
        branch: str | None = None,
        language: str | None = None,
        meta: str | None = None,
        user: str = CURRENT_USER,
    ) -> JSONObject:
        """Log activity from an external provider with explicit start and end.

        Args:
            external_id: Identifier of the duration on the external provider.
            entity: File path, app or domain the time belongs to.
            type: file, app or domain.
            start_time: UNIX timestamp when the activity started.
            end_time: UNIX timestamp when the activity ended.
            category: Activity category.
            project: Project name.
            branch: Branch name.
            language: Language name.
            meta: Free-form metadata.
            user: User name or "current".
        """
        body = _drop_none(
            {
                "external_id": external_id,
                "entity": entity,
                "type": type,
                "start_time": start_time,
                "end_time": end_time,
                "category": category,
                "project": project,
                "branch": branch,
                "language": language,
                "meta": meta,
            }
        )
        return self._post(self._user_path(user, "external_durations"), body)

    def create_external_durations_bulk(
        self, durations: list[dict[str, Any]], user: str = CURRENT_USER
    ) -> JSONObject:
        """Create several external durations in one request.

        Each item uses the same keys as create_external_duration().
        """
        return self._post(self._user_path(user, "external_durations.bulk"), durations)

    def get_goal(self, goal: str, user: str = CURRENT_USER) -> JSONObject:
        return self._get(self._user_path(user, "goals", goal))

    def get_goals(self, user: str = CURRENT_USER) -> JSONObject:
        return self._get(self._user_path(user, "goals"))

    def get_heartbeats(self, date: DateLike, user: str = CURRENT_USER) -> JSONObject:
        return self._get(self._user_path(user, "heartbeats"), date=date)

    def create_heartbeat(
        self,
        entity: str,
        type: str,
        time: float,
        category: str | None = None,
        project: str | None = None,
        branch: str | None = None,
        language: str | None = None,
        dependencies: str | None = None,
        lines: int | None = None,
        line_additions: int | None = None,
        line_deletions: int | None = None,
        lineno: int | None = None,
        cursorpos: int | None = None,
        is_write: bool | None = None,
        user: str = CURRENT_USER,
    ) -> JSONObject:
        """Record a heartbeat.

        Args:
            entity: File path, app or domain the heartbeat is logged against.
            type: file, app or domain.
            time: UNIX timestamp of the activity.
            category: Activity category.
            project: Project name.
            branch: Branch name.
            language: Language name.
            dependencies: Comma separated dependencies found in the file.
            lines: Total lines in the file.
            line_additions: Lines added since the previous heartbeat.
            line_deletions: Lines removed since the previous heartbeat.
            lineno: Cursor line.
            cursorpos: Cursor column.
            is_write: Whether the heartbeat came from saving the file.
            user: User name or "current".
        """
        body = _drop_none(
            {
                "entity": entity,
                "type": type,
                "time": time,
                "category": category,
                "project": project,
                "branch": branch,
                "language": language,
                "dependencies": dependencies,
                "lines": lines,
                "line_additions": line_additions,
                "line_deletions": line_deletions,
                "lineno": lineno,
                "cursorpos": cursorpos,
                "is_write": is_write,
            }
        )
        return self._post(self._user_path(user, "heartbeats"), body)

    def create_heartbeats_bulk(
        self, heartbeats: list[dict[str, Any]], user: str = CURRENT_USER
    ) -> JSONObject:
        """Create several heartbeats in one request."""
        return self._post(self._user_path(user, "heartbeats.bulk"), heartbeats)

    def get_insights(
        self,
        insight_type: str,
        range: str,
        timeout: int | None = None,
        writes_only: bool | None = None,
        weekday: str | None = None,
        user: str = CURRENT_USER,
    ) -> JSONObject:
        """Insights such as weekday, days or best_day over a range like last_7_days."""
        return self._get(
            self._user_path(user, "insights", insight_type, range),
            timeout=timeout,
            writes_only=writes_only,
            weekday=weekday,
        )

    def get_leaders(
        self,
        language: str | None = None,
        is_hireable: bool | None = None,
        country_code: str | None = None,
        page: int | None = None,
    ) -> JSONObject:
        """Public leaderboard ranked by coding activity."""
        return self._get(
            "/leaders",
            language=language,
            is_hireable=is_hireable,
            country_code=country_code,
            page=page,
        )

    def get_machine_names(self, user: str = CURRENT_USER) -> JSONObject:
        return self._get(self._user_path(user, "machine_names"))

    def get_meta(self) -> JSONObject:
        return self._get("/meta")

    def get_org_dashboard_member_durations(
        self,
        org: str,
        dashboard: str,
        member: str,
        date: DateLike,
        project: str | None = None,
        branches: str | None = None,
        user: str = CURRENT_USER,
    ) -> JSONObject:
        return self._get(
            self._user_path(user, "orgs", org, "dashboards", dashboard, "members", member, "durations"),
            date=date,
            project=project,
            branches=branches,
        )

    def get_org_dashboard_member_summaries(
        self,
        org: str,
        dashboard: str,
        member: str,
        start: DateLike,
        end: DateLike,
        project: str | None = None,
        branches: str | None = None,
        range: str | None = None,
        user: str = CURRENT_USER,
    ) -> JSONObject:
        return self._get(
            self._user_path(user, "orgs", org, "dashboards", dashboard, "members", member, "summaries"),
            start=start,
            end=end,
            project=project,
            branches=branches,
            range=range,
        )

    def get_org_dashboard_members(
        self, org: str, dashboard: str, user: str = CURRENT_USER
    ) -> JSONObject:
        return self._get(self._user_path(user, "orgs", org, "dashboards", dashboard, "members"))

    def get_org_dashboards(self, org: str, user: str = CURRENT_USER) -> JSONObject:
        return self._get(self._user_path(user, "orgs", org, "dashboards"))

    def get_orgs(self, user: str = CURRENT_USER) -> JSONObject:
        return self._get(self._user_path(user, "orgs"))

    def get_private_leaderboards(self, user: str = CURRENT_USER) -> JSONObject:
        return self._get(self._user_path(user, "leaderboards"))

    def get_private_leaderboard_leaders(
        self,
        board: str,
        language: str | None = None,
        country_code: str | None = None,
        page: int | None = None,
        user: str = CURRENT_USER,
    ) -> JSONObject:
        return self._get(
            self._user_path(user, "leaderboards", board),
            language=language,
            country_code=country_code,
            page=page,
        )

    def get_program_languages(self) -> JSONObject:
        return self._get("/program_languages")

    def get_projects(self, q: str | None = None, user: str = CURRENT_USER) -> JSONObject:
        """Projects of the user, optionally filtered by a search term."""
        return self._get(self._user_path(user, "projects"), q=q)

    def get_stats(
        self,
        range: str | None = None,
        timeout: int | None = None,
        writes_only: bool | None = None,
        user: str = CURRENT_USER,
    ) -> JSONObject:
        """Coding stats for a range such as last_7_days or all_time.

        A 202 status means the stats are still being computed; the body is
        returned as-is and carries ``is_up_to_date``/``percent_calculated``.
        """
        segments = ["stats", range] if range else ["stats"]
        return self._get(
            self._user_path(user, *segments),
            timeout=timeout,
            writes_only=writes_only,
        )

    def get_stats_aggregated(self, range: str | None = None) -> JSONObject:
        """Stats aggregated over all WakaTime users."""
        path = f"/stats/{_segment(range)}" if range else "/stats"
        return self._get(path)

    def get_status_bar_today(self, user: str = CURRENT_USER) -> JSONObject:
        """Today's coding time, as shown in editor status bars."""
        return self._get(self._user_path(user, "status_bar", "today"))

    def get_summaries(
        self,
        start: DateLike | None = None,
        end: DateLike | None = None,
        project: str | None = None,
        branches: str | None = None,
        timeout: int | None = None,
        writes_only: bool | None = None,
        timezone: str | None = None,
        range: str | None = None,
        user: str = CURRENT_USER,
    ) -> JSONObject:
        """Daily summaries between start and end, or for a named range.

        Args:
            start: First day (YYYY-MM-DD).
            end: Last day (YYYY-MM-DD).
            project: Only this project.
            branches: Comma separated branch names.
            timeout: Keystroke timeout.
            writes_only: Only write activity.
            timezone: Timezone used for day boundaries.
            range: Named range (Today, Yesterday, Last 7 Days, ...), instead of start/end.
            user: User name or "current".
        """
        return self._get(
            self._user_path(user, "summaries"),
            start=start,
            end=end,
            project=project,
            branches=branches,
            timeout=timeout,
            writes_only=writes_only,
            timezone=timezone,
            range=range,
        )

    def get_user_agents(self, user: str = CURRENT_USER) -> JSONObject:
        return self._get(self._user_path(user, "user_agents"))

    def get_user(self, user: str = CURRENT_USER) -> JSONObject:
        return self._get(self._user_path(user))

    def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "WakaTimeClient":
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()
