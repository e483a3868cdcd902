from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .calendar.service import CalendarService
from .core.enums import StatsMode
from .crews.mysql_crew_repository import MySQLCrewRepository
from .crews.repository import CrewRepository
from .database.connection import DatabaseConnection, DBConfig
from .invites.mysql_invite_code_repository import MySQLInviteCodeRepository
from .invites.repository import InviteCodeRepository
from .invites.service import InviteCodeService
from .ranking.service import RankingService
from .stats.service import AdminStatsService, parse_mode


@dataclass(frozen=True)
class Container:
    attendance_repo: AttendanceRepository
    crews_repo: CrewRepository
    invite_codes_repo: InviteCodeRepository

    attendance_service: AttendanceService
    ranking_service: RankingService
    calendar_service: CalendarService
    stats_service: AdminStatsService
    invite_code_service: InviteCodeService


def build_services(
    *,
    attendance_repo: AttendanceRepository,
    crews_repo: CrewRepository,
    invite_codes_repo: InviteCodeRepository,
    stats_mode: StatsMode | str = StatsMode.OPTIMIZED,
) -> Container:
    """Wire services over any repository implementations (MySQL or in-memory)."""
    return Container(
        attendance_repo=attendance_repo,
        crews_repo=crews_repo,
        invite_codes_repo=invite_codes_repo,
        attendance_service=AttendanceService(attendance_repo, crews_repo),
        ranking_service=RankingService(attendance_repo, crews_repo),
        calendar_service=CalendarService(attendance_repo, crews_repo),
        stats_service=AdminStatsService(attendance_repo, crews_repo, default_mode=parse_mode(stats_mode)),
        invite_code_service=InviteCodeService(invite_codes_repo, crews_repo),
    )


def build_container(*, db_config: dict, stats_mode: StatsMode | str = StatsMode.OPTIMIZED) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))
    return build_services(
        attendance_repo=MySQLAttendanceRepository(conn),
        crews_repo=MySQLCrewRepository(conn),
        invite_codes_repo=MySQLInviteCodeRepository(conn),
        stats_mode=stats_mode,
    )
