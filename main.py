"""
Competition Engine - command line entry point.

Every command prints the OperationResult as JSON and exits non-zero when
the operation failed.
"""

import argparse
import json
import logging
import sys
from datetime import date

from config import APP_NAME, APP_VERSION, configure_logging, init_config
from models.competition import CompetitionType
from models.game import GameStatus
from models.schemas import OperationResult


def _print(result: OperationResult) -> int:
    print(json.dumps(result.model_dump(mode="json"), indent=2))
    return 0 if result.ok else 1


def cmd_init_db(app, args) -> int:
    app.init_db()
    return _print(OperationResult.success({"database": app.db.url}))


def cmd_team(app, args) -> int:
    return _print(app.add_team(args.name, abbreviation=args.abbreviation))


def cmd_season(app, args) -> int:
    return _print(app.add_season(args.name, start_date=args.start, end_date=args.end))


def cmd_competition(app, args) -> int:
    return _print(app.create_competition(
        args.name, CompetitionType(args.type), args.start,
        season_id=args.season, end_date=args.end, description=args.description))


def cmd_enroll(app, args) -> int:
    return _print(app.enroll_team(args.competition_id, args.team_id,
                                  seed=args.seed, group_name=args.group))


def cmd_game(app, args) -> int:
    if args.action == "complete":
        return _print(app.complete_game(args.game_id, args.home_score, args.away_score))
    status = GameStatus.COMPLETED if args.completed else GameStatus.SCHEDULED
    return _print(app.record_game(args.home_team_id, args.away_team_id,
                                  args.home_score, args.away_score, status=status,
                                  season_id=args.season, competition_id=args.competition))


def cmd_bracket(app, args) -> int:
    if args.action == "generate":
        return _print(app.generate_bracket(args.competition_id, regenerate=args.regenerate))
    if args.action == "show":
        return _print(app.get_bracket(args.competition_id))
    return _print(app.submit_match_result(args.competition_id, args.match_id,
                                          args.winner, game_id=args.game))


def cmd_standings(app, args) -> int:
    if args.action == "init":
        return _print(app.initialize_standings(args.competition_id, reset=args.reset))
    if args.action == "apply":
        return _print(app.apply_game_to_standings(args.competition_id, args.game_id))
    return _print(app.get_standings(args.competition_id))


def cmd_rankings(app, args) -> int:
    return _print(app.get_all_rankings(season_id=args.season, limit=args.limit))


def cmd_ranking(app, args) -> int:
    return _print(app.get_team_ranking(args.team_id, season_id=args.season))


def cmd_h2h(app, args) -> int:
    return _print(app.get_head_to_head(args.team_a, args.team_b, limit=args.limit))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="competition-engine",
                                     description=f"{APP_NAME} {APP_VERSION}")
    parser.add_argument("--database", help="SQLAlchemy URL (defaults to the data directory)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", action="store_true", help="Also log to the log directory")
    subs = parser.add_subparsers(dest="cmd", required=True)

    # init-db
    p = subs.add_parser("init-db", help="Create all tables")
    p.set_defaults(func=cmd_init_db)

    # roster
    p = subs.add_parser("team", help="Teams")
    team_subs = p.add_subparsers(dest="action", required=True)
    t = team_subs.add_parser("add")
    t.add_argument("name")
    t.add_argument("--abbreviation", default=None)
    p.set_defaults(func=cmd_team)

    p = subs.add_parser("season", help="Seasons")
    season_subs = p.add_subparsers(dest="action", required=True)
    t = season_subs.add_parser("add")
    t.add_argument("name")
    t.add_argument("--start", type=date.fromisoformat, default=None, help="YYYY-MM-DD")
    t.add_argument("--end", type=date.fromisoformat, default=None, help="YYYY-MM-DD")
    p.set_defaults(func=cmd_season)

    # competitions
    p = subs.add_parser("competition", help="Competitions")
    competition_subs = p.add_subparsers(dest="action", required=True)
    c = competition_subs.add_parser("create")
    c.add_argument("name")
    c.add_argument("--type", required=True, choices=[t.value for t in CompetitionType])
    c.add_argument("--start", type=date.fromisoformat, required=True, help="YYYY-MM-DD")
    c.add_argument("--end", type=date.fromisoformat, default=None, help="YYYY-MM-DD")
    c.add_argument("--season", type=int, default=None)
    c.add_argument("--description", default=None)
    p.set_defaults(func=cmd_competition)

    p = subs.add_parser("enroll", help="Enroll a team in a competition")
    p.add_argument("competition_id", type=int)
    p.add_argument("team_id", type=int)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--group", default=None)
    p.set_defaults(func=cmd_enroll)

    # games
    p = subs.add_parser("game", help="Game feed")
    game_subs = p.add_subparsers(dest="action", required=True)
    g = game_subs.add_parser("record")
    g.add_argument("home_team_id", type=int)
    g.add_argument("away_team_id", type=int)
    g.add_argument("--home-score", type=int, default=0)
    g.add_argument("--away-score", type=int, default=0)
    g.add_argument("--completed", action="store_true", help="Record a finished game")
    g.add_argument("--season", type=int, default=None)
    g.add_argument("--competition", type=int, default=None)
    g = game_subs.add_parser("complete")
    g.add_argument("game_id", type=int)
    g.add_argument("home_score", type=int)
    g.add_argument("away_score", type=int)
    p.set_defaults(func=cmd_game)

    # bracket
    p = subs.add_parser("bracket", help="Knockout brackets")
    bracket_subs = p.add_subparsers(dest="action", required=True)
    b = bracket_subs.add_parser("generate")
    b.add_argument("competition_id", type=int)
    b.add_argument("--regenerate", action="store_true", help="Replace an existing bracket")
    b = bracket_subs.add_parser("show")
    b.add_argument("competition_id", type=int)
    b = bracket_subs.add_parser("result")
    b.add_argument("competition_id", type=int)
    b.add_argument("match_id", type=int)
    b.add_argument("--winner", type=int, required=True)
    b.add_argument("--game", type=int, default=None)
    p.set_defaults(func=cmd_bracket)

    # standings
    p = subs.add_parser("standings", help="League tables")
    standings_subs = p.add_subparsers(dest="action", required=True)
    s = standings_subs.add_parser("init")
    s.add_argument("competition_id", type=int)
    s.add_argument("--reset", action="store_true")
    s = standings_subs.add_parser("apply")
    s.add_argument("competition_id", type=int)
    s.add_argument("game_id", type=int)
    s = standings_subs.add_parser("show")
    s.add_argument("competition_id", type=int)
    p.set_defaults(func=cmd_standings)

    # rankings
    p = subs.add_parser("rankings", help="All team rankings")
    p.add_argument("--season", type=int, default=None)
    p.add_argument("--limit", type=int, default=None)
    p.set_defaults(func=cmd_rankings)

    p = subs.add_parser("ranking", help="One team's ranking")
    p.add_argument("team_id", type=int)
    p.add_argument("--season", type=int, default=None)
    p.set_defaults(func=cmd_ranking)

    # head-to-head
    p = subs.add_parser("h2h", help="Head-to-head record")
    p.add_argument("team_a", type=int)
    p.add_argument("team_b", type=int)
    p.add_argument("--limit", type=int, default=None)
    p.set_defaults(func=cmd_h2h)

    return parser


def main(argv=None) -> int:
    """Main entry point for the Competition Engine CLI."""
    args = build_parser().parse_args(argv)

    # Initialize configuration and directories
    init_config()
    configure_logging(logging.DEBUG if args.verbose else logging.INFO, to_file=args.log_file)

    from app import CompetitionEngineApp
    app = CompetitionEngineApp(args.database)
    try:
        return args.func(app, args)
    finally:
        app.close()


if __name__ == "__main__":
    sys.exit(main())
