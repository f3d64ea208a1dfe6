"""Competition schema - all Competition Engine tables

Revision ID: 001
Revises:
Create Date: 2026-10-18

Creates all tables for the Competition Engine:
- teams, seasons: roster provider tables read by the engine
- competitions: Tournaments and leagues
- competition_teams: Team enrollment, seeds and elimination
- games: Completed-result feed
- tournament_brackets: Knockout bracket matches
- competition_standings: League tables
- competition_standing_games: Games applied to each league table
- team_rankings: Ranking cache
- head_to_head: Head-to-head cache
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ### Teams table ###
    op.create_table(
        'teams',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('abbreviation', sa.String(5), nullable=True),
    )

    # ### Seasons table ###
    op.create_table(
        'seasons',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default='0'),
    )

    # ### Competitions table ###
    op.create_table(
        'competitions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('competition_type', sa.Enum(
            'TOURNAMENT', 'LEAGUE',
            name='competitiontype'
        ), nullable=False),
        sa.Column('status', sa.Enum(
            'UPCOMING', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED',
            name='competitionstatus'
        ), server_default='UPCOMING'),
        sa.Column('season_id', sa.Integer(),
                  sa.ForeignKey('seasons.id', ondelete='SET NULL'), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_competitions_competition_type', 'competitions', ['competition_type'])
    op.create_index('ix_competitions_status', 'competitions', ['status'])
    op.create_index('ix_competitions_season_id', 'competitions', ['season_id'])

    # ### Competition teams table ###
    op.create_table(
        'competition_teams',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('competition_id', sa.Integer(),
                  sa.ForeignKey('competitions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('team_id', sa.Integer(),
                  sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('seed', sa.Integer(), nullable=True),
        sa.Column('group_name', sa.String(50), nullable=True),
        sa.Column('is_eliminated', sa.Boolean(), server_default='0'),
        sa.Column('elimination_round', sa.Integer(), nullable=True),
        sa.Column('final_rank', sa.Integer(), nullable=True),
        sa.UniqueConstraint('competition_id', 'team_id', name='uq_competition_teams'),
    )
    op.create_index('ix_competition_teams_competition_id', 'competition_teams', ['competition_id'])
    op.create_index('ix_competition_teams_team_id', 'competition_teams', ['team_id'])

    # ### Games table ###
    op.create_table(
        'games',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('home_team_id', sa.Integer(), sa.ForeignKey('teams.id'), nullable=False),
        sa.Column('away_team_id', sa.Integer(), sa.ForeignKey('teams.id'), nullable=False),
        sa.Column('home_score', sa.Integer(), server_default='0'),
        sa.Column('away_score', sa.Integer(), server_default='0'),
        sa.Column('status', sa.Enum(
            'SCHEDULED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED',
            name='gamestatus'
        ), server_default='SCHEDULED'),
        sa.Column('played_at', sa.DateTime(), nullable=True),
        sa.Column('season_id', sa.Integer(),
                  sa.ForeignKey('seasons.id', ondelete='SET NULL'), nullable=True),
        sa.Column('competition_id', sa.Integer(),
                  sa.ForeignKey('competitions.id', ondelete='SET NULL'), nullable=True),
        sa.CheckConstraint('home_team_id <> away_team_id', name='ck_games_distinct_teams'),
    )
    op.create_index('ix_games_home_team_id', 'games', ['home_team_id'])
    op.create_index('ix_games_away_team_id', 'games', ['away_team_id'])
    op.create_index('ix_games_played_at', 'games', ['played_at'])
    op.create_index('ix_games_season_id', 'games', ['season_id'])

    # ### Tournament brackets table ###
    op.create_table(
        'tournament_brackets',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('competition_id', sa.Integer(),
                  sa.ForeignKey('competitions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('round_number', sa.Integer(), nullable=False),
        sa.Column('round_name', sa.String(100), nullable=False),
        sa.Column('match_number', sa.Integer(), nullable=False),
        sa.Column('home_team_id', sa.Integer(),
                  sa.ForeignKey('teams.id', ondelete='SET NULL'), nullable=True),
        sa.Column('away_team_id', sa.Integer(),
                  sa.ForeignKey('teams.id', ondelete='SET NULL'), nullable=True),
        sa.Column('winner_team_id', sa.Integer(),
                  sa.ForeignKey('teams.id', ondelete='SET NULL'), nullable=True),
        sa.Column('next_bracket_id', sa.Integer(),
                  sa.ForeignKey('tournament_brackets.id', ondelete='SET NULL'), nullable=True),
        sa.Column('next_slot', sa.Enum('HOME', 'AWAY', name='bracketslot'), nullable=True),
        sa.Column('game_id', sa.Integer(),
                  sa.ForeignKey('games.id', ondelete='SET NULL'), nullable=True),
        sa.Column('scheduled_date', sa.DateTime(), nullable=True),
        sa.Column('status', sa.Enum(
            'PENDING', 'SCHEDULED', 'COMPLETED',
            name='bracketmatchstatus'
        ), server_default='PENDING'),
        sa.Column('is_bye', sa.Boolean(), server_default='0'),
        sa.UniqueConstraint('competition_id', 'round_number', 'match_number',
                            name='uq_tournament_brackets_position'),
    )
    op.create_index('ix_tournament_brackets_competition_id', 'tournament_brackets', ['competition_id'])
    op.create_index('ix_tournament_brackets_round_number', 'tournament_brackets', ['round_number'])
    op.create_index('ix_tournament_brackets_game_id', 'tournament_brackets', ['game_id'])

    # ### Competition standings table ###
    op.create_table(
        'competition_standings',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('competition_id', sa.Integer(),
                  sa.ForeignKey('competitions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('team_id', sa.Integer(),
                  sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('rank', sa.Integer(), nullable=True),
        sa.Column('games_played', sa.Integer(), server_default='0'),
        sa.Column('wins', sa.Integer(), server_default='0'),
        sa.Column('losses', sa.Integer(), server_default='0'),
        sa.Column('draws', sa.Integer(), server_default='0'),
        sa.Column('goals_for', sa.Integer(), server_default='0'),
        sa.Column('goals_against', sa.Integer(), server_default='0'),
        sa.Column('goal_difference', sa.Integer(), server_default='0'),
        sa.Column('points', sa.Integer(), server_default='0'),
        sa.Column('form', sa.String(20), server_default=''),
        sa.Column('home_wins', sa.Integer(), server_default='0'),
        sa.Column('home_losses', sa.Integer(), server_default='0'),
        sa.Column('home_draws', sa.Integer(), server_default='0'),
        sa.Column('away_wins', sa.Integer(), server_default='0'),
        sa.Column('away_losses', sa.Integer(), server_default='0'),
        sa.Column('away_draws', sa.Integer(), server_default='0'),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('competition_id', 'team_id', name='uq_competition_standings'),
    )
    op.create_index('ix_competition_standings_competition_id', 'competition_standings', ['competition_id'])
    op.create_index('ix_competition_standings_team_id', 'competition_standings', ['team_id'])
    op.create_index('ix_competition_standings_rank', 'competition_standings', ['rank'])

    # ### Standings ledger table ###
    op.create_table(
        'competition_standing_games',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('competition_id', sa.Integer(),
                  sa.ForeignKey('competitions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('game_id', sa.Integer(),
                  sa.ForeignKey('games.id', ondelete='CASCADE'), nullable=False),
        sa.Column('applied_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('competition_id', 'game_id', name='uq_competition_standing_games'),
    )
    op.create_index('ix_competition_standing_games_competition_id',
                    'competition_standing_games', ['competition_id'])

    # ### Team rankings cache ###
    op.create_table(
        'team_rankings',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('team_id', sa.Integer(),
                  sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('season_id', sa.Integer(),
                  sa.ForeignKey('seasons.id', ondelete='SET NULL'), nullable=True),
        sa.Column('overall_rank', sa.Integer(), nullable=True),
        sa.Column('points', sa.Integer(), server_default='0'),
        sa.Column('rating', sa.Float(), server_default='1000.0'),
        sa.Column('games_played', sa.Integer(), server_default='0'),
        sa.Column('wins', sa.Integer(), server_default='0'),
        sa.Column('losses', sa.Integer(), server_default='0'),
        sa.Column('draws', sa.Integer(), server_default='0'),
        sa.Column('goals_for', sa.Integer(), server_default='0'),
        sa.Column('goals_against', sa.Integer(), server_default='0'),
        sa.Column('clean_sheets', sa.Integer(), server_default='0'),
        sa.Column('longest_win_streak', sa.Integer(), server_default='0'),
        sa.Column('current_streak', sa.String(20), server_default=''),
        sa.Column('last_updated', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('team_id', 'season_id', name='uq_team_rankings'),
    )
    op.create_index('ix_team_rankings_team_id', 'team_rankings', ['team_id'])
    op.create_index('ix_team_rankings_season_id', 'team_rankings', ['season_id'])

    # ### Head-to-head cache ###
    op.create_table(
        'head_to_head',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('team1_id', sa.Integer(),
                  sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('team2_id', sa.Integer(),
                  sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('total_games', sa.Integer(), server_default='0'),
        sa.Column('team1_wins', sa.Integer(), server_default='0'),
        sa.Column('team2_wins', sa.Integer(), server_default='0'),
        sa.Column('draws', sa.Integer(), server_default='0'),
        sa.Column('team1_goals', sa.Integer(), server_default='0'),
        sa.Column('team2_goals', sa.Integer(), server_default='0'),
        sa.Column('last_game_id', sa.Integer(),
                  sa.ForeignKey('games.id', ondelete='SET NULL'), nullable=True),
        sa.Column('last_game_date', sa.DateTime(), nullable=True),
        sa.Column('streak_team_id', sa.Integer(),
                  sa.ForeignKey('teams.id', ondelete='SET NULL'), nullable=True),
        sa.Column('streak_count', sa.Integer(), server_default='0'),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('team1_id', 'team2_id', name='uq_head_to_head_pair'),
        sa.CheckConstraint('team1_id < team2_id', name='ck_head_to_head_ordered'),
    )


def downgrade() -> None:
    op.drop_table('head_to_head')
    op.drop_table('team_rankings')
    op.drop_table('competition_standing_games')
    op.drop_table('competition_standings')
    op.drop_table('tournament_brackets')
    op.drop_table('games')
    op.drop_table('competition_teams')
    op.drop_table('competitions')
    op.drop_table('seasons')
    op.drop_table('teams')
