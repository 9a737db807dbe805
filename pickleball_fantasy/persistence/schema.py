"""
SQLite schema for fantasy entities.
Migration-friendly: each table created with IF NOT EXISTS.

Currency and percentages are stored as TEXT and read back as Decimal.
Fantasy points are stored as INTEGER hundredths so increments stay exact
and can be done in a single UPDATE.
"""
from __future__ import annotations


def tournaments_schema() -> str:
    """Read-only to the engine; owned by the tournament platform."""
    return """
    CREATE TABLE IF NOT EXISTS tournaments (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        start_date TEXT NOT NULL,
        end_date TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'UPCOMING'
    );
    """


def players_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS players (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        rank INTEGER,
        skill_level TEXT,
        price TEXT
    );
    """


def matches_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS matches (
        id TEXT PRIMARY KEY,
        tournament_id TEXT NOT NULL,
        player1_id TEXT NOT NULL,
        player2_id TEXT NOT NULL,
        player1_score INTEGER NOT NULL DEFAULT 0,
        player2_score INTEGER NOT NULL DEFAULT 0,
        status TEXT NOT NULL DEFAULT 'SCHEDULED',
        round TEXT,
        FOREIGN KEY (tournament_id) REFERENCES tournaments(id)
    );
    CREATE INDEX IF NOT EXISTS ix_matches_tournament ON matches(tournament_id);
    """


def performances_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS match_performances (
        match_id TEXT NOT NULL,
        player_id TEXT NOT NULL,
        points TEXT NOT NULL,
        aces INTEGER NOT NULL DEFAULT 0,
        faults INTEGER NOT NULL DEFAULT 0,
        winning_shots INTEGER NOT NULL DEFAULT 0,
        PRIMARY KEY (match_id, player_id),
        FOREIGN KEY (match_id) REFERENCES matches(id)
    );
    """


def contests_schema() -> str:
    """status: UPCOMING | IN_PROGRESS | COMPLETED | CANCELLED. rules is the JSON rules blob."""
    return """
    CREATE TABLE IF NOT EXISTS contests (
        id TEXT PRIMARY KEY,
        tournament_id TEXT NOT NULL,
        name TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'UPCOMING',
        prize_pool TEXT NOT NULL DEFAULT '0',
        entry_fee TEXT NOT NULL DEFAULT '0',
        max_entries INTEGER NOT NULL,
        current_entries INTEGER NOT NULL DEFAULT 0,
        rules TEXT,
        prizes_distributed INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        CHECK (current_entries <= max_entries),
        FOREIGN KEY (tournament_id) REFERENCES tournaments(id)
    );
    CREATE INDEX IF NOT EXISTS ix_contests_tournament ON contests(tournament_id);
    """


def fantasy_teams_schema() -> str:
    """One team per user per contest (unique index). total_points in hundredths."""
    return """
    CREATE TABLE IF NOT EXISTS fantasy_teams (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        contest_id TEXT NOT NULL,
        name TEXT NOT NULL,
        total_points INTEGER NOT NULL DEFAULT 0,
        rank INTEGER,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (contest_id) REFERENCES contests(id)
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_fantasy_teams_contest_user ON fantasy_teams(contest_id, user_id);
    CREATE INDEX IF NOT EXISTS ix_fantasy_teams_user ON fantasy_teams(user_id);
    """


def fantasy_team_players_schema() -> str:
    """Partial unique indexes keep at most one captain and one vice-captain per team."""
    return """
    CREATE TABLE IF NOT EXISTS fantasy_team_players (
        team_id TEXT NOT NULL,
        player_id TEXT NOT NULL,
        position INTEGER NOT NULL,
        is_captain INTEGER NOT NULL DEFAULT 0,
        is_vice_captain INTEGER NOT NULL DEFAULT 0,
        PRIMARY KEY (team_id, player_id),
        CHECK (NOT (is_captain = 1 AND is_vice_captain = 1)),
        FOREIGN KEY (team_id) REFERENCES fantasy_teams(id),
        FOREIGN KEY (player_id) REFERENCES players(id)
    );
    CREATE INDEX IF NOT EXISTS ix_fantasy_team_players_player ON fantasy_team_players(player_id);
    CREATE UNIQUE INDEX IF NOT EXISTS ix_fantasy_team_players_captain
        ON fantasy_team_players(team_id) WHERE is_captain = 1;
    CREATE UNIQUE INDEX IF NOT EXISTS ix_fantasy_team_players_vice
        ON fantasy_team_players(team_id) WHERE is_vice_captain = 1;
    """


def team_edits_schema() -> str:
    """Append-only log of accepted roster replacements. phase: pre_tournament | in_progress."""
    return """
    CREATE TABLE IF NOT EXISTS team_edits (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        team_id TEXT NOT NULL,
        edited_at TEXT NOT NULL,
        phase TEXT NOT NULL,
        players_changed INTEGER NOT NULL DEFAULT 0,
        FOREIGN KEY (team_id) REFERENCES fantasy_teams(id)
    );
    CREATE INDEX IF NOT EXISTS ix_team_edits_team ON team_edits(team_id);
    """


def player_match_points_schema() -> str:
    """Unique (team, player, match): the guard that makes reprocessing a match a no-op."""
    return """
    CREATE TABLE IF NOT EXISTS player_match_points (
        team_id TEXT NOT NULL,
        player_id TEXT NOT NULL,
        match_id TEXT NOT NULL,
        points INTEGER NOT NULL,
        breakdown TEXT NOT NULL,
        created_at TEXT NOT NULL,
        PRIMARY KEY (team_id, player_id, match_id),
        FOREIGN KEY (team_id) REFERENCES fantasy_teams(id),
        FOREIGN KEY (match_id) REFERENCES matches(id)
    );
    CREATE INDEX IF NOT EXISTS ix_player_match_points_match ON player_match_points(match_id);
    """


def bonus_awards_schema() -> str:
    """Tournament-level bonuses (e.g. MVP). One row per (team, kind, player)."""
    return """
    CREATE TABLE IF NOT EXISTS bonus_awards (
        team_id TEXT NOT NULL,
        kind TEXT NOT NULL,
        player_id TEXT NOT NULL,
        points INTEGER NOT NULL,
        created_at TEXT NOT NULL,
        PRIMARY KEY (team_id, kind, player_id),
        FOREIGN KEY (team_id) REFERENCES fantasy_teams(id)
    );
    """


def prize_rules_schema() -> str:
    """scope_type: contest | tournament. Contest rules override tournament defaults."""
    return """
    CREATE TABLE IF NOT EXISTS prize_rules (
        scope_type TEXT NOT NULL,
        scope_id TEXT NOT NULL,
        rank INTEGER NOT NULL,
        percentage TEXT NOT NULL,
        min_players INTEGER NOT NULL DEFAULT 0,
        PRIMARY KEY (scope_type, scope_id, rank)
    );
    """


def prize_disbursements_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS prize_disbursements (
        id TEXT PRIMARY KEY,
        contest_id TEXT NOT NULL,
        team_id TEXT NOT NULL,
        user_id TEXT NOT NULL,
        rank INTEGER NOT NULL,
        amount TEXT NOT NULL,
        processing_fee TEXT NOT NULL,
        net_amount TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'PENDING',
        created_at TEXT NOT NULL,
        FOREIGN KEY (contest_id) REFERENCES contests(id),
        FOREIGN KEY (team_id) REFERENCES fantasy_teams(id)
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_prize_disbursements_contest_rank ON prize_disbursements(contest_id, rank);
    """


def all_schema_sql() -> str:
    """Combine all schema DDL for a single execution. Platform tables first, then fantasy tables."""
    return "\n".join([
        tournaments_schema(),
        players_schema(),
        matches_schema(),
        performances_schema(),
        contests_schema(),
        fantasy_teams_schema(),
        fantasy_team_players_schema(),
        team_edits_schema(),
        player_match_points_schema(),
        bonus_awards_schema(),
        prize_rules_schema(),
        prize_disbursements_schema(),
    ])
