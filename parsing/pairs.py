"""
Pair Assembler - the interpretation pipeline entry point

interpret_message() turns one raw chat message into a list of results, one
per match line:
    ParseOk(UpdatePair)            resolved and ready for the applier
    ParseErr(kind, context)        why the line could not be resolved
"""

import datetime
from typing import List, Optional, Tuple

from models.entities import ParseErr, ParseOk, ParseResult, Team, UpdatePair, WeekBlock, normalize_cell
from parsing.hints import extract_division_hint, extract_map_hint, split_sides
from parsing.team_resolver import resolve_team, suggest_teams
from parsing.temporal import WhenResult, resolve_when
from parsing.text_normalizer import normalize_text
from parsing.week_resolver import WeekQuery, resolve_week
from utils.error_handling import ErrorKind
from utils.timestamp import now_league, to_league


def week_key_for(block: WeekBlock) -> str:
    """Stable "iso-date|map" key shared by all divisions on that date and map"""
    return block.week_key


def assemble_pair(block: WeekBlock, team_a: Team, team_b: Team, when: WhenResult) -> UpdatePair:
    """Package a resolved match; home/away follow the grid row when there is one"""
    home, away = team_a.name, team_b.name
    slot = block.slot_for(team_a.name, team_b.name)
    if slot and normalize_cell(slot.home) == normalize_cell(team_b.name):
        home, away = away, home
    return UpdatePair(
        division=block.division,
        home=home,
        away=away,
        when_text=when.when_text,
        epoch_seconds=when.epoch_seconds,
        week_key=week_key_for(block),
        block_index=block.index,
        row_index=slot.row_index if slot else None,
        time_defaulted=when.time_defaulted,
    )


def _strip_sides(line: str, sides: Tuple[str, str]) -> str:
    """The line without the team names, so team words never read as dates"""
    remainder = line
    for side in sides:
        remainder = remainder.replace(side, " ", 1)
    return remainder


def _resolve_sides(sides: Tuple[str, str], cache, division_hint: Optional[str]):
    """Resolve both sides; returns (team_a, team_b, error)"""
    side_a, side_b = sides
    team_a = resolve_team(side_a, cache.teams, cache.alias_map, division_hint)
    team_b = resolve_team(side_b, cache.teams, cache.alias_map, division_hint)

    if division_hint and (team_a is None or team_b is None):
        # The hint only narrows the search; retry across the whole roster
        other_a = team_a or resolve_team(side_a, cache.teams, cache.alias_map)
        other_b = team_b or resolve_team(side_b, cache.teams, cache.alias_map)
        if other_a and other_b:
            team_a, team_b = other_a, other_b

    if team_a is None or team_b is None:
        context = {"division": division_hint or "any"}
        if team_a is None:
            context["unresolved_home"] = side_a
            context["suggestions_home"] = suggest_teams(side_a, cache.teams, division_hint)
        if team_b is None:
            context["unresolved_away"] = side_b
            context["suggestions_away"] = suggest_teams(side_b, cache.teams, division_hint)
        return None, None, ParseErr(ErrorKind.TEAM_NOT_FOUND, context)

    if team_a.division != team_b.division:
        return None, None, ParseErr(ErrorKind.CROSS_DIVISION, {
            "home": team_a.name, "home_division": team_a.division,
            "away": team_b.name, "away_division": team_b.division,
        })
    if team_a.name == team_b.name:
        return None, None, ParseErr(ErrorKind.TEAM_NOT_FOUND, {
            "division": team_a.division, "reason": "both sides resolved to " + team_a.name,
        })
    return team_a, team_b, None


def interpret_line(line: str, sides: Tuple[str, str], context_text: str, cache,
                   reference: datetime.datetime, message_time: Optional[datetime.datetime],
                   message_division: Optional[str] = None,
                   message_map: Optional[str] = None) -> ParseResult:
    """Resolve one match line (sides already split) into a pair"""
    division_hint = extract_division_hint(line, cache.divisions) or message_division
    team_a, team_b, error = _resolve_sides(sides, cache, division_hint)
    if error:
        return error
    division = team_a.division

    temporal_text = f"{_strip_sides(line, sides)} {context_text}".strip()
    active = cache.active_week(division, to_league(reference).date())
    when = resolve_when(temporal_text, reference, default_date=active.date if active else None)

    query = WeekQuery(
        division=division,
        team_a=team_a.name,
        team_b=team_b.name,
        map_hint=extract_map_hint(line, cache.map_catalog) or message_map,
        text=temporal_text,
        when=when,
        message_time=message_time,
        reference=reference,
    )
    block = resolve_week(query, cache.weeks_for(division))
    if block is None:
        return ParseErr(ErrorKind.WEEK_NOT_FOUND, {
            "division": division, "home": team_a.name, "away": team_b.name,
        })

    if when.date_defaulted:
        when = when.rebase(block.date)
    return ParseOk(assemble_pair(block, team_a, team_b, when))


def interpret_message(raw: str, cache, reference: Optional[datetime.datetime] = None,
                      message_time: Optional[datetime.datetime] = None) -> List[ParseResult]:
    """Run the full interpretation pipeline over one chat message

    Args:
        raw: Message content as posted
        cache: BatchCache for the current batch
        reference: Anchor for relative dates; batch replays pass the message's
            creation instant, live use defaults to now
        message_time: When the message was sent (week fallback for undated messages)

    Returns:
        One result per match line; a message without any versus delimiter
        yields a single no_vs error.
    """
    reference = reference or message_time or now_league()
    text = normalize_text(raw)

    match_lines = []
    context_lines = []
    for line in text.split("\n") if text else []:
        sides = split_sides(line, cache.divisions)
        if sides:
            match_lines.append((line, sides))
        else:
            context_lines.append(line)

    if not match_lines:
        return [ParseErr(ErrorKind.NO_VS, {"text": text[:120]})]

    context_text = " ".join(context_lines)
    message_division = extract_division_hint(text, cache.divisions)
    message_map = extract_map_hint(text, cache.map_catalog)
    return [
        interpret_line(line, sides, context_text, cache, reference, message_time,
                       message_division, message_map)
        for line, sides in match_lines
    ]
